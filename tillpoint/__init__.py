"""
tillpoint — the checkout engine of a small-retail register.

    from tillpoint import Register, MemoryBackend, demo_products

    backend = MemoryBackend()
    backend.seed(demo_products("MY STORE"))
    register = Register(backend)
"""

from tillpoint import catalog
from tillpoint import checkout
from tillpoint._types import (
    Fallible,
    ProductId,
    SaleId,
    StoreName,
    Clock,
)
from tillpoint.backend import Backend, MemoryBackend, SQLAlchemyBackend, create_database, demo_products
from tillpoint.cart import Cart
from tillpoint.config import Settings
from tillpoint.domain import CartLine, Operator, Product, Receipt, Sale, SaleLine
from tillpoint.register import CartView, Register
from tillpoint.roles import Capability, Role
from tillpoint.shift import ShiftCounters, ShiftStats

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "checkout",
    "Fallible",
    "ProductId",
    "SaleId",
    "StoreName",
    "Clock",
    "Backend",
    "MemoryBackend",
    "SQLAlchemyBackend",
    "create_database",
    "demo_products",
    "Cart",
    "Settings",
    "CartLine",
    "Operator",
    "Product",
    "Receipt",
    "Sale",
    "SaleLine",
    "CartView",
    "Register",
    "Capability",
    "Role",
    "ShiftCounters",
    "ShiftStats",
)
