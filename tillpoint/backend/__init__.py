"""
Backends — where sales and products live.

    from tillpoint.backend import MemoryBackend, demo_products

    backend = MemoryBackend()
    backend.seed(demo_products("Downtown"))
"""

from __future__ import annotations

from tillpoint.backend._protocol import Backend
from tillpoint.backend._memory import OPERATIONS, MemoryBackend, demo_products
from tillpoint.backend._sqlalchemy import SQLAlchemyBackend, create_database

__all__ = (
    "Backend",
    "OPERATIONS",
    "MemoryBackend",
    "demo_products",
    "SQLAlchemyBackend",
    "create_database",
)
