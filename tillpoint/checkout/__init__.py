"""
Checkout — turning a cart into a recorded sale.

    from tillpoint import checkout as K

    orchestrator = K.CheckoutOrchestrator(backend, cart, counters, clock, K.keep_cart())
    result = await orchestrator.checkout(operator)
"""

from __future__ import annotations

from tillpoint.checkout._types import CheckoutPlan, CheckoutResult
from tillpoint.checkout._policy import (
    PartialCommitCart,
    CheckoutPolicy,
    keep_cart,
    clear_cart,
)
from tillpoint.checkout._steps import (
    plan_checkout,
    create_sale,
    write_lines,
    decrement,
    sync_stock,
)
from tillpoint.checkout._orchestrator import CheckoutOrchestrator

__all__ = (
    "CheckoutPlan",
    "CheckoutResult",
    "PartialCommitCart",
    "CheckoutPolicy",
    "keep_cart",
    "clear_cart",
    "plan_checkout",
    "create_sale",
    "write_lines",
    "decrement",
    "sync_stock",
    "CheckoutOrchestrator",
)
