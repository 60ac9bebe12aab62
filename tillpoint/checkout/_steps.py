"""
Checkout steps — one function per backend write.

Each step is a LazyCoroResult: nothing is sent until it is awaited, and
backend exceptions come back as typed errors.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from combinators import parallel as C_parallel, lift as L
from kungfu import LazyCoroResult, Result, Ok, Error

from tillpoint._types import Clock, Fallible, SaleId
from tillpoint.backend import Backend
from tillpoint.cart import Cart
from tillpoint.checkout._types import CheckoutPlan
from tillpoint.domain import CartLine, Operator, Sale, SaleLine
from tillpoint.errors import CheckoutFailed, EmptyCart, StockIssue, StockSyncFailure
from tillpoint.lift import backend_call
from tillpoint.money import compute_total

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Step 1 — freeze the plan
# ═══════════════════════════════════════════════════════════════════════════════


def plan_checkout(cart: Cart, operator: Operator, clock: Clock) -> Result[CheckoutPlan, EmptyCart]:
    if cart.is_empty:
        return Error(EmptyCart())

    lines = cart.lines
    return Ok(CheckoutPlan(
        store=operator.store,
        operator=operator.display_name,
        lines=lines,
        total=compute_total(lines),
        created_at=clock(),
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Step 2 — sale header
# ═══════════════════════════════════════════════════════════════════════════════


def create_sale(backend: Backend, plan: CheckoutPlan) -> Fallible[Sale, CheckoutFailed]:
    new_sale = plan.new_sale()
    return backend_call(
        "create_sale",
        lambda: backend.create_sale(new_sale),
        on_error=lambda e: CheckoutFailed(str(e)),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Step 3 — line items, one batched write
# ═══════════════════════════════════════════════════════════════════════════════


def write_lines(
    backend: Backend,
    sale_id: SaleId,
    lines: Sequence[CartLine],
) -> Fallible[None, str]:
    rows = [SaleLine.from_cart(sale_id, line) for line in lines]
    return backend_call(
        "insert_sale_lines",
        lambda: backend.insert_sale_lines(sale_id, rows),
        on_error=str,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Step 4 — stock, all lines at once
# ═══════════════════════════════════════════════════════════════════════════════


def decrement(backend: Backend, line: CartLine) -> Fallible[None, StockIssue]:
    """Write snapshot stock minus the sold quantity."""
    new_stock = line.stock - line.quantity
    return backend_call(
        "update_stock",
        lambda: backend.update_stock(line.product_id, new_stock),
        on_error=lambda e: StockIssue(line.product_id, str(e)),
    )


async def sync_stock(backend: Backend, lines: Sequence[CartLine]) -> StockSyncFailure | None:
    """
    Fire every decrement concurrently and wait for all of them.

    A failed decrement never stops the others. Returns None when every
    update landed.
    """
    if not lines:
        return None

    def make_op(line: CartLine) -> LazyCoroResult[Result[None, StockIssue], str]:
        async def impl() -> Result[None, StockIssue]:
            return await decrement(backend, line)
        return L.catching_async(impl, on_error=str)

    parallel_result = await C_parallel(*[make_op(line) for line in lines])

    match parallel_result:
        case Error(e):
            issues = tuple(StockIssue(line.product_id, str(e)) for line in lines)
        case Ok(results):
            issues = tuple(r.error for r in results if isinstance(r, Error))

    if not issues:
        return None

    failure = StockSyncFailure(issues)
    logger.warning("%s", failure)
    return failure


__all__ = (
    "plan_checkout",
    "create_sale",
    "write_lines",
    "decrement",
    "sync_stock",
)
