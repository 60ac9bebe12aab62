"""
Checkout types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tillpoint._types import StoreName
from tillpoint.domain import CartLine, NewSale, Receipt, Sale
from tillpoint.errors import StockSyncFailure

# ═══════════════════════════════════════════════════════════════════════════════
# Plan — the cart frozen at confirm time
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutPlan:
    """
    Everything checkout writes, captured before the first backend call.

    Cart changes after this point do not reach the sale.
    """

    store: StoreName
    operator: str
    lines: tuple[CartLine, ...]
    total: Decimal
    created_at: datetime

    def new_sale(self) -> NewSale:
        return NewSale(
            store=self.store,
            operator=self.operator,
            total=self.total,
            created_at=self.created_at,
        )

    def receipt(self, sale: Sale) -> Receipt:
        return Receipt(sale=sale, lines=self.lines)


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """Committed sale, with a warning when some stock was not updated."""

    receipt: Receipt
    stock_sync: StockSyncFailure | None = None
    repaired: bool = False

    @property
    def sale(self) -> Sale:
        return self.receipt.sale

    @property
    def clean(self) -> bool:
        return self.stock_sync is None


__all__ = ("CheckoutPlan", "CheckoutResult")
