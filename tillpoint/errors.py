"""
Error taxonomy.

Errors are values: cart operations and checkout return them inside
kungfu.Error instead of raising. `retry_safe` tells the caller whether
running the whole operation again can duplicate a sale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from tillpoint._types import ProductId, SaleId, StoreName
from tillpoint.domain import CartLine, Receipt, Sale


class BackendError(Exception):
    """Raised by backend implementations when a call cannot be completed."""


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Errors — synchronous rejections
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OutOfStock(Exception):
    product_id: ProductId
    name: str

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"{self.name} is out of stock"


@dataclass(frozen=True, slots=True)
class InsufficientStock(Exception):
    product_id: ProductId
    name: str
    available: int

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Only {self.available} of {self.name} available"


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EmptyCart(Exception):
    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return "Cart is empty"


@dataclass(frozen=True, slots=True)
class CheckoutInProgress(Exception):
    """A checkout for this cart is already in flight."""

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return "A checkout is already in progress"


@dataclass(frozen=True, slots=True)
class CheckoutFailed(Exception):
    """The sale could not be created. Nothing was written; the cart is intact."""

    message: str

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Sale could not be recorded: {self.message}"


@dataclass(frozen=True, slots=True)
class PartialCommit(Exception):
    """
    The sale exists but its line items were not written.

    Running checkout again would record a second sale; use the repair
    path with this value instead.
    """

    message: str
    receipt: Receipt
    missing: tuple[CartLine, ...]

    retry_safe: ClassVar[bool] = False

    @property
    def sale(self) -> Sale:
        return self.receipt.sale

    def __str__(self) -> str:
        return (
            f"Sale {self.sale.id} recorded without its {len(self.missing)} "
            f"line item(s): {self.message}"
        )


@dataclass(frozen=True, slots=True)
class NothingToRepair(Exception):
    """Repair was requested for a sale that has no pending line items."""

    sale_id: SaleId | None

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        if self.sale_id is None:
            return "No sale is waiting for repair"
        return f"Sale {self.sale_id} has no pending line items"


@dataclass(frozen=True, slots=True)
class StockIssue:
    product_id: ProductId
    message: str


@dataclass(frozen=True, slots=True)
class StockSyncFailure(Exception):
    """
    Warning: some stock updates failed after a committed sale.

    The sale stands; stock is corrected by the next catalog refresh.
    """

    issues: tuple[StockIssue, ...]

    retry_safe: ClassVar[bool] = True

    @property
    def product_ids(self) -> tuple[ProductId, ...]:
        return tuple(issue.product_id for issue in self.issues)

    def __str__(self) -> str:
        return f"Stock not updated for: {', '.join(self.product_ids)}"


# ═══════════════════════════════════════════════════════════════════════════════
# Access
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NotPermitted(Exception):
    role: str
    capability: str

    retry_safe: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"Role {self.role} may not {self.capability}"


# ═══════════════════════════════════════════════════════════════════════════════
# Refresh Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogError(Exception):
    store: StoreName
    message: str

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Catalog for {self.store} unavailable: {self.message}"


@dataclass(frozen=True, slots=True)
class SalesQueryError(Exception):
    store: StoreName
    message: str

    retry_safe: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Sales for {self.store} unavailable: {self.message}"


type CartError = OutOfStock | InsufficientStock | CheckoutInProgress
type CheckoutError = EmptyCart | CheckoutInProgress | CheckoutFailed | PartialCommit
type RepairError = NothingToRepair | CheckoutInProgress | PartialCommit
type RefreshError = CatalogError | SalesQueryError


__all__ = (
    "BackendError",
    "OutOfStock",
    "InsufficientStock",
    "EmptyCart",
    "CheckoutInProgress",
    "CheckoutFailed",
    "PartialCommit",
    "NothingToRepair",
    "StockIssue",
    "StockSyncFailure",
    "NotPermitted",
    "CatalogError",
    "SalesQueryError",
    "CartError",
    "CheckoutError",
    "RepairError",
    "RefreshError",
)
