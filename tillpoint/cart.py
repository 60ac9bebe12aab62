"""
Cart — the pending sale for one operator session.

Stock rules are enforced here, before anything reaches the network:

    cart.add(product)                # Error(OutOfStock) / Error(InsufficientStock)
    cart.update_quantity(pid, +1)    # silently ignored past the stock snapshot
    cart.update_quantity(pid, -1)    # removes the line when it drops below 1
"""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

from kungfu import Result, Ok, Error

from tillpoint._types import ProductId
from tillpoint.domain import CartLine, Product
from tillpoint.errors import OutOfStock, InsufficientStock
from tillpoint.money import compute_total, total_items


class Cart:
    """Insertion-ordered lines keyed by product id. Volatile, never persisted."""

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        self._lines: dict[ProductId, CartLine] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add(self, product: Product) -> Result[CartLine, OutOfStock | InsufficientStock]:
        """Add one unit. Rejected (cart unchanged) when stock would be exceeded."""
        existing = self._lines.get(product.id)

        if existing is None:
            if product.stock <= 0:
                return Error(OutOfStock(product.id, product.name))
            line = CartLine.first(product)
            self._lines[product.id] = line
            return Ok(line)

        if existing.quantity + 1 > existing.stock:
            return Error(InsufficientStock(existing.product_id, existing.name, existing.stock))

        line = existing.with_quantity(existing.quantity + 1)
        self._lines[product.id] = line
        return Ok(line)

    def update_quantity(self, product_id: ProductId, delta: int) -> CartLine | None:
        """
        Apply delta to a line.

        Below 1 the line is removed; above the stock snapshot nothing changes.
        Returns the line as it stands afterwards (None when absent).
        """
        existing = self._lines.get(product_id)
        if existing is None:
            return None

        quantity = existing.quantity + delta
        if quantity < 1:
            del self._lines[product_id]
            return None
        if quantity > existing.stock:
            return existing

        line = existing.with_quantity(quantity)
        self._lines[product_id] = line
        return line

    def remove(self, product_id: ProductId) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def get(self, product_id: ProductId) -> CartLine | None:
        return self._lines.get(product_id)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def total_items(self) -> int:
        return total_items(self._lines.values())

    def total_amount(self) -> Decimal:
        return compute_total(self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def __repr__(self) -> str:
        return f"Cart(lines={len(self._lines)}, items={self.total_items()})"


__all__ = ("Cart",)
