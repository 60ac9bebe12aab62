"""
Catalog types.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from tillpoint._types import ProductId, StoreName
from tillpoint.domain import DEFAULT_LOW_STOCK, Product

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog — one store's product list at a point in time
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Catalog:
    """
    Snapshot of a store's products, ordered by name.

    The backend stays the source of truth; a snapshot is only as fresh as
    `fetched_at`.
    """

    store: StoreName
    products: tuple[Product, ...]
    fetched_at: datetime

    def find(self, product_id: ProductId) -> Product | None:
        """Exact id match first, then a case-insensitive one."""
        for product in self.products:
            if product.id == product_id:
                return product
        wanted = product_id.casefold()
        for product in self.products:
            if product.id.casefold() == wanted:
                return product
        return None

    def available(self) -> tuple[Product, ...]:
        return tuple(p for p in self.products if not p.sold_out)

    def low_stock(self, threshold: int = DEFAULT_LOW_STOCK) -> tuple[Product, ...]:
        return tuple(p for p in self.products if p.low_stock(threshold))

    def __len__(self) -> int:
        return len(self.products)


# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Tier(Protocol):
    """
    Catalog storage tier.

    Implement this to keep snapshots somewhere other than process memory,
    e.g. to share one snapshot between registers on the same device.
    """

    @property
    def name(self) -> str:
        """Tier name for debugging."""
        ...

    async def get(self, key: str) -> Catalog | None:
        """Get snapshot. Returns None on miss."""
        ...

    async def set(self, key: str, value: Catalog) -> None:
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Local Tier — recently used snapshots in process memory
# ═══════════════════════════════════════════════════════════════════════════════


class LocalTier:
    """
    In-memory tier holding the most recently used snapshots.

    Example:
        tier = LocalTier(max_size=4)
    """

    def __init__(self, max_size: int = 16) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._snapshots: OrderedDict[str, Catalog] = OrderedDict()

    @property
    def name(self) -> str:
        return "local"

    async def get(self, key: str) -> Catalog | None:
        snapshot = self._snapshots.get(key)
        if snapshot is not None:
            self._snapshots.move_to_end(key)
        return snapshot

    async def set(self, key: str, value: Catalog) -> None:
        self._snapshots[key] = value
        self._snapshots.move_to_end(key)
        while len(self._snapshots) > self._max_size:
            self._snapshots.popitem(last=False)

    async def delete(self, key: str) -> bool:
        return self._snapshots.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._snapshots)


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogResult:
    """Catalog lookup with where it came from."""

    catalog: Catalog
    hit: bool
    tier: str | None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Catalog",
    "Tier",
    "LocalTier",
    "CatalogResult",
)
