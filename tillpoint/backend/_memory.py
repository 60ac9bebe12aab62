"""
In-memory backend — a single-process stand-in for the hosted service.

Supports simulated latency and fault injection so checkout failure paths
can be exercised:

    backend = MemoryBackend()
    backend.seed(demo_products("Downtown"))
    backend.fail("insert_sale_lines")
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from tillpoint._types import ProductId, SaleId, StoreName
from tillpoint.domain import NewSale, Product, Sale, SaleLine
from tillpoint.errors import BackendError

OPERATIONS = frozenset({
    "create_sale",
    "insert_sale_lines",
    "update_stock",
    "fetch_products",
    "fetch_sales_since",
})


@dataclass
class MemoryBackend:
    latency: float = 0.0
    calls: list[str] = field(default_factory=list[str])
    max_concurrent_stock_updates: int = 0
    _products: dict[ProductId, Product] = field(default_factory=dict[ProductId, Product])
    _sales: dict[SaleId, Sale] = field(default_factory=dict[SaleId, Sale])
    _lines: list[SaleLine] = field(default_factory=list[SaleLine])
    _failing: set[str] = field(default_factory=set[str])
    _failing_stock: set[ProductId] = field(default_factory=set[ProductId])
    _sale_counter: int = 0
    _stock_in_flight: int = 0

    # ─────────────────────────────────────────────────────────────────────────
    # Setup
    # ─────────────────────────────────────────────────────────────────────────

    def seed(self, products: Iterable[Product]) -> None:
        for product in products:
            self._products[product.id] = product

    def fail(self, operation: str, product_id: ProductId | None = None) -> None:
        """Make an operation raise until recover() is called.

        With product_id, only update_stock for that product fails.
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown backend operation: {operation}")
        if product_id is not None:
            self._failing_stock.add(product_id)
        else:
            self._failing.add(operation)

    def recover(self) -> None:
        self._failing.clear()
        self._failing_stock.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Inspection
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def sales(self) -> list[Sale]:
        return list(self._sales.values())

    @property
    def sale_lines(self) -> list[SaleLine]:
        return list(self._lines)

    def lines_for(self, sale_id: SaleId) -> list[SaleLine]:
        return [line for line in self._lines if line.sale_id == sale_id]

    def stock_of(self, product_id: ProductId) -> int:
        return self._products[product_id].stock

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    # ─────────────────────────────────────────────────────────────────────────
    # Backend protocol
    # ─────────────────────────────────────────────────────────────────────────

    async def create_sale(self, new_sale: NewSale) -> Sale:
        await self._enter("create_sale")
        self._sale_counter += 1
        sale = Sale(
            id=f"SALE-{self._sale_counter:04d}",
            store=new_sale.store,
            operator=new_sale.operator,
            total=new_sale.total,
            created_at=new_sale.created_at,
        )
        self._sales[sale.id] = sale
        return sale

    async def insert_sale_lines(self, sale_id: SaleId, lines: Sequence[SaleLine]) -> None:
        await self._enter("insert_sale_lines")
        if sale_id not in self._sales:
            raise BackendError(f"Sale {sale_id} does not exist")
        self._lines.extend(lines)

    async def update_stock(self, product_id: ProductId, new_stock: int) -> None:
        self._stock_in_flight += 1
        self.max_concurrent_stock_updates = max(
            self.max_concurrent_stock_updates, self._stock_in_flight
        )
        try:
            await self._enter("update_stock")
            if product_id in self._failing_stock:
                raise BackendError(f"Stock update rejected for {product_id}")
            product = self._products.get(product_id)
            if product is None:
                raise BackendError(f"Product {product_id} does not exist")
            self._products[product_id] = Product(
                id=product.id,
                name=product.name,
                price=product.price,
                stock=new_stock,
                store=product.store,
                image_url=product.image_url,
            )
        finally:
            self._stock_in_flight -= 1

    async def fetch_products(self, store: StoreName) -> list[Product]:
        await self._enter("fetch_products")
        return [p for p in self._products.values() if p.store == store]

    async def fetch_sales_since(self, store: StoreName, since: datetime) -> list[Sale]:
        await self._enter("fetch_sales_since")
        return [s for s in self._sales.values() if s.store == store and s.created_at >= since]

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        await asyncio.sleep(self.latency)
        if operation in self._failing:
            raise BackendError(f"{operation} unavailable")


# ═══════════════════════════════════════════════════════════════════════════════
# Demo Data
# ═══════════════════════════════════════════════════════════════════════════════


def demo_products(store: StoreName) -> list[Product]:
    """A small café menu."""
    return [
        Product("ESPRESSO", "Espresso", Decimal("90.00"), 40, store),
        Product("LATTE", "Cafe Latte", Decimal("140.00"), 25, store),
        Product("MUFFIN", "Blueberry Muffin", Decimal("75.50"), 4, store),
        Product("CROISSANT", "Butter Croissant", Decimal("65.00"), 0, store),
        Product("WATER", "Mineral Water", Decimal("35.00"), 60, store),
    ]


__all__ = ("OPERATIONS", "MemoryBackend", "demo_products")
