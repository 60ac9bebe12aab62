"""
Backend protocol — the data-access capability the engine depends on.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from tillpoint._types import ProductId, SaleId, StoreName
from tillpoint.domain import NewSale, Product, Sale, SaleLine


class Backend(Protocol):
    """
    Backend-as-a-service seen from the register.

    Every call is independent: there is no transaction spanning two calls.
    Implementations raise on failure (preferably BackendError); the engine
    converts exceptions into typed errors.

    Example — a REST backend:

        class RestBackend:
            def __init__(self, client: httpx.AsyncClient) -> None:
                self.client = client

            async def create_sale(self, new_sale: NewSale) -> Sale:
                resp = await self.client.post("/sales", json=encode(new_sale))
                resp.raise_for_status()
                return decode_sale(resp.json())

            # ... other methods
    """

    async def create_sale(self, new_sale: NewSale) -> Sale:
        """Insert a sale and return it with its assigned id."""
        ...

    async def insert_sale_lines(self, sale_id: SaleId, lines: Sequence[SaleLine]) -> None:
        """Insert all line items of a sale in one write."""
        ...

    async def update_stock(self, product_id: ProductId, new_stock: int) -> None:
        """Overwrite a product's stock with the given value."""
        ...

    async def fetch_products(self, store: StoreName) -> list[Product]:
        """All products of a store."""
        ...

    async def fetch_sales_since(self, store: StoreName, since: datetime) -> list[Sale]:
        """Sales of a store created at or after `since`."""
        ...


__all__ = ("Backend",)
