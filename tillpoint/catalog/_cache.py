"""
Catalog cache — fluent builder over tiers and a backend fetch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from kungfu import LazyCoroResult, Result, Ok, Error

from tillpoint._types import Clock, StoreName
from tillpoint.backend import Backend
from tillpoint.catalog._types import Catalog, CatalogResult, Tier
from tillpoint.errors import CatalogError
from tillpoint.lift import backend_call

logger = logging.getLogger(__name__)

type FetchFn = Callable[[StoreName], LazyCoroResult[Catalog, CatalogError]]


def catalog_key(store: StoreName) -> str:
    return f"catalog:{store}"


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class CatalogCacheBuilder:
    """
    Fluent catalog cache builder.

    Example:
        catalog = (
            C.catalog_cache(C.fetch_from(backend, clock))
            .tier(C.LocalTier(max_size=4))
            .build()
        )
    """

    _fetch: FetchFn
    _tiers: tuple[Tier, ...]

    def tier(self, t: Tier) -> CatalogCacheBuilder:
        """Add a tier; tiers are read in the order they were added."""
        return CatalogCacheBuilder(_fetch=self._fetch, _tiers=(*self._tiers, t))

    def build(self) -> CatalogCache:
        return CatalogCache(tiers=self._tiers, fetch=self._fetch)


# ═══════════════════════════════════════════════════════════════════════════════
# Executor
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class CatalogCache:
    """Compiled catalog cache."""

    tiers: tuple[Tier, ...]
    fetch: FetchFn

    def get(self, store: StoreName) -> LazyCoroResult[CatalogResult, CatalogError]:
        """
        Snapshot for a store.

        Tries tiers in order, then falls back to the backend.
        On fetch success, populates all tiers.
        """
        key = catalog_key(store)
        tiers = self.tiers
        fetch_fn = self.fetch

        async def execute() -> Result[CatalogResult, CatalogError]:
            for t in tiers:
                try:
                    found = await t.get(key)
                except Exception as exc:
                    logger.warning("Catalog tier %s unreadable: %s", t.name, exc)
                    continue
                if found is not None:
                    return Ok(CatalogResult(catalog=found, hit=True, tier=t.name))

            result = await fetch_fn(store)
            match result:
                case Ok(catalog):
                    for t in tiers:
                        try:
                            await t.set(key, catalog)
                        except Exception as exc:
                            logger.warning("Catalog tier %s not updated: %s", t.name, exc)
                    logger.info("Catalog for %s loaded: %d products", store, len(catalog))
                    return Ok(CatalogResult(catalog=catalog, hit=False, tier=None))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    def refresh(self, store: StoreName) -> LazyCoroResult[CatalogResult, CatalogError]:
        """Drop any cached snapshot and fetch from the backend."""
        lookup = self.get

        async def execute() -> Result[CatalogResult, CatalogError]:
            await self.invalidate(store)
            return await lookup(store)

        return LazyCoroResult(execute)

    async def invalidate(self, store: StoreName) -> bool:
        """Invalidate a store's snapshot in all tiers."""
        key = catalog_key(store)
        deleted = False
        for t in self.tiers:
            try:
                if await t.delete(key):
                    deleted = True
            except Exception as exc:
                logger.warning("Catalog tier %s not invalidated: %s", t.name, exc)
        return deleted


# ═══════════════════════════════════════════════════════════════════════════════
# Entry Points
# ═══════════════════════════════════════════════════════════════════════════════


def catalog_cache(fetch: FetchFn) -> CatalogCacheBuilder:
    """Start a catalog cache builder with the given fetch."""
    return CatalogCacheBuilder(_fetch=fetch, _tiers=())


def fetch_from(backend: Backend, clock: Clock) -> FetchFn:
    """Fetch function reading a store's products from the backend."""

    def fetch(store: StoreName) -> LazyCoroResult[Catalog, CatalogError]:
        async def load() -> Catalog:
            products = await backend.fetch_products(store)
            ordered = tuple(sorted(products, key=lambda p: p.name.casefold()))
            return Catalog(store=store, products=ordered, fetched_at=clock())

        return backend_call(
            "fetch_products",
            load,
            on_error=lambda e: CatalogError(store, str(e)),
        )

    return fetch


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "FetchFn",
    "catalog_key",
    "CatalogCacheBuilder",
    "CatalogCache",
    "catalog_cache",
    "fetch_from",
)
