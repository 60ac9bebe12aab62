"""
Catalog — cached product snapshots per store.

    from tillpoint import catalog as C

    products = (
        C.catalog_cache(C.fetch_from(backend, clock))
        .tier(C.LocalTier(max_size=4))
        .build()
    )
    result = await products.get("Downtown")
"""

from __future__ import annotations

from tillpoint.catalog._types import (
    Catalog,
    Tier,
    LocalTier,
    CatalogResult,
)
from tillpoint.catalog._cache import (
    catalog_key,
    catalog_cache,
    fetch_from,
    CatalogCache,
    CatalogCacheBuilder,
)

__all__ = (
    "Catalog",
    "Tier",
    "LocalTier",
    "CatalogResult",
    "catalog_key",
    "catalog_cache",
    "fetch_from",
    "CatalogCache",
    "CatalogCacheBuilder",
)
