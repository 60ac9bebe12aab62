"""
Register — what a POS screen talks to.

One Register per signed-in operator. It owns the cart, the shift
counters and the last catalog snapshot, and routes checkout through the
orchestrator:

    register = Register(backend, settings, first_name="Ana", store_name="Downtown")
    await register.refresh()

    register.add_to_cart(register.product("LATTE"))
    match await register.checkout():
        case Ok(result):
            show_receipt(result.receipt)
        case Error(PartialCommit() as partial):
            await register.repair(partial)
        case Error(e):
            alert(str(e))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from kungfu import Result, Ok, Error

from tillpoint._types import Clock, ProductId
from tillpoint.backend import Backend
from tillpoint.cart import Cart
from tillpoint.catalog import Catalog, CatalogCache, LocalTier, catalog_cache, fetch_from
from tillpoint.checkout import CheckoutOrchestrator, CheckoutResult
from tillpoint.config import Settings
from tillpoint.domain import CartLine, Operator, Product
from tillpoint.errors import (
    CartError,
    CheckoutError,
    CheckoutInProgress,
    NothingToRepair,
    PartialCommit,
    RefreshError,
    RepairError,
    SalesQueryError,
)
from tillpoint.lift import backend_call
from tillpoint.roles import Capability, Role, require
from tillpoint.shift import ShiftCounters, ShiftStats, day_start

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Timezone-aware now in the machine's local zone."""
    return datetime.now().astimezone()


def resolve_operator(
    settings: Settings,
    first_name: str | None = None,
    store_name: str | None = None,
) -> Operator:
    """Profile fields win; blanks fall back to the configured defaults."""
    name = (first_name or "").strip() or settings.operator_fallback
    store = (store_name or "").strip() or settings.default_store
    return Operator(display_name=name, store=store)


@dataclass(frozen=True, slots=True)
class CartView:
    """Read-only cart snapshot for rendering."""

    lines: tuple[CartLine, ...]
    total: Decimal
    item_count: int

    @property
    def is_empty(self) -> bool:
        return not self.lines


class Register:
    def __init__(
        self,
        backend: Backend,
        settings: Settings | None = None,
        *,
        role: Role = Role.MERCHANT,
        first_name: str | None = None,
        store_name: str | None = None,
        clock: Clock = local_now,
        catalog: CatalogCache | None = None,
    ) -> None:
        require(role, Capability.SELL)

        self.settings = settings or Settings()
        self.role = role
        self.operator = resolve_operator(self.settings, first_name, store_name)
        self.backend = backend
        self.clock = clock

        self._cart = Cart()
        self._counters = ShiftCounters(clock)
        self._catalog_cache = catalog or (
            catalog_cache(fetch_from(backend, clock)).tier(LocalTier()).build()
        )
        self._orchestrator = CheckoutOrchestrator(
            backend,
            self._cart,
            self._counters,
            clock,
            policy=self.settings.checkout_policy(),
            catalog=self._catalog_cache,
        )
        self._catalog: Catalog | None = None

    @property
    def store(self) -> str:
        return self.operator.store

    # ─────────────────────────────────────────────────────────────────────────
    # Catalog
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def catalog(self) -> Catalog | None:
        """Last loaded snapshot; None before the first refresh."""
        return self._catalog

    def product(self, product_id: ProductId) -> Product | None:
        if self._catalog is None:
            return None
        return self._catalog.find(product_id)

    def low_stock(self) -> tuple[Product, ...]:
        if self._catalog is None:
            return ()
        return self._catalog.low_stock(self.settings.low_stock_threshold)

    async def refresh(self) -> Result[Catalog, RefreshError]:
        """
        Reload the catalog and reset the shift counters from today's sales.

        The counters keep any local sale recorded after the sales query
        was issued.
        """
        match await self._catalog_cache.refresh(self.store):
            case Error(e):
                return Error(e)
            case Ok(found):
                self._catalog = found.catalog

        issued = self.clock()
        store = self.store
        sales = await backend_call(
            "fetch_sales_since",
            lambda: self.backend.fetch_sales_since(store, day_start(issued)),
            on_error=lambda e: SalesQueryError(store, str(e)),
        )
        match sales:
            case Error(e):
                return Error(e)
            case Ok(todays):
                self._counters.reset(todays, as_of=issued)

        logger.info(
            "Register for %s refreshed: %d products, %d sale(s) today",
            store,
            len(found.catalog),
            self._counters.orders,
        )
        return Ok(found.catalog)

    async def _reload_catalog(self) -> None:
        match await self._catalog_cache.get(self.store):
            case Ok(found):
                self._catalog = found.catalog
            case Error(e):
                logger.warning("Catalog not reloaded after sale: %s", e)

    # ─────────────────────────────────────────────────────────────────────────
    # Cart
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def cart(self) -> CartView:
        return CartView(
            lines=self._cart.lines,
            total=self._cart.total_amount(),
            item_count=self._cart.total_items(),
        )

    def add_to_cart(self, product: Product) -> Result[CartLine, CartError]:
        if self._orchestrator.in_flight:
            return Error(CheckoutInProgress())
        return self._cart.add(product)

    def remove_from_cart(self, product_id: ProductId) -> Result[None, CheckoutInProgress]:
        if self._orchestrator.in_flight:
            return Error(CheckoutInProgress())
        self._cart.remove(product_id)
        return Ok(None)

    def change_quantity(
        self,
        product_id: ProductId,
        delta: int,
    ) -> Result[CartLine | None, CheckoutInProgress]:
        if self._orchestrator.in_flight:
            return Error(CheckoutInProgress())
        return Ok(self._cart.update_quantity(product_id, delta))

    def cancel(self) -> Result[None, CheckoutInProgress]:
        """Drop the pending sale. Refused once a checkout is under way."""
        if self._orchestrator.in_flight:
            return Error(CheckoutInProgress())
        self._cart.clear()
        return Ok(None)

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def checkout_in_progress(self) -> bool:
        return self._orchestrator.in_flight

    @property
    def pending_repairs(self) -> tuple[PartialCommit, ...]:
        return self._orchestrator.pending

    async def checkout(self) -> Result[CheckoutResult, CheckoutError]:
        result = await self._orchestrator.checkout(self.operator)
        if isinstance(result, Ok) and self._orchestrator.policy.refresh_catalog:
            await self._reload_catalog()
        return result

    async def repair(self, partial: PartialCommit | None = None) -> Result[CheckoutResult, RepairError]:
        """Finish a partial commit; defaults to the most recent one."""
        if partial is None:
            pending = self._orchestrator.pending
            if not pending:
                return Error(NothingToRepair(None))
            partial = pending[-1]

        result = await self._orchestrator.repair(partial)
        if isinstance(result, Ok) and self._orchestrator.policy.refresh_catalog:
            await self._reload_catalog()
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Shift
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def shift_stats(self) -> ShiftStats:
        return self._counters.stats()


__all__ = ("local_now", "resolve_operator", "CartView", "Register")
