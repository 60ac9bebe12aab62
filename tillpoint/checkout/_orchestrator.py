"""
Checkout orchestrator — sale, lines, stock, commit.

There is no transaction spanning the writes. Ordering is strict where
it matters (the sale exists before its lines) and the one state that
cannot be retried safely, a sale without lines, is returned as
PartialCommit together with what `repair` needs.

Once the sale is sent, cancelling the caller no longer stops the writes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from kungfu import Result, Ok, Error

from tillpoint._types import Clock, SaleId
from tillpoint.backend import Backend
from tillpoint.cart import Cart
from tillpoint.catalog import CatalogCache
from tillpoint.checkout._policy import CheckoutPolicy, PartialCommitCart
from tillpoint.checkout._steps import create_sale, plan_checkout, sync_stock, write_lines
from tillpoint.checkout._types import CheckoutPlan, CheckoutResult
from tillpoint.domain import Operator, Receipt
from tillpoint.errors import (
    CheckoutError,
    CheckoutInProgress,
    NothingToRepair,
    PartialCommit,
    RepairError,
    StockSyncFailure,
)
from tillpoint.shift import ShiftCounters

logger = logging.getLogger(__name__)


class CheckoutOrchestrator:
    """
    Runs checkout for one cart.

    Example:
        orchestrator = CheckoutOrchestrator(backend, cart, counters, clock)

        match await orchestrator.checkout(operator):
            case Ok(result):
                print(result.receipt.reference)
            case Error(PartialCommit() as partial):
                await orchestrator.repair(partial)
            case Error(e):
                print(e)
    """

    def __init__(
        self,
        backend: Backend,
        cart: Cart,
        counters: ShiftCounters,
        clock: Clock,
        policy: CheckoutPolicy | None = None,
        catalog: CatalogCache | None = None,
    ) -> None:
        self.backend = backend
        self.cart = cart
        self.counters = counters
        self.clock = clock
        self.policy = policy or CheckoutPolicy()
        self.catalog = catalog
        self._in_flight = False
        self._pending: dict[SaleId, PartialCommit] = {}
        self._background: set[asyncio.Future[Any]] = set()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> tuple[PartialCommit, ...]:
        """Partial commits not yet repaired, oldest first."""
        return tuple(self._pending.values())

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout
    # ─────────────────────────────────────────────────────────────────────────

    async def checkout(self, operator: Operator) -> Result[CheckoutResult, CheckoutError]:
        if self._in_flight:
            return Error(CheckoutInProgress())

        match plan_checkout(self.cart, operator, self.clock):
            case Error(e):
                return Error(e)
            case Ok(plan):
                pass

        self._in_flight = True
        return await self._uncancellable(self._run(plan), f"Checkout for {plan.store}")

    async def _run(self, plan: CheckoutPlan) -> Result[CheckoutResult, CheckoutError]:
        match await create_sale(self.backend, plan):
            case Error(failed):
                logger.warning("Checkout for %s failed: %s", plan.store, failed)
                return Error(failed)
            case Ok(sale):
                pass

        receipt = plan.receipt(sale)

        match await write_lines(self.backend, sale.id, plan.lines):
            case Error(message):
                partial = PartialCommit(message, receipt, plan.lines)
                self._on_partial(partial)
                return Error(partial)
            case Ok(_):
                pass

        stock_sync = await sync_stock(self.backend, plan.lines)
        self.cart.clear()
        return Ok(await self._commit(receipt, stock_sync, repaired=False))

    # ─────────────────────────────────────────────────────────────────────────
    # Repair
    # ─────────────────────────────────────────────────────────────────────────

    async def repair(self, partial: PartialCommit) -> Result[CheckoutResult, RepairError]:
        """
        Write the missing lines of an already created sale.

        Never creates a sale. On success, runs the stock and commit steps
        the partial checkout skipped.
        """
        if self._in_flight:
            return Error(CheckoutInProgress())
        if partial.sale.id not in self._pending:
            return Error(NothingToRepair(partial.sale.id))

        self._in_flight = True
        return await self._uncancellable(self._repair(partial), f"Repair of sale {partial.sale.id}")

    async def _repair(self, partial: PartialCommit) -> Result[CheckoutResult, RepairError]:
        match await write_lines(self.backend, partial.sale.id, partial.missing):
            case Error(message):
                retried = PartialCommit(message, partial.receipt, partial.missing)
                self._pending[partial.sale.id] = retried
                logger.warning("Repair of sale %s failed: %s", partial.sale.id, message)
                return Error(retried)
            case Ok(_):
                pass

        del self._pending[partial.sale.id]
        stock_sync = await sync_stock(self.backend, partial.missing)
        for line in partial.missing:
            self.cart.remove(line.product_id)
        return Ok(await self._commit(partial.receipt, stock_sync, repaired=True))

    # ─────────────────────────────────────────────────────────────────────────
    # Cancellation
    # ─────────────────────────────────────────────────────────────────────────

    async def _uncancellable[T](self, work: Coroutine[Any, Any, T], label: str) -> T:
        """
        Run backend writes to the end even if the caller is cancelled.

        Cancelling the caller raises CancelledError there, but the writes
        keep going and end in a commit or a PartialCommit. The in-flight
        guard stays up until they finish.
        """
        task = asyncio.ensure_future(work)
        self._background.add(task)
        task.add_done_callback(self._release)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.warning("%s cancelled by caller, finishing the backend writes", label)
            raise

    def _release(self, task: asyncio.Future[Any]) -> None:
        self._background.discard(task)
        self._in_flight = False
        if not task.cancelled() and task.exception() is not None:
            logger.error("Checkout task crashed: %s", task.exception())

    # ─────────────────────────────────────────────────────────────────────────
    # Commit
    # ─────────────────────────────────────────────────────────────────────────

    def _on_partial(self, partial: PartialCommit) -> None:
        self._pending[partial.sale.id] = partial
        logger.warning("%s", partial)

        if self.policy.record_partial_in_shift:
            self.counters.record_sale(partial.sale.total, partial.sale.id)
        if self.policy.on_partial_commit is PartialCommitCart.CLEAR_CART:
            self.cart.clear()

    async def _commit(
        self,
        receipt: Receipt,
        stock_sync: StockSyncFailure | None,
        repaired: bool,
    ) -> CheckoutResult:
        sale = receipt.sale
        self.counters.record_sale(sale.total, sale.id)

        if self.policy.refresh_catalog and self.catalog is not None:
            await self.catalog.invalidate(sale.store)

        logger.info(
            "Sale %s committed: %s for %d item(s)%s",
            sale.id,
            sale.total,
            receipt.item_count,
            " after repair" if repaired else "",
        )
        return CheckoutResult(receipt=receipt, stock_sync=stock_sync, repaired=repaired)


__all__ = ("CheckoutOrchestrator",)
