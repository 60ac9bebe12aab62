"""
Shift counters — today's revenue and order count for the register.

Two fields, kept apart on purpose:

    baseline  totals computed from the backend at the last reset
    local     sales this register recorded since then

    counters.record_sale(Decimal("180.00"), sale_id="SALE-0007")
    counters.reset(sales_from_backend, as_of=query_started)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tillpoint._types import Clock, SaleId
from tillpoint.domain import Sale
from tillpoint.money import ZERO, to_money


def day_start(now: datetime) -> datetime:
    """Midnight of `now`'s day, in `now`'s own timezone."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True, slots=True)
class Baseline:
    revenue: Decimal
    orders: int
    as_of: datetime | None
    sale_ids: frozenset[SaleId]


@dataclass(frozen=True, slots=True)
class LocalSale:
    total: Decimal
    sale_id: SaleId | None
    recorded_at: datetime


@dataclass(frozen=True, slots=True)
class ShiftStats:
    revenue: Decimal
    orders: int
    as_of: datetime | None
    pending: int
    """Sales recorded locally and not yet seen in a backend query."""

    @property
    def average(self) -> Decimal:
        if self.orders == 0:
            return ZERO
        return to_money(self.revenue / self.orders)


EMPTY_BASELINE = Baseline(revenue=ZERO, orders=0, as_of=None, sale_ids=frozenset())


class ShiftCounters:
    """
    Optimistic per-shift counters.

    After `reset`, the views equal the backend totals at query time plus
    exactly the local sales that query could not have seen.
    """

    __slots__ = ("_clock", "_baseline", "_local")

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._baseline = EMPTY_BASELINE
        self._local: list[LocalSale] = []

    def record_sale(self, total: Decimal, sale_id: SaleId | None = None) -> None:
        """Count a sale made on this register. No I/O."""
        if sale_id is not None and (
            sale_id in self._baseline.sale_ids
            or any(entry.sale_id == sale_id for entry in self._local)
        ):
            return
        self._local.append(LocalSale(to_money(total), sale_id, self._clock()))

    def reset(self, sales: Iterable[Sale], as_of: datetime) -> None:
        """
        Replace the baseline with totals from a backend query issued at `as_of`.

        A local entry survives only if the query did not return its sale and
        it was recorded after the query was issued.
        """
        fetched = list(sales)
        sale_ids = frozenset(sale.id for sale in fetched)
        revenue = sum((sale.total for sale in fetched), start=ZERO)

        self._baseline = Baseline(
            revenue=to_money(revenue),
            orders=len(fetched),
            as_of=as_of,
            sale_ids=sale_ids,
        )
        self._local = [
            entry
            for entry in self._local
            if entry.sale_id not in sale_ids and entry.recorded_at > as_of
        ]

    @property
    def baseline(self) -> Baseline:
        return self._baseline

    @property
    def local(self) -> tuple[LocalSale, ...]:
        return tuple(self._local)

    @property
    def revenue(self) -> Decimal:
        return to_money(self._baseline.revenue + sum((e.total for e in self._local), start=ZERO))

    @property
    def orders(self) -> int:
        return self._baseline.orders + len(self._local)

    def stats(self) -> ShiftStats:
        return ShiftStats(
            revenue=self.revenue,
            orders=self.orders,
            as_of=self._baseline.as_of,
            pending=len(self._local),
        )

    def __repr__(self) -> str:
        return f"ShiftCounters(revenue={self.revenue}, orders={self.orders})"


__all__ = (
    "day_start",
    "Baseline",
    "LocalSale",
    "ShiftStats",
    "ShiftCounters",
)
