"""
Pricing — deterministic money arithmetic.

All amounts are Decimal. A cart total is rounded once, half-up, to cents:

    compute_total([line(price="10.005", qty=1)])  # Decimal("10.01")
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class Priced(Protocol):
    """Anything carrying a unit price and a quantity."""

    @property
    def unit_price(self) -> Decimal: ...

    @property
    def quantity(self) -> int: ...


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """Exact Decimal; floats go through their shortest repr, never binary."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_money(value: Decimal | int | str | float) -> Decimal:
    """Round half-up to 2 places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal | int | str | float) -> int:
    return int(to_money(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def line_total(line: Priced) -> Decimal:
    """Display amount for one line."""
    return to_money(line.unit_price * line.quantity)


def compute_total(lines: Iterable[Priced]) -> Decimal:
    """
    Sum of quantity × unit_price, rounded once at the end.

    Pure: the same lines always give the same total.
    """
    raw = sum((line.unit_price * line.quantity for line in lines), start=Decimal(0))
    return to_money(raw)


def total_items(lines: Iterable[Priced]) -> int:
    return sum(line.quantity for line in lines)


__all__ = (
    "CENT",
    "ZERO",
    "Priced",
    "to_decimal",
    "to_money",
    "to_cents",
    "from_cents",
    "line_total",
    "compute_total",
    "total_items",
)
