"""
Checkout policies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum


class PartialCommitCart(StrEnum):
    """What happens to the cart when a sale is recorded without its lines."""

    KEEP_CART = "keep"
    CLEAR_CART = "clear"


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    Tunable checkout behaviour.

    Example:
        policy = CheckoutPolicy().with_partial_commit(PartialCommitCart.CLEAR_CART)
    """

    on_partial_commit: PartialCommitCart = PartialCommitCart.KEEP_CART
    refresh_catalog: bool = True
    record_partial_in_shift: bool = True

    def with_partial_commit(self, cart: PartialCommitCart) -> CheckoutPolicy:
        return replace(self, on_partial_commit=cart)

    def with_refresh_catalog(self, enabled: bool) -> CheckoutPolicy:
        return replace(self, refresh_catalog=enabled)

    def with_record_partial_in_shift(self, enabled: bool) -> CheckoutPolicy:
        return replace(self, record_partial_in_shift=enabled)


def keep_cart() -> CheckoutPolicy:
    """Keep the cart after a partial commit (default)."""
    return CheckoutPolicy(on_partial_commit=PartialCommitCart.KEEP_CART)


def clear_cart() -> CheckoutPolicy:
    """Clear the cart after a partial commit."""
    return CheckoutPolicy(on_partial_commit=PartialCommitCart.CLEAR_CART)


__all__ = ("PartialCommitCart", "CheckoutPolicy", "keep_cart", "clear_cart")
