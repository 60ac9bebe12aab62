"""
Settings — register configuration from the environment.

A `.env` file in the working directory is loaded first; real environment
variables win over it.

    TILLPOINT_DEFAULT_STORE=Downtown
    TILLPOINT_DATABASE_URL=sqlite+aiosqlite:///pos.db
    TILLPOINT_PARTIAL_COMMIT_CART=clear
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from dotenv import find_dotenv, load_dotenv

from tillpoint.checkout import CheckoutPolicy, PartialCommitCart
from tillpoint.domain import DEFAULT_LOW_STOCK

PREFIX = "TILLPOINT_"

DEFAULT_STORE = "MY STORE"
OPERATOR_FALLBACK = "Merchant"

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
TRUTHY = frozenset({"1", "true", "yes", "on"})
FALSY = frozenset({"0", "false", "no", "off"})


def _env_string(env: Mapping[str, str], name: str) -> str | None:
    """Trimmed value of TILLPOINT_<name>; empty strings count as unset."""
    raw = env.get(PREFIX + name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_string(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{PREFIX}{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{PREFIX}{name} must not be negative, got {value}")
    return value


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _env_string(env, name)
    if raw is None:
        return default
    if raw.lower() in TRUTHY:
        return True
    if raw.lower() in FALSY:
        return False
    raise ValueError(f"{PREFIX}{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class Settings:
    default_store: str = DEFAULT_STORE
    operator_fallback: str = OPERATOR_FALLBACK
    low_stock_threshold: int = DEFAULT_LOW_STOCK
    database_url: str | None = None
    """None means the in-memory backend with demo data."""
    log_level: str = "INFO"
    partial_commit_cart: PartialCommitCart = PartialCommitCart.KEEP_CART
    refresh_after_checkout: bool = True

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """
        Read TILLPOINT_* variables.

        Without an explicit mapping, `.env` is loaded into os.environ first.
        Raises ValueError naming the variable on a malformed value.
        """
        if env is None:
            load_dotenv(find_dotenv(usecwd=True))
            env = os.environ

        log_level = (_env_string(env, "LOG_LEVEL") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"{PREFIX}LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {log_level!r}")

        cart_raw = _env_string(env, "PARTIAL_COMMIT_CART")
        try:
            partial_commit_cart = (
                PartialCommitCart(cart_raw.lower()) if cart_raw else PartialCommitCart.KEEP_CART
            )
        except ValueError:
            raise ValueError(
                f"{PREFIX}PARTIAL_COMMIT_CART must be 'keep' or 'clear', got {cart_raw!r}"
            ) from None

        return cls(
            default_store=_env_string(env, "DEFAULT_STORE") or DEFAULT_STORE,
            operator_fallback=_env_string(env, "OPERATOR_FALLBACK") or OPERATOR_FALLBACK,
            low_stock_threshold=_env_int(env, "LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK),
            database_url=_env_string(env, "DATABASE_URL"),
            log_level=log_level,
            partial_commit_cart=partial_commit_cart,
            refresh_after_checkout=_env_bool(env, "REFRESH_AFTER_CHECKOUT", True),
        )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]

    def checkout_policy(self) -> CheckoutPolicy:
        return CheckoutPolicy(
            on_partial_commit=self.partial_commit_cart,
            refresh_catalog=self.refresh_after_checkout,
        )

    def with_default_store(self, store: str) -> Settings:
        return replace(self, default_store=store)

    def with_database_url(self, url: str | None) -> Settings:
        return replace(self, database_url=url)

    def with_partial_commit_cart(self, cart: PartialCommitCart) -> Settings:
        return replace(self, partial_commit_cart=cart)


__all__ = ("DEFAULT_STORE", "OPERATOR_FALLBACK", "Settings")
