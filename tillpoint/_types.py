"""
Core types for tillpoint.

Re-exports from kungfu + aliases shared by every module.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Fallible[T, E] = LazyCoroResult[T, E]
"""Backend call not yet issued; awaiting it yields Result[T, E]."""

# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = str
"""Stable product identifier assigned by the backend."""

type SaleId = str
"""Sale identifier assigned by the backend on insert."""

type StoreName = str
"""A store is identified by its name."""

type Clock = Callable[[], datetime]
"""Source of timezone-aware timestamps."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Fallible",
    "ProductId",
    "SaleId",
    "StoreName",
    "Clock",
)
