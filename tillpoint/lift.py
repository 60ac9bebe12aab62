"""
Lift — turning backend coroutines into lazy results.

Backends raise; the engine never does. Every backend call crosses this
boundary once, where the exception is logged and mapped to a typed error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult
from combinators.lift import catching_async

logger = logging.getLogger(__name__)


def backend_call[T, E](
    label: str,
    call: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
) -> LazyCoroResult[T, E]:
    """
    Wrap a backend coroutine.

    Any exception raised by the call is logged under `label` and becomes
    Error(on_error(exc)).

    Example:
        create = backend_call(
            "create_sale",
            lambda: backend.create_sale(new_sale),
            on_error=lambda e: CheckoutFailed(str(e)),
        )
        result = await create
    """

    def _on_error(exc: Exception) -> E:
        logger.error("Backend call %s failed: %s", label, exc)
        return on_error(exc)

    return catching_async(call, on_error=_on_error)


__all__ = ("backend_call",)
