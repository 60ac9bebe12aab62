"""
Logging setup for applications embedding the register.

Library modules only create loggers; handlers are installed here, once,
by the entry point.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # The engine logs every SQL statement at INFO otherwise.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ("LOG_FORMAT", "configure_logging")
