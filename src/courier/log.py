"""Opt-in log output for applications embedding courier.

The library only creates module loggers under ``courier``; nothing is printed
until an application calls ``setup_logging``.
"""

from __future__ import annotations

import logging
import os
from typing import TextIO

LOG_LEVEL_ENV = "COURIER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _CourierHandler(logging.StreamHandler):
    pass


def resolve_level(level: str | int | None = None) -> int:
    """Return a numeric level from ``level`` or ``COURIER_LOG_LEVEL``.

    Unknown names fall back to WARNING.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(
    level: str | int | None = None, stream: TextIO | None = None
) -> logging.Logger:
    """Send courier's records to ``stream`` (stderr by default).

    Calling it again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger("courier")
    for handler in list(logger.handlers):
        if isinstance(handler, _CourierHandler):
            logger.removeHandler(handler)
            handler.close()
    handler = _CourierHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    return logger


__all__ = ["resolve_level", "setup_logging"]
