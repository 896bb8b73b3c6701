"""Logging configuration for the command-line entry point.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, once, by whoever owns the process.
"""

from __future__ import annotations

import logging

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a single stream handler to the root logger (idempotent)."""

    global _CONFIGURED
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    if _CONFIGURED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _CONFIGURED = True


__all__ = ["configure_logging", "LOG_FORMAT"]
