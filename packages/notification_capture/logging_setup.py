"""Logging for the ``notification_capture`` package.

Library modules only call :func:`get_logger`; the package stays silent until
an entrypoint (the CLI, or whatever host receives notification events) calls
:func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "notification_capture"
_LEVEL_ENV = "NOTIFICATION_CAPTURE_LOG_LEVEL"
_FORMAT = "%(asctime)s %(threadName)s %(name)s %(levelname)s %(message)s"
_handler: logging.Handler | None = None


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: int | str | None = None, *, stream: IO[str] = sys.stderr) -> None:
    """Send package logs to ``stream``. Repeated calls only adjust the level.

    ``level`` falls back to ``NOTIFICATION_CAPTURE_LOG_LEVEL``, then INFO.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    resolved = _resolve_level(level)
    logger.setLevel(resolved)

    if _handler is not None:
        return
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    _handler = logging.StreamHandler(stream)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
