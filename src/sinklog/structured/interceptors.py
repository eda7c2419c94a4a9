"""
Interceptors for capturing standard library and third-party logs.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..diagnostics import is_internal
from ..levels import Level
from .core import current_dispatcher


def level_from_stdlib(levelno: int) -> Level:
    """Map a stdlib level number onto the nearest Level at or below it."""
    if levelno >= logging.CRITICAL:
        return Level.CRITICAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARNING
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    if levelno > logging.NOTSET:
        return Level.FINE
    return Level.FINEST


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records into the dispatcher.

    The record's logger name becomes the source; the message is formatted
    by stdlib (``%s`` args, exc_info) before it is handed over.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Skip our own diagnostics to avoid loops
            if is_internal(record.name) or "structlog" in record.name:
                return

            dispatcher = current_dispatcher()
            if dispatcher is None:
                return

            msg = self.format(record)
            dispatcher.log(level_from_stdlib(record.levelno), record.name or "stdlib", msg)
        except Exception:
            self.handleError(record)


def intercept_loggers(names: Iterable[str]) -> None:
    """
    Strip handlers from the named stdlib loggers so their records propagate
    to the root logger (and from there into the dispatcher).
    """
    roots = tuple(names)

    # 1. Direct interception of known roots
    for logger_name in roots:
        lg = logging.getLogger(logger_name)
        lg.handlers = []
        lg.propagate = True

    # 2. Walk existing child loggers created before we got here
    for name, lg in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(lg, logging.PlaceHolder):
            continue
        if any(name.startswith(root + ".") for root in roots):
            lg.handlers = []
            lg.propagate = True
