"""
Process-wide default dispatcher.

Nothing is created at import time. Application startup calls
``configure_default`` once; library code then reaches the dispatcher through
``get_default``. Initialization order:

    1. configure_default(...)          # builds sinks from settings
    2. sinklog.structured.configure_logging()   # optional, bridges structlog/stdlib
    3. ... application runs ...
    4. close_default()                 # flushes and closes every sink
"""

from __future__ import annotations

import threading
from typing import Optional

from .config import LoggingSettings, build_dispatcher
from .config import settings as default_settings
from .diagnostics import get_logger
from .dispatcher import Dispatcher
from .exceptions import DispatcherNotConfigured
from .formatting import default_engine

logger = get_logger("sinklog.default")

_lock = threading.Lock()
_default: Optional[Dispatcher] = None


def configure_default(
    settings: Optional[LoggingSettings] = None,
    *,
    dispatcher: Optional[Dispatcher] = None,
) -> Dispatcher:
    """
    Install the process-wide dispatcher.

    Args:
        settings: Settings to build sinks from (default: sinklog.config.settings)
        dispatcher: Adopt this dispatcher instead of building one

    A previously installed dispatcher is closed first.
    """
    global _default

    if dispatcher is None:
        settings = settings or default_settings
        default_engine.set_utc(settings.time_zone == "utc")
        dispatcher = build_dispatcher(settings.filters, strict=settings.strict)

    with _lock:
        previous, _default = _default, dispatcher

    if previous is not None and previous is not dispatcher:
        previous.close()
    logger.debug("default_dispatcher_configured", sinks=sorted(dispatcher.sinks))
    return dispatcher


def get_default() -> Dispatcher:
    """Return the process-wide dispatcher, or raise if it was never configured."""
    dispatcher = _default
    if dispatcher is None:
        raise DispatcherNotConfigured()
    return dispatcher


def is_configured() -> bool:
    return _default is not None


def close_default() -> None:
    """Close and forget the process-wide dispatcher. No-op if none is installed."""
    global _default

    with _lock:
        dispatcher, _default = _default, None
    if dispatcher is not None:
        dispatcher.close()
