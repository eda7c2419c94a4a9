"""
structlog configuration that forwards application events into a Dispatcher.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

from ..config import settings
from ..default import get_default
from ..diagnostics import is_internal
from ..dispatcher import Dispatcher
from ..levels import Level

# =============================================================================
# Global State
# =============================================================================

_dispatcher: Optional[Dispatcher] = None
_threshold: Level = Level.INFO

_LEVELS: dict[str, Level] = {
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warning": Level.WARNING,
    "error": Level.ERROR,
    "critical": Level.CRITICAL,
}

# Keys consumed by the processors; everything else is rendered as key=value.
_RESERVED = frozenset({"message", "level", "logger", "timestamp", "exception"})


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(_name=name or "root")


def current_dispatcher() -> Optional[Dispatcher]:
    """Dispatcher the bridge forwards to, if configured."""
    return _dispatcher


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.get("_name", "root")
    event_dict.pop("_name", None)
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def level_for(name: str | None) -> Level:
    """Map a structlog level name to a Level; unknown names become INFO."""
    return _LEVELS.get((name or "").lower(), Level.INFO)


def render_message(event_dict: EventDict) -> str:
    """
    Flatten an event into one message line.

    ``"user login" user_id=42 ok=True``; a formatted exception, if any,
    follows on the next lines.
    """
    parts = [str(event_dict.get("message", ""))]
    parts.extend(f"{k}={v}" for k, v in event_dict.items() if k not in _RESERVED)
    text = " ".join(p for p in parts if p)
    exc = event_dict.get("exception")
    if exc:
        text = f"{text}\n{exc}"
    return text


def _write_internal(event_dict: EventDict) -> None:
    level = str(event_dict.get("level", "info")).upper()
    line = f"{event_dict.get('timestamp', '')} [{level}] {event_dict.get('logger')}: {render_message(event_dict)}\n"
    try:
        sys.stderr.write(line)
        sys.stderr.flush()
    except (OSError, ValueError):
        pass  # stderr gone during interpreter shutdown


def dispatcher_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """
    Forward the event to the dispatcher. Returns empty to suppress default output.

    The library's own events are written to stderr instead, subject to the
    bridge level, and never reach the stdlib logger they are bound to.
    """
    name = event_dict.get("logger")
    if is_internal(name):
        if level_for(event_dict.get("level")) >= _threshold:
            _write_internal(event_dict)
        raise structlog.DropEvent

    dispatcher = _dispatcher
    if dispatcher is not None:
        dispatcher.log(level_for(event_dict.get("level")), str(name), render_message(event_dict))
    return ""


# =============================================================================
# Configuration Logic
# =============================================================================


class _NopFile:
    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


_NOP_FILE = _NopFile()


class SilentPrintLoggerFactory:
    """Logger factory that returns a logger writing to nowhere."""

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=_NOP_FILE)


def _configure_structlog(level: str) -> None:
    """Configure structlog processors and factory."""
    shared_processors = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_logger_name,
        rename_event_key,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [dispatcher_renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=SilentPrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(
    dispatcher: Optional[Dispatcher] = None,
    *,
    level: str | None = None,
    intercept_stdlib: bool | None = None,
) -> Dispatcher:
    """
    Route structlog (and optionally stdlib logging) into a dispatcher.

    Args:
        dispatcher: Target dispatcher (default: the process-wide one)
        level: Minimum level forwarded (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        intercept_stdlib: Replace root logger handlers with RedirectStdLibHandler

    Raises:
        DispatcherNotConfigured: no dispatcher given and no default installed
    """
    from .interceptors import RedirectStdLibHandler

    global _dispatcher, _threshold

    level = level or settings.bridge_level
    if intercept_stdlib is None:
        intercept_stdlib = settings.intercept_stdlib

    # 1. Resolve the target
    _dispatcher = dispatcher if dispatcher is not None else get_default()

    # 2. Configure Structlog
    _threshold = Level.parse(level)
    _configure_structlog(level)

    # 3. Configure Stdlib Logging (Root)
    if intercept_stdlib:
        root_logger = logging.getLogger()
        root_logger.handlers = []
        root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        root_logger.addHandler(RedirectStdLibHandler())

    return _dispatcher


def reset_logging() -> None:
    """Undo ``configure_logging``: structlog defaults, no redirect handler, no target."""
    from .interceptors import RedirectStdLibHandler

    global _dispatcher, _threshold

    _dispatcher = None
    _threshold = Level.INFO
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    root_logger.handlers = [h for h in root_logger.handlers if not isinstance(h, RedirectStdLibHandler)]
