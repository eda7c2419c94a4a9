"""
Level-filtered fan-out of log records to named sinks.

Usage:
    from sinklog import Dispatcher, Level
    from sinklog.sinks import ConsoleSink, RotatingFileSink

    log = Dispatcher()
    log.add_sink("stdout", Level.DEBUG, ConsoleSink())
    log.add_sink("file", Level.FINE, RotatingFileSink("app.log", archive=True))
    log.info("The time is now: %s", now)

    # Deferred message, built only if some sink accepts DEBUG
    log.debug(lambda: expensive_dump(state))

    # warning/error/critical hand back the rendered text as an exception value
    return log.error("cannot open %s", path)

    # One named sink only, and a JSON event to the "event" sink
    log.log_to("file", Level.INFO, "rotated %d files", count)
    log.event("user_login", user="ann")
"""

from __future__ import annotations

import inspect
import time
from types import TracebackType
from typing import Any, Callable, NamedTuple, Optional

import orjson

from .diagnostics import get_logger
from .exceptions import LoggedError
from .levels import Level
from .record import LogRecord
from .sinks.base import BaseSink
from .sinks.console import ConsoleSink
from .sinks.socket import orjson_dumps

logger = get_logger("sinklog.dispatcher")

# Sink name ``Dispatcher.event`` writes to.
EVENT_SINK = "event"


class Filter(NamedTuple):
    threshold: Level
    sink: BaseSink


# =============================================================================
# Message construction
# =============================================================================


def format_message(template: str, args: tuple[Any, ...]) -> str:
    """%-format ``template`` with ``args``; a mismatch never raises."""
    if not args:
        return template
    try:
        return template % args
    except (TypeError, ValueError, KeyError):
        return " ".join([template, *(str(a) for a in args)])


def build_message(arg0: Any, args: tuple[Any, ...]) -> str:
    """
    Build message text from the flexible leveled-call arguments.

    - str: used as a %-template for ``args``
    - zero-argument callable: called once, its result is the message
    - anything else: all arguments joined with spaces
    """
    if isinstance(arg0, str):
        return format_message(arg0, args)
    if callable(arg0):
        return str(arg0())
    return " ".join(str(a) for a in (arg0, *args))


def infer_source() -> str:
    """``module.function:line`` of the first frame outside the dispatcher."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            module = frame.f_globals.get("__name__", "")
            if module != __name__:
                return f"{module}.{frame.f_code.co_name}:{frame.f_lineno}"
            frame = frame.f_back
        return ""
    finally:
        del frame


# =============================================================================
# Dispatcher
# =============================================================================


class Dispatcher:
    """
    Routes each log call to every registered sink whose threshold admits it.

    Registration is not synchronized against concurrent logging; register
    sinks at startup or serialize registration externally.
    """

    def __init__(self) -> None:
        self._filters: dict[str, Filter] = {}

    @classmethod
    def with_console(cls, level: Any = Level.DEBUG, stream: Any = None) -> Dispatcher:
        """Dispatcher with a ConsoleSink registered as ``"stdout"``."""
        dispatcher = cls()
        dispatcher.add_sink("stdout", level, ConsoleSink(stream))
        return dispatcher

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_sink(self, name: str, threshold: Any, sink: Optional[BaseSink]) -> None:
        """
        Register ``sink`` under ``name``.

        Ignored when the sink is missing or unhealthy. An existing entry
        under the same name is replaced without being closed.
        """
        if sink is None or not sink.healthy():
            logger.debug("sink_not_registered", sink=name)
            return
        self._filters[name] = Filter(Level.parse(threshold), sink)

    @property
    def thresholds(self) -> dict[str, Level]:
        return {name: f.threshold for name, f in self._filters.items()}

    @property
    def sinks(self) -> dict[str, BaseSink]:
        return {name: f.sink for name, f in self._filters.items()}

    def __len__(self) -> int:
        return len(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _admitted(self, level: Level) -> list[tuple[str, BaseSink]]:
        return [(name, f.sink) for name, f in list(self._filters.items()) if level >= f.threshold]

    def is_enabled_for(self, level: Any) -> bool:
        level = Level.parse(level)
        return any(level >= f.threshold for f in list(self._filters.values()))

    def _dispatch(self, admitted: list[tuple[str, BaseSink]], record: LogRecord) -> None:
        for name, sink in admitted:
            try:
                if not sink.healthy():
                    continue
                result = sink.write(record)
            except Exception as exc:
                logger.warning("sink_write_raised", sink=name, error=repr(exc))
                continue
            if result.error is not None:
                logger.debug("sink_write_failed", sink=name, code=result.error.code, error=str(result.error))

    def log(self, level: Any, source: str, message: str) -> None:
        """Send a message with an explicit source."""
        level = Level.parse(level)
        admitted = self._admitted(level)
        if not admitted:
            return
        self._dispatch(admitted, LogRecord(level=level, source=source, message=message))

    def logf(self, level: Any, template: str, *args: Any) -> None:
        """Send a %-formatted message; the source is the caller."""
        self._emit(Level.parse(level), lambda: format_message(template, args))

    def logc(self, level: Any, func: Callable[[], str]) -> None:
        """Send the result of ``func``, which runs only if some sink accepts ``level``."""
        self._emit(Level.parse(level), func)

    def _emit(
        self,
        level: Level,
        make_message: Callable[[], Any],
        admitted: Optional[list[tuple[str, BaseSink]]] = None,
    ) -> None:
        if admitted is None:
            admitted = self._admitted(level)
        if not admitted:
            return
        record = LogRecord(level=level, source=infer_source(), message=str(make_message()))
        self._dispatch(admitted, record)

    def _emit_error(self, level: Level, arg0: Any, args: tuple[Any, ...]) -> LoggedError:
        message = build_message(arg0, args)
        self._emit(level, lambda: message)
        return LoggedError(message, level=level)

    # -------------------------------------------------------------------------
    # Targeted logging
    # -------------------------------------------------------------------------

    def _targeted(self, name: str, level: Level) -> list[tuple[str, BaseSink]]:
        f = self._filters.get(name)
        if f is None or level < f.threshold:
            return []
        return [(name, f.sink)]

    def log_to(self, name: str, level: Any, arg0: Any, *args: Any) -> Optional[LoggedError]:
        """
        Log to the sink registered as ``name`` only, subject to its threshold.

        Arguments are interpreted as for the leveled helpers. At WARNING and
        above the message is returned as a LoggedError, like ``warning``,
        ``error`` and ``critical``; below that the result is None.
        """
        level = Level.parse(level)
        admitted = self._targeted(name, level)
        if level < Level.WARNING:
            self._emit(level, lambda: build_message(arg0, args), admitted)
            return None
        message = build_message(arg0, args)
        self._emit(level, lambda: message, admitted)
        return LoggedError(message, level=level)

    def event(self, topic: str, **fields: Any) -> None:
        """
        Write ``fields`` as one JSON object to the ``"event"`` sink at INFO.

        ``__topic__`` and ``__timestamp__`` (epoch seconds) are added to the
        object. Values orjson cannot encode natively are stringified.
        """
        admitted = self._targeted(EVENT_SINK, Level.INFO)
        if not admitted:
            return
        payload = {**fields, "__topic__": topic, "__timestamp__": int(time.time())}
        try:
            message = orjson_dumps(payload, default=str).decode("utf-8")
        except orjson.JSONEncodeError as exc:
            logger.warning("event_encode_failed", topic=topic, error=str(exc))
            return
        self._emit(Level.INFO, lambda: message, admitted)

    # -------------------------------------------------------------------------
    # Leveled helpers
    # -------------------------------------------------------------------------

    def finest(self, arg0: Any, *args: Any) -> None:
        self._emit(Level.FINEST, lambda: build_message(arg0, args))

    def fine(self, arg0: Any, *args: Any) -> None:
        self._emit(Level.FINE, lambda: build_message(arg0, args))

    def debug(self, arg0: Any, *args: Any) -> None:
        """
        Log at DEBUG.

        A str first argument is a %-template for the rest; a callable is
        invoked only if the record will be written; anything else is
        joined with the remaining arguments by spaces.
        """
        self._emit(Level.DEBUG, lambda: build_message(arg0, args))

    def trace(self, arg0: Any, *args: Any) -> None:
        self._emit(Level.TRACE, lambda: build_message(arg0, args))

    def info(self, arg0: Any, *args: Any) -> None:
        self._emit(Level.INFO, lambda: build_message(arg0, args))

    def warning(self, arg0: Any, *args: Any) -> LoggedError:
        """Log at WARNING and return the message as a LoggedError."""
        return self._emit_error(Level.WARNING, arg0, args)

    warn = warning

    def error(self, arg0: Any, *args: Any) -> LoggedError:
        """Log at ERROR and return the message as a LoggedError."""
        return self._emit_error(Level.ERROR, arg0, args)

    def critical(self, arg0: Any, *args: Any) -> LoggedError:
        """Log at CRITICAL and return the message as a LoggedError."""
        return self._emit_error(Level.CRITICAL, arg0, args)

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close every sink and forget them. One failing sink does not stop the rest."""
        filters, self._filters = self._filters, {}
        for name, f in filters.items():
            try:
                f.sink.close()
            except Exception as exc:
                logger.warning("sink_close_failed", sink=name, error=repr(exc))

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
