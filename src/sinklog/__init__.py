"""
sinklog: leveled logging fanned out to console, rotating file, XML and socket sinks.

Usage:
    from sinklog import Dispatcher, Level
    from sinklog.sinks import RotatingFileSink

    log = Dispatcher.with_console(Level.INFO)
    log.add_sink("file", Level.FINEST, RotatingFileSink("test.log", archive=True, max_lines=10_000))
    log.info("The time is now: %s", "12:00")
    log.close()
"""

from .default import close_default, configure_default, get_default, is_configured
from .dispatcher import Dispatcher
from .exceptions import (
    ConfigurationError,
    DispatcherNotConfigured,
    InvalidFilterConfig,
    InvalidSizeSpec,
    LoggedError,
    SinkClosed,
    SinkError,
    SinkLogError,
    SinkUnavailable,
    SinkWriteFailed,
)
from .formatting import FORMAT_ABBREV, FORMAT_DEFAULT, FORMAT_SHORT, FormatEngine, render
from .levels import Level
from .record import LogRecord, WriteResult
from .rotation import RotationPolicy
from .sinks import (
    AsyncBufferedSink,
    BaseSink,
    ConsoleSink,
    RotatingFileSink,
    SocketLogSink,
    XMLFileSink,
)

__all__ = [
    # Core
    "Dispatcher",
    "Level",
    "LogRecord",
    "WriteResult",
    "RotationPolicy",
    # Formatting
    "FORMAT_ABBREV",
    "FORMAT_DEFAULT",
    "FORMAT_SHORT",
    "FormatEngine",
    "render",
    # Sinks
    "AsyncBufferedSink",
    "BaseSink",
    "ConsoleSink",
    "RotatingFileSink",
    "SocketLogSink",
    "XMLFileSink",
    # Default dispatcher
    "close_default",
    "configure_default",
    "get_default",
    "is_configured",
    # Exceptions
    "ConfigurationError",
    "DispatcherNotConfigured",
    "InvalidFilterConfig",
    "InvalidSizeSpec",
    "LoggedError",
    "SinkClosed",
    "SinkError",
    "SinkLogError",
    "SinkUnavailable",
    "SinkWriteFailed",
]
