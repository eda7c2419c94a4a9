"""
sinklog Configuration Module.

Turns filter descriptors into registered sinks. The core never reads
configuration itself; this package is the collaborator that does.

Usage:
    from sinklog.config import settings, build_dispatcher

    dispatcher = build_dispatcher(settings.filters)

    # Or from descriptors assembled elsewhere
    build_dispatcher([
        {"name": "stdout", "type": "console", "level": "DEBUG"},
        {"name": "file", "type": "file", "level": "FINEST",
         "properties": {"filename": "test.log", "maxlines": "10K", "daily": "true"}},
    ])
"""

from .filters import (
    FileSinkOptions,
    FilterDescriptor,
    SinkType,
    SocketSinkOptions,
    build_dispatcher,
    build_sink,
    parse_size,
)
from .logging import LoggingSettings

# Singleton instance
settings = LoggingSettings()

__all__ = [
    "FileSinkOptions",
    "FilterDescriptor",
    "LoggingSettings",
    "SinkType",
    "SocketSinkOptions",
    "build_dispatcher",
    "build_sink",
    "parse_size",
    "settings",
]
