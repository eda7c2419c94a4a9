"""
Diagnostics logger for sinklog's own events.

Sinks and the dispatcher report open failures, contained exceptions and
similar conditions here rather than through the dispatcher they serve.
Events go through structlog to the stdlib logger of the same name, so an
application that never configures structlog sees them only as ordinary
``logging`` records (nothing on stdout, debug events filtered by level).
"""

from __future__ import annotations

import logging

import structlog

INTERNAL_PREFIX = "sinklog"


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger backed by the stdlib logger ``name``."""
    name = name or INTERNAL_PREFIX
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
        _name=name,
    )


def is_internal(logger_name: str | None) -> bool:
    """True for loggers that belong to this package."""
    if not logger_name:
        return False
    return logger_name == INTERNAL_PREFIX or logger_name.startswith(INTERNAL_PREFIX + ".")
