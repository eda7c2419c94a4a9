"""
Unified exception hierarchy for sinklog.

Errors are split along three orthogonal axes: per-sink failures that travel
inside a ``WriteResult`` instead of being raised, configuration errors raised
by the configuration collaborator, and lifecycle errors of the default
dispatcher. ``LoggedError`` sits outside the hierarchy: it is the advisory
value returned by ``Dispatcher.warning/error/critical`` and is never raised by
the library itself.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SinkLogError(Exception):
    """Root of every sinklog exception, so callers can catch them in one place."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


# ================================
# Sink errors
# Local to one sink and one call; returned, not raised
# ================================


class SinkError(SinkLogError):
    """Base class for errors reported through ``WriteResult.error``."""

    pass


class SinkUnavailable(SinkError):
    """The sink has no open handle or connection."""

    def __init__(self, *, sink: str, reason: str) -> None:
        message = f"{sink} is unavailable: {reason}"
        super().__init__(message, code="SINK_UNAVAILABLE", details={"sink": sink, "reason": reason})


class SinkClosed(SinkError):
    """A record was offered to a sink after it was closed."""

    def __init__(self, *, sink: str) -> None:
        super().__init__(f"{sink} is closed", code="SINK_CLOSED", details={"sink": sink})


class SinkWriteFailed(SinkError):
    """The underlying output raised while writing a record."""

    def __init__(self, *, sink: str, reason: str) -> None:
        message = f"Write to {sink} failed: {reason}"
        super().__init__(message, code="SINK_WRITE_FAILED", details={"sink": sink, "reason": reason})


# ================================
# Configuration errors
# Raised by sinklog.config while turning descriptors into sinks
# ================================


class ConfigurationError(SinkLogError):
    """Base class for filter configuration errors."""

    pass


class InvalidSizeSpec(ConfigurationError):
    """A size/count property is not of the form ``\\d+[KMG]?``."""

    def __init__(self, *, value: str, reason: str) -> None:
        message = f"Invalid size specification {value!r}: {reason}"
        super().__init__(message, code="INVALID_SIZE_SPEC", details={"value": value, "reason": reason})


class InvalidFilterConfig(ConfigurationError):
    """The properties of a filter descriptor cannot produce a sink."""

    def __init__(self, *, filter_name: str, reason: str) -> None:
        message = f"Invalid configuration for filter '{filter_name}': {reason}"
        super().__init__(
            message,
            code="INVALID_FILTER_CONFIG",
            details={"filter": filter_name, "reason": reason},
        )


# ================================
# Lifecycle errors
# ================================


class DispatcherNotConfigured(SinkLogError):
    """The process-wide dispatcher was used before ``configure_default``."""

    def __init__(self) -> None:
        super().__init__(
            "Default dispatcher is not configured; call sinklog.configure_default() at startup",
            code="DISPATCHER_NOT_CONFIGURED",
        )


class LoggedError(Exception):
    """Advisory error carrying the text of a warning/error/critical record.

    Returned (not raised) so callers can write ``return log.error(...)``
    or ``raise log.error(...)`` at their own discretion.
    """

    def __init__(self, message: str, *, level: Any) -> None:
        super().__init__(message)
        self.message = message
        self.level = level
