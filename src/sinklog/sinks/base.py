"""
Sink abstraction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..record import LogRecord, WriteResult


class BaseSink(ABC):
    """Abstract base class for log sinks.

    A sink that reports ``healthy() is False`` is skipped by the dispatcher,
    both at registration and on every dispatch, until it recovers.
    """

    @property
    def label(self) -> str:
        return type(self).__name__

    @abstractmethod
    def write(self, record: LogRecord) -> WriteResult:
        """Write one record. Failures are returned, never raised."""
        ...

    @abstractmethod
    def healthy(self) -> bool:
        """Whether the sink can accept a record right now."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources. Safe to call more than once."""
        ...
