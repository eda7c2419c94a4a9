"""
Log record and sink write result types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple, Optional

from .exceptions import SinkError
from .levels import Level


def local_now() -> datetime:
    """Current local time, zone-aware, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


@dataclass(frozen=True)
class LogRecord:
    """One emitted log event.

    Built once per dispatched call and shared read-only by every admitted sink.
    """

    level: Level
    source: str
    message: str
    created: datetime = field(default_factory=local_now)

    @property
    def epoch_seconds(self) -> int:
        return int(self.created.timestamp())

    def to_wire(self) -> dict[str, Any]:
        """Field mapping used by network sinks."""
        return {
            "level": int(self.level),
            "created": self.created,
            "source": self.source,
            "message": self.message,
        }


class WriteResult(NamedTuple):
    """Outcome of one ``BaseSink.write`` call."""

    written: int
    error: Optional[SinkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
