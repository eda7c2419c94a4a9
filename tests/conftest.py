from __future__ import annotations

import typing as t
from datetime import datetime, timezone

import pytest

from sinklog.default import close_default
from sinklog.exceptions import SinkWriteFailed
from sinklog.formatting import FormatEngine
from sinklog.levels import Level
from sinklog.record import LogRecord, WriteResult
from sinklog.sinks.base import BaseSink

# 2006-01-02 15:04:05 UTC
REFERENCE_TIME = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)


class RecordingSink(BaseSink):
    """In-memory sink that keeps every record it receives."""

    def __init__(self, *, healthy: bool = True, fail: bool = False) -> None:
        self.records: list[LogRecord] = []
        self.is_healthy = healthy
        self.fail = fail
        self.closed = 0

    def write(self, record: LogRecord) -> WriteResult:
        if self.fail:
            return WriteResult(0, SinkWriteFailed(sink=self.label, reason="boom"))
        self.records.append(record)
        return WriteResult(len(record.message))

    def healthy(self) -> bool:
        return self.is_healthy

    def close(self) -> None:
        self.closed += 1

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]


@pytest.fixture
def utc_engine() -> FormatEngine:
    """Engine rendering in UTC so expected strings do not depend on the host zone."""
    return FormatEngine(utc=True)


@pytest.fixture
def make_record() -> t.Callable[..., LogRecord]:
    def _make(
        message: str = "message",
        *,
        level: Level = Level.CRITICAL,
        source: str = "source",
        created: datetime = REFERENCE_TIME,
    ) -> LogRecord:
        return LogRecord(level=level, source=source, message=message, created=created)

    return _make


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def reset_default_dispatcher():
    """Never leak a process-wide dispatcher between tests."""
    yield
    close_default()
