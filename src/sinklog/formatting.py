"""
Template rendering and color utilities.

Known template codes:
    %T - Time (15:04:05 MST)
    %t - Time (15:04)
    %D - Date (2006/01/02)
    %d - Date (01/02/06)
    %L - Level (FNST, FINE, DEBG, TRAC, INFO, WARN, EROR, CRIT)
    %S - Source
    %M - Message

Unknown codes are dropped. Every rendered record ends with a newline.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from .levels import Level
from .record import LogRecord

FORMAT_DEFAULT = "[%D %T] [%L] (%S) %M"
FORMAT_SHORT = "[%t %d] [%L] %M"
FORMAT_ABBREV = "[%L] %M"

# =============================================================================
# ANSI Colors (console sink)
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "finest": "\033[2m",
    "fine": "\033[2m",
    "debug": "\033[36m",
    "trace": "\033[36m",
    "info": "\033[32m",
    "warning": "\033[33m",
    "error": "\033[31m",
    "critical": "\033[1;31m",
    "timestamp": "\033[90m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


def level_color(level: Level) -> str:
    return level.name.lower()


# =============================================================================
# Time component cache
# =============================================================================


class _Stamp(NamedTuple):
    seconds: int
    long_time: str
    short_time: str
    long_date: str
    short_date: str


def _derive(seconds: int, tm: datetime) -> _Stamp:
    return _Stamp(
        seconds=seconds,
        long_time=f"{tm.hour:02d}:{tm.minute:02d}:{tm.second:02d} {tm.tzname()}",
        short_time=f"{tm.hour:02d}:{tm.minute:02d}",
        long_date=f"{tm.year:04d}/{tm.month:02d}/{tm.day:02d}",
        short_date=f"{tm.month:02d}/{tm.day:02d}/{tm.year % 100:02d}",
    )


class FormatEngine:
    """Renders LogRecords through `%X` templates.

    The derived date/time strings for the most recently rendered second are
    cached behind the engine's own lock. The cache only saves work; a stale
    entry is never served because it is keyed on the record's epoch second.

    Args:
        utc: Render times in UTC instead of the local zone.
    """

    def __init__(self, *, utc: bool = False):
        self._utc = utc
        self._lock = threading.Lock()
        self._stamp: Optional[_Stamp] = None

    @property
    def utc(self) -> bool:
        return self._utc

    def set_utc(self, utc: bool) -> None:
        with self._lock:
            self._utc = utc
            self._stamp = None

    def convert(self, created: datetime) -> datetime:
        if self._utc:
            return created.astimezone(timezone.utc)
        return created.astimezone()

    def _time_stamp(self, record: LogRecord) -> _Stamp:
        seconds = record.epoch_seconds
        with self._lock:
            stamp = self._stamp
            if stamp is None or stamp.seconds != seconds:
                stamp = _derive(seconds, self.convert(record.created))
                self._stamp = stamp
            return stamp

    def render(self, template: str, record: LogRecord) -> str:
        pieces = template.split("%")
        out = [pieces[0]]
        stamp: Optional[_Stamp] = None

        for piece in pieces[1:]:
            if not piece:
                continue
            code = piece[0]
            if code in "TtDd":
                if stamp is None:
                    stamp = self._time_stamp(record)
                if code == "T":
                    out.append(stamp.long_time)
                elif code == "t":
                    out.append(stamp.short_time)
                elif code == "D":
                    out.append(stamp.long_date)
                else:
                    out.append(stamp.short_date)
            elif code == "L":
                out.append(record.level.mnemonic)
            elif code == "S":
                out.append(record.source)
            elif code == "M":
                out.append(record.message)
            out.append(piece[1:])

        out.append("\n")
        return "".join(out)

    def timestamp(self, created: datetime) -> str:
        """`YYYY/MM/DD HH:MM:SS ZZZ`, as used for XML document headers."""
        tm = self.convert(created)
        return f"{tm.year:04d}/{tm.month:02d}/{tm.day:02d} {tm.hour:02d}:{tm.minute:02d}:{tm.second:02d} {tm.tzname()}"


# Shared by every sink that is not handed an engine of its own.
default_engine = FormatEngine()


def render(template: str, record: LogRecord) -> str:
    """Render a record with the process-wide engine."""
    return default_engine.render(template, record)
