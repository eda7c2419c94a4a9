"""
Console sink.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

from ..exceptions import SinkWriteFailed
from ..formatting import FormatEngine, colorize, default_engine, level_color
from ..record import LogRecord, WriteResult
from .base import BaseSink


class ConsoleSink(BaseSink):
    """Writes ``[MM/DD/YY HH:MM:SS] [LEVL] message`` lines to standard output.

    The record source is not shown. The console is always considered
    writable, and closing it does nothing.

    Args:
        stream: Output stream (default: stdout)
        color: Colorize the level column with ANSI codes
        engine: FormatEngine used for time conversion
    """

    def __init__(
        self,
        stream: Any = None,
        *,
        color: bool = False,
        engine: Optional[FormatEngine] = None,
    ):
        self._stream = stream if stream is not None else sys.stdout
        self._color = color
        self._engine = engine or default_engine

    def format(self, record: LogRecord) -> str:
        tm = self._engine.convert(record.created)
        timestamp = (
            f"{tm.month:02d}/{tm.day:02d}/{tm.year % 100:02d} "
            f"{tm.hour:02d}:{tm.minute:02d}:{tm.second:02d}"
        )
        level = record.level.mnemonic
        if self._color:
            level = colorize(level, level_color(record.level))
        return f"[{timestamp}] [{level}] {record.message}\n"

    def write(self, record: LogRecord) -> WriteResult:
        line = self.format(record)
        try:
            self._stream.write(line)
            self._stream.flush()
        except (OSError, ValueError) as exc:
            return WriteResult(0, SinkWriteFailed(sink=self.label, reason=str(exc)))
        encoding = getattr(self._stream, "encoding", None) or "utf-8"
        return WriteResult(len(line.encode(encoding, errors="replace")))

    def healthy(self) -> bool:
        return True

    def close(self) -> None:
        pass
