"""
Rotating file sink.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from ..diagnostics import get_logger
from ..exceptions import SinkClosed, SinkUnavailable, SinkWriteFailed
from ..formatting import FORMAT_DEFAULT, FormatEngine, default_engine
from ..record import LogRecord, WriteResult
from ..rotation import RotationPolicy, archive
from .base import BaseSink

logger = get_logger("sinklog.sinks.file")


class RotatingFileSink(BaseSink):
    """Appends rendered records to a file, rotating it on line, size or day triggers.

    The file is opened on construction. If that fails the sink stays
    unhealthy until a later ``rotate()`` manages to open it. Writes, rotation
    and close are serialized by a per-sink lock.

    Args:
        filename: Target log file
        archive: Move an existing file to ``<filename>.NNN`` on every (re)open
        template: Record template (see sinklog.formatting)
        max_lines: Rotate after this many records (0 disables)
        max_bytes: Rotate after this many bytes (0 disables)
        daily: Rotate on the first write of a new calendar day
        engine: FormatEngine to render with (default: process-wide engine)
        clock: Time source for the daily trigger
    """

    def __init__(
        self,
        filename: str | Path,
        *,
        archive: bool = False,
        template: str = FORMAT_DEFAULT,
        max_lines: int = 0,
        max_bytes: int = 0,
        daily: bool = False,
        engine: Optional[FormatEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._path = Path(filename)
        self._lock = threading.Lock()
        self._file: Optional[BinaryIO] = None
        self._closed = False
        self._engine = engine or default_engine
        self.template = template
        self.policy = RotationPolicy(
            max_lines=max_lines,
            max_bytes=max_bytes,
            daily=daily,
            archive=archive,
            clock=clock or datetime.now,
        )

        with self._lock:
            self._reopen()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def label(self) -> str:
        return f"{type(self).__name__}({self._path})"

    # -------------------------------------------------------------------------
    # Document hooks (overridden by XMLFileSink)
    # -------------------------------------------------------------------------

    def _header(self) -> str:
        return ""

    def _footer(self) -> str:
        return ""

    def format(self, record: LogRecord) -> str:
        return self._engine.render(self.template, record)

    # -------------------------------------------------------------------------
    # Open / close; callers hold self._lock
    # -------------------------------------------------------------------------

    def _release(self) -> None:
        handle, self._file = self._file, None
        if handle is None:
            return
        try:
            try:
                footer = self._footer()
                if footer:
                    handle.write(footer.encode("utf-8"))
            finally:
                handle.close()
        except OSError as exc:
            logger.warning("log_file_close_failed", path=str(self._path), error=str(exc))

    def _reopen(self) -> bool:
        self._release()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            truncate = False
            if self.policy.archive:
                _, truncate = archive(self._path)
            handle = open(self._path, "wb" if truncate else "ab")
        except OSError as exc:
            logger.warning("log_file_open_failed", path=str(self._path), error=str(exc))
            return False

        header = self._header()
        if header:
            try:
                handle.write(header.encode("utf-8"))
                handle.flush()
            except OSError as exc:
                logger.warning("log_file_open_failed", path=str(self._path), error=str(exc))
                handle.close()
                return False

        self._file = handle
        self._closed = False
        self.policy.reset()
        return True

    # -------------------------------------------------------------------------
    # Sink contract
    # -------------------------------------------------------------------------

    def write(self, record: LogRecord) -> WriteResult:
        data = self.format(record).encode("utf-8")

        with self._lock:
            if self._closed:
                return WriteResult(-1, SinkClosed(sink=self.label))

            if self._file is not None and self.policy.should_rotate():
                self._reopen()

            if self._file is None:
                return WriteResult(-1, SinkUnavailable(sink=self.label, reason="file was not opened successfully"))

            try:
                written = self._file.write(data)
                self._file.flush()
            except OSError as exc:
                return WriteResult(0, SinkWriteFailed(sink=self.label, reason=str(exc)))

            self.policy.record_write(written)
            return WriteResult(written)

    def rotate(self) -> bool:
        """Close the current file and open a fresh one. Returns whether it is open."""
        with self._lock:
            return self._reopen()

    def healthy(self) -> bool:
        return self._file is not None

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._release()
