"""
Buffered asynchronous sink.
"""

from __future__ import annotations

import queue
import sys
import threading
from typing import Any, Optional

from ..diagnostics import get_logger
from ..exceptions import SinkClosed
from ..formatting import FORMAT_DEFAULT, FormatEngine, default_engine
from ..record import LogRecord, WriteResult
from .base import BaseSink

logger = get_logger("sinklog.sinks.buffered")

LOG_BUFFER_LENGTH = 32

_STOP = object()
_POLL_INTERVAL = 0.05


class AsyncBufferedSink(BaseSink):
    """Hands records to a bounded queue drained by one consumer thread.

    ``write`` returns as soon as the record is queued; when the queue is full
    it blocks the caller until the consumer frees a slot. ``close`` refuses
    new records, lets writes already in progress finish, and waits until
    everything queued has been written. If the consumer thread is gone,
    ``close`` discards the queue instead of waiting on it.

    Because rendering happens on the consumer, ``write`` reports 0 bytes.

    Args:
        stream: Text stream to write rendered records to (default: stdout)
        template: Record template (see sinklog.formatting)
        capacity: Queue length
        engine: FormatEngine to render with (default: process-wide engine)
    """

    def __init__(
        self,
        stream: Any = None,
        *,
        template: str = FORMAT_DEFAULT,
        capacity: int = LOG_BUFFER_LENGTH,
        engine: Optional[FormatEngine] = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._stream = stream if stream is not None else sys.stdout
        self._template = template
        self._engine = engine or default_engine
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=capacity)
        self._state_lock = threading.Lock()
        self._idle = threading.Condition(self._state_lock)
        self._accepting = True
        self._pending = 0
        self._consumer = threading.Thread(target=self._run, name="sinklog-buffered", daemon=True)
        self._consumer.start()

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    # -------------------------------------------------------------------------
    # Consumer
    # -------------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._emit(item)
            finally:
                self._queue.task_done()

    def _emit(self, record: LogRecord) -> None:
        try:
            self._stream.write(self._engine.render(self._template, record))
            self._stream.flush()
        except Exception as exc:
            logger.warning("buffered_write_failed", error=repr(exc))

    def _discard(self) -> None:
        """Empty the queue when no consumer is left to drain it."""
        dropped = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                with self._state_lock:
                    if not self._pending:
                        break
                    self._idle.wait(timeout=_POLL_INTERVAL)
                continue
            self._queue.task_done()
            if item is not _STOP:
                dropped += 1
        if dropped:
            logger.warning("buffered_records_dropped", sink=self.label, count=dropped)

    # -------------------------------------------------------------------------
    # Sink contract
    # -------------------------------------------------------------------------

    def write(self, record: LogRecord) -> WriteResult:
        with self._state_lock:
            if not self._accepting:
                return WriteResult(-1, SinkClosed(sink=self.label))
            self._pending += 1
        try:
            self._queue.put(record)
        finally:
            with self._state_lock:
                self._pending -= 1
                if not self._pending:
                    self._idle.notify_all()
        return WriteResult(0)

    def flush(self) -> None:
        """Block until every queued record has been written."""
        self._queue.join()

    def healthy(self) -> bool:
        return self._accepting and self._consumer.is_alive()

    def close(self) -> None:
        with self._state_lock:
            if not self._accepting:
                return
            self._accepting = False
            # Writes already past the check land before the stop marker.
            while self._pending and self._consumer.is_alive():
                self._idle.wait(timeout=_POLL_INTERVAL)

        while self._consumer.is_alive():
            try:
                self._queue.put(_STOP, timeout=_POLL_INTERVAL)
            except queue.Full:
                continue
            self._consumer.join()
            return
        self._discard()
