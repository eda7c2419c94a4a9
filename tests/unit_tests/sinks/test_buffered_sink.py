"""
异步缓冲 sink 单元测试
"""

from __future__ import annotations

import asyncio
import io
import threading

from structlog.testing import capture_logs

from sinklog.sinks import AsyncBufferedSink
from sinklog.sinks.buffered import LOG_BUFFER_LENGTH


class _GatedStream:
    """Text stream whose writes block until the gate opens."""

    def __init__(self) -> None:
        self.entered = threading.Event()
        self.gate = threading.Event()
        self.lines: list[str] = []

    def write(self, s: str) -> int:
        self.entered.set()
        self.gate.wait(timeout=10)
        self.lines.append(s)
        return len(s)

    def flush(self) -> None:
        pass


class _FailingStream:
    """Stream whose writes raise something other than an I/O error."""

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    def write(self, s: str) -> int:
        raise self.exc

    def flush(self) -> None:
        pass


def _close_within(sink: AsyncBufferedSink, timeout: float = 5.0) -> bool:
    closer = threading.Thread(target=sink.close, daemon=True)
    closer.start()
    closer.join(timeout)
    return not closer.is_alive()


class TestAsyncBufferedSink:
    def test_default_capacity(self) -> None:
        sink = AsyncBufferedSink(io.StringIO())
        try:
            assert sink.capacity == LOG_BUFFER_LENGTH == 32
        finally:
            sink.close()

    def test_records_written_in_order(self, make_record) -> None:
        stream = io.StringIO()
        sink = AsyncBufferedSink(stream, template="%M")
        for i in range(100):
            assert sink.write(make_record(str(i))).written == 0
        sink.close()
        assert stream.getvalue().splitlines() == [str(i) for i in range(100)]

    def test_full_queue_blocks_producer(self, make_record) -> None:
        """队列满时生产者阻塞, 直到消费者腾出空间"""
        stream = _GatedStream()
        sink = AsyncBufferedSink(stream, template="%M", capacity=1)

        sink.write(make_record("first"))
        assert stream.entered.wait(timeout=5)  # consumer holds "first"
        sink.write(make_record("second"))  # fills the only slot

        done = threading.Event()

        def produce() -> None:
            sink.write(make_record("third"))
            done.set()

        producer = threading.Thread(target=produce)
        producer.start()
        assert not done.wait(timeout=0.2)

        stream.gate.set()
        assert done.wait(timeout=5)
        producer.join()
        sink.close()

        assert stream.lines == ["first\n", "second\n", "third\n"]

    def test_close_drains_queue(self, make_record) -> None:
        """关闭时写完所有已入队记录"""
        stream = _GatedStream()
        sink = AsyncBufferedSink(stream, template="%M", capacity=8)
        for i in range(5):
            sink.write(make_record(str(i)))

        stream.gate.set()
        sink.close()

        assert [line.strip() for line in stream.lines] == ["0", "1", "2", "3", "4"]
        assert not sink.healthy()

    def test_write_after_close_and_double_close(self, make_record) -> None:
        sink = AsyncBufferedSink(io.StringIO())
        assert sink.healthy()
        sink.close()
        sink.close()
        result = sink.write(make_record())
        assert result.written == -1
        assert result.error.code == "SINK_CLOSED"

    def test_flush_waits_for_consumer(self, make_record) -> None:
        stream = io.StringIO()
        sink = AsyncBufferedSink(stream, template="%M")
        sink.write(make_record("a"))
        sink.flush()
        assert stream.getvalue() == "a\n"
        sink.close()

    async def test_producers_off_event_loop(self, make_record) -> None:
        """事件循环中通过 to_thread 并发写入, 满队列阻塞不会卡住事件循环"""
        stream = io.StringIO()
        sink = AsyncBufferedSink(stream, template="%M", capacity=2)

        results = await asyncio.gather(*(asyncio.to_thread(sink.write, make_record(str(i))) for i in range(50)))
        await asyncio.to_thread(sink.close)

        assert all(r.ok for r in results)
        assert sorted(int(line) for line in stream.getvalue().splitlines()) == list(range(50))


class TestAsyncBufferedSinkFailures:
    """消费者异常与关闭竞争测试"""

    def test_unexpected_stream_error_keeps_consumer_running(self, make_record) -> None:
        """流抛出非 I/O 异常时消费者继续运行, close 正常返回"""
        sink = AsyncBufferedSink(_FailingStream(TypeError("not a str")), capacity=1)

        with capture_logs() as logs:
            sink.write(make_record("a"))
            sink.write(make_record("b"))
            sink.flush()
            assert sink.healthy()
            assert _close_within(sink)

        failures = [e for e in logs if e["event"] == "buffered_write_failed"]
        assert len(failures) == 2
        assert "TypeError" in failures[0]["error"]

    def test_close_after_consumer_died_does_not_hang(self, make_record) -> None:
        """消费者线程退出后, 队列已满时 close 不会阻塞"""
        sink = AsyncBufferedSink(_FailingStream(SystemExit()), capacity=1)

        sink.write(make_record("a"))  # kills the consumer
        sink._consumer.join(timeout=5)
        assert not sink.healthy()
        sink.write(make_record("b"))  # fills the only slot

        with capture_logs() as logs:
            assert _close_within(sink)
        assert _close_within(sink)

        dropped = [e for e in logs if e["event"] == "buffered_records_dropped"]
        assert dropped and dropped[0]["count"] == 1
        assert sink.write(make_record("c")).error.code == "SINK_CLOSED"

    def test_write_blocked_on_full_queue_survives_close(self, make_record) -> None:
        """close 之前已开始的写入不会丢失"""
        stream = _GatedStream()
        sink = AsyncBufferedSink(stream, template="%M", capacity=1)
        sink.write(make_record("first"))
        assert stream.entered.wait(timeout=5)
        sink.write(make_record("second"))

        results = []
        producer = threading.Thread(target=lambda: results.append(sink.write(make_record("third"))))
        producer.start()
        producer.join(timeout=0.2)
        assert producer.is_alive()  # blocked on the full queue

        closer = threading.Thread(target=sink.close)
        closer.start()
        closer.join(timeout=0.2)
        assert closer.is_alive()  # waits for the in-flight write

        stream.gate.set()
        producer.join(timeout=5)
        closer.join(timeout=5)

        assert not closer.is_alive()
        assert results[0].ok
        assert stream.lines == ["first\n", "second\n", "third\n"]
