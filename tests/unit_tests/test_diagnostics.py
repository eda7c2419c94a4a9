"""
库自身诊断日志单元测试

未配置 structlog 时, 诊断事件走标准库 logging, 不写 stdout;
配置桥接后按桥接级别写入 stderr。
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from sinklog.diagnostics import get_logger, is_internal
from sinklog.dispatcher import Dispatcher
from sinklog.levels import Level
from sinklog.sinks import RotatingFileSink
from sinklog.structured import configure_logging, reset_logging


@pytest.fixture
def unconfigured():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


class TestUnconfiguredDiagnostics:
    """未配置 structlog 时的诊断输出测试"""

    def test_debug_events_stay_silent(self, unconfigured, capsys: pytest.CaptureFixture[str]) -> None:
        Dispatcher().add_sink("x", Level.INFO, None)
        assert capsys.readouterr().out == ""

    def test_warnings_become_stdlib_records(
        self, unconfigured, tmp_path: Path, caplog: pytest.LogCaptureFixture, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """打开失败的警告成为 sinklog.sinks.file 的标准库日志记录"""
        with caplog.at_level(logging.WARNING, logger="sinklog"):
            sink = RotatingFileSink(tmp_path)  # a directory cannot be opened

        assert not sink.healthy()
        records = [r for r in caplog.records if r.name == "sinklog.sinks.file"]
        assert records and records[0].levelno == logging.WARNING
        assert "log_file_open_failed" in records[0].getMessage()
        assert capsys.readouterr().out == ""


class TestBridgedDiagnostics:
    """桥接配置后的诊断输出测试"""

    def test_below_bridge_level_is_dropped(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(Dispatcher(), level="WARNING", intercept_stdlib=False)
        try:
            log = get_logger("sinklog.sinks.socket")
            log.debug("socket_connect_attempt")
            log.error("socket_connect_failed", endpoint="127.0.0.1:1")
        finally:
            reset_logging()

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "socket_connect_attempt" not in captured.err
        assert "[ERROR] sinklog.sinks.socket: socket_connect_failed endpoint=127.0.0.1:1" in captured.err


class TestIsInternal:
    @pytest.mark.parametrize(
        "name, expected",
        [("sinklog", True), ("sinklog.sinks.file", True), ("sinklogger", False), ("app", False), (None, False)],
    )
    def test_is_internal(self, name: str | None, expected: bool) -> None:
        assert is_internal(name) is expected
