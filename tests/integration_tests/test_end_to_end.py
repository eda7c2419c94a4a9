"""
端到端集成测试

从过滤器描述构建完整的 dispatcher, 同时写入文本文件、XML 文件和
UDP 收集端, 再验证各自的输出。
"""

from __future__ import annotations

import hashlib
import socket
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

import orjson
import pytest

from sinklog.config import build_dispatcher
from sinklog.dispatcher import Dispatcher
from sinklog.levels import Level
from sinklog.record import LogRecord
from sinklog.sinks import RotatingFileSink

# Every level name logged once, in order, through a "[%L] '%M'" file sink.
EXPECTED_LEVEL_LINES = (
    "[FNST] 'This message is level FINEST'\n"
    "[FINE] 'This message is level FINE'\n"
    "[DEBG] 'This message is level DEBUG'\n"
    "[TRAC] 'This message is level TRACE'\n"
    "[INFO] 'This message is level INFO'\n"
    "[WARN] 'This message is level WARNING'\n"
    "[EROR] 'This message is level ERROR'\n"
    "[CRIT] 'This message is level CRITICAL'\n"
)
EXPECTED_LEVEL_MD5 = "c1af947aaa21126fb4271856ac82a5f2"


@pytest.fixture
def collector():
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind(("127.0.0.1", 0))
    server.settimeout(5)
    yield server
    server.close()


class TestEndToEnd:
    def test_every_level_through_template(self, tmp_path: Path) -> None:
        """与已知输出逐字节一致"""
        target = tmp_path / "levels.log"
        log = Dispatcher()
        log.add_sink("file", Level.FINEST, RotatingFileSink(target, template="[%L] '%M'"))

        for level in Level:
            log.log(level, "source", f"This message is level {level.name}")
        log.close()

        content = target.read_bytes()
        assert content.decode() == EXPECTED_LEVEL_LINES
        assert hashlib.md5(content).hexdigest() == EXPECTED_LEVEL_MD5

    def test_configured_sinks_receive_by_threshold(self, tmp_path: Path, collector: socket.socket) -> None:
        host, port = collector.getsockname()[:2]
        log = build_dispatcher(
            [
                {
                    "name": "file",
                    "type": "file",
                    "level": "FINEST",
                    "properties": {"filename": str(tmp_path / "app.log"), "format": "[%L] %M", "rotate": "true", "maxlines": "3"},
                },
                {
                    "name": "xml",
                    "type": "xml",
                    "level": "INFO",
                    "properties": {"filename": str(tmp_path / "app.xml")},
                },
                {
                    "name": "net",
                    "type": "socket",
                    "level": "ERROR",
                    "properties": {"endpoint": f"{host}:{port}", "protocol": "udp"},
                },
            ],
            strict=True,
        )
        assert sorted(log.sinks) == ["file", "net", "xml"]

        log.fine("starting")
        log.debug("loaded %d plugins", 3)
        log.info("ready")
        err = log.error("request failed: %s", "timeout")
        log.close()

        assert str(err) == "request failed: timeout"

        assert (tmp_path / "app.log.001").read_text() == "[FINE] starting\n[DEBG] loaded 3 plugins\n[INFO] ready\n"
        assert (tmp_path / "app.log").read_text() == "[EROR] request failed: timeout\n"

        root = ET.parse(tmp_path / "app.xml").getroot()
        assert [r.findtext("message") for r in root.findall("record")] == ["ready", "request failed: timeout"]

        data, _ = collector.recvfrom(65535)
        payload = orjson.loads(data)
        assert payload["level"] == int(Level.ERROR)
        assert payload["message"] == "request failed: timeout"
        assert ".test_configured_sinks_receive_by_threshold:" in payload["source"]

    def test_restart_archives_previous_run(self, tmp_path: Path) -> None:
        """重启时上一次运行的日志被归档为 .001, .002"""
        target = tmp_path / "service.log"
        created = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)

        for run in range(3):
            sink = RotatingFileSink(target, archive=True, template="%M")
            sink.write(LogRecord(level=Level.INFO, source="svc", message=f"run {run}", created=created))
            sink.close()

        assert (tmp_path / "service.log.001").read_text() == "run 0\n"
        assert (tmp_path / "service.log.002").read_text() == "run 1\n"
        assert target.read_text() == "run 2\n"
