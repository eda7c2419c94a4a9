"""
Network socket sink.
"""

from __future__ import annotations

import socket
from typing import Any, Literal, Optional

import orjson

from ..diagnostics import get_logger
from ..exceptions import SinkUnavailable, SinkWriteFailed
from ..record import LogRecord, WriteResult
from .base import BaseSink

logger = get_logger("sinklog.sinks.socket")

Transport = Literal["tcp", "udp", "stream", "datagram"]

END_OF_MESSAGE = b"\n"

_SOCK_TYPES = {
    "tcp": socket.SOCK_STREAM,
    "stream": socket.SOCK_STREAM,
    "udp": socket.SOCK_DGRAM,
    "datagram": socket.SOCK_DGRAM,
}


def orjson_dumps(v: Any, *, default: Any = None) -> bytes:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC)


def split_endpoint(endpoint: str) -> tuple[str, int]:
    """Split ``host:port`` (IPv6 hosts in brackets) into its parts."""
    host, sep, port = endpoint.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid endpoint {endpoint!r}, expected host:port")
    return host.strip("[]"), int(port)


class SocketLogSink(BaseSink):
    """Sends each record as a JSON object terminated by ``\\n``.

    The connection is made on construction; if it fails the sink is
    unhealthy for its whole lifetime. Each record is sent as a single
    buffer, so with a datagram transport one record is one datagram.

    Args:
        endpoint: ``host:port`` of the collector
        protocol: ``tcp``/``stream`` or ``udp``/``datagram``
        timeout: Connect/send timeout in seconds (None blocks)
    """

    def __init__(self, endpoint: str, protocol: Transport = "udp", *, timeout: Optional[float] = None):
        self._endpoint = endpoint
        self._protocol = protocol.lower()
        self._sock: Optional[socket.socket] = None

        sock_type = _SOCK_TYPES.get(self._protocol)
        if sock_type is None:
            raise ValueError(f"Unsupported protocol {protocol!r}")
        self._stream = sock_type == socket.SOCK_STREAM

        try:
            host, port = split_endpoint(endpoint)
            if self._stream:
                self._sock = socket.create_connection((host, port), timeout=timeout)
            else:
                family = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0][0]
                sock = socket.socket(family, socket.SOCK_DGRAM)
                try:
                    sock.settimeout(timeout)
                    sock.connect((host, port))
                except OSError:
                    sock.close()
                    raise
                self._sock = sock
        except (OSError, ValueError) as exc:
            logger.warning("socket_connect_failed", endpoint=endpoint, protocol=self._protocol, error=str(exc))

    @property
    def label(self) -> str:
        return f"SocketLogSink({self._protocol}://{self._endpoint})"

    @property
    def is_stream(self) -> bool:
        return self._stream

    def encode(self, record: LogRecord) -> bytes:
        return orjson_dumps(record.to_wire()) + END_OF_MESSAGE

    def write(self, record: LogRecord) -> WriteResult:
        sock = self._sock
        if sock is None:
            return WriteResult(-1, SinkUnavailable(sink=self.label, reason="socket was not opened successfully"))

        try:
            payload = self.encode(record)
        except orjson.JSONEncodeError as exc:
            return WriteResult(0, SinkWriteFailed(sink=self.label, reason=str(exc)))

        try:
            if self._stream:
                sock.sendall(payload)
                written = len(payload)
            else:
                written = sock.send(payload)
        except OSError as exc:
            return WriteResult(0, SinkWriteFailed(sink=self.label, reason=str(exc)))
        return WriteResult(written)

    def healthy(self) -> bool:
        return self._sock is not None

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            if self._stream:
                sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone; nothing left to tear down.
            pass
        finally:
            sock.close()
