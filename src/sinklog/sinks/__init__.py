"""
Output sinks.

- ConsoleSink: standard output, fixed line format
- RotatingFileSink: templated lines with line/size/daily rotation
- XMLFileSink: rotating XML documents
- SocketLogSink: JSON records over TCP or UDP
- AsyncBufferedSink: queue plus consumer thread in front of a stream

Design Pattern: Strategy Pattern, every sink implements BaseSink.
"""

from .base import BaseSink
from .buffered import AsyncBufferedSink
from .console import ConsoleSink
from .file import RotatingFileSink
from .socket import SocketLogSink
from .xml import XMLFileSink

__all__ = [
    "BaseSink",
    "AsyncBufferedSink",
    "ConsoleSink",
    "RotatingFileSink",
    "SocketLogSink",
    "XMLFileSink",
]
