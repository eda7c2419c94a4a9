"""
XML file sink.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..formatting import FormatEngine
from .file import RotatingFileSink

XML_RECORD_TEMPLATE = (
    '\t<record level="%L">\n'
    "\t\t<timestamp>%D %T</timestamp>\n"
    "\t\t<source>%S</source>\n"
    "\t\t<message>%M</message>\n"
    "\t</record>"
)


class XMLFileSink(RotatingFileSink):
    """Writes records as ``<record>`` elements inside a ``<log>`` document.

    Every (re)open starts a ``<log created="...">`` element and every close,
    explicit or by rotation, ends it, so archived files are complete
    documents. Source and message text is written as given, without escaping.

    Args:
        filename: Target XML file
        archive: Move an existing file to ``<filename>.NNN`` on every (re)open
        max_records: Rotate after this many records (0 disables)
        max_bytes: Rotate after this many bytes (0 disables)
        daily: Rotate on the first write of a new calendar day
        engine: FormatEngine to render with (default: process-wide engine)
        clock: Time source for the header and the daily trigger
    """

    def __init__(
        self,
        filename: str | Path,
        *,
        archive: bool = False,
        max_records: int = 0,
        max_bytes: int = 0,
        daily: bool = False,
        engine: Optional[FormatEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(
            filename,
            archive=archive,
            template=XML_RECORD_TEMPLATE,
            max_lines=max_records,
            max_bytes=max_bytes,
            daily=daily,
            engine=engine,
            clock=clock,
        )

    def _header(self) -> str:
        created = self.policy.clock().astimezone()
        return f'<log created="{self._engine.timestamp(created)}">\n'

    def _footer(self) -> str:
        return "</log>\n"
