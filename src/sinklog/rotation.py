"""
Rotation triggers and numbered-backup naming for file-backed sinks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from .diagnostics import get_logger

logger = get_logger("sinklog.rotation")

MAX_BACKUPS = 999


def next_backup_path(path: str | Path) -> Optional[Path]:
    """Return the first unused ``<path>.NNN`` (001..999), or None if all are taken."""
    path = Path(path)
    for num in range(1, MAX_BACKUPS + 1):
        candidate = path.with_name(f"{path.name}.{num:03d}")
        if not os.path.lexists(candidate):
            return candidate
    return None


def archive(path: str | Path) -> tuple[Optional[Path], bool]:
    """
    Move an existing log file out of the way before it is reopened.

    Returns ``(backup, truncate)``. ``backup`` is where the file went, or None
    when there was nothing to move. ``truncate`` is True when every backup
    number is taken: the caller then reopens the target truncated and the
    old contents are lost.
    """
    path = Path(path)
    if not os.path.lexists(path):
        return None, False

    backup = next_backup_path(path)
    if backup is None:
        logger.warning("backup_names_exhausted", path=str(path), limit=MAX_BACKUPS)
        return None, True

    os.replace(path, backup)
    return backup, False


@dataclass
class RotationPolicy:
    """
    Per-sink rotation triggers and the counters they are checked against.

    The counters describe the currently open file only and are reset by
    ``reset`` on every (re)open.

    Args:
        max_lines: Rotate once this many records were written (0 disables)
        max_bytes: Rotate once this many bytes were written (0 disables)
        daily: Rotate on the first write after the calendar day changes
        archive: Keep the previous file as ``<name>.NNN`` instead of appending
    """

    max_lines: int = 0
    max_bytes: int = 0
    daily: bool = False
    archive: bool = False
    clock: Callable[[], datetime] = field(default=datetime.now, repr=False)

    lines: int = field(default=0, init=False)
    size: int = field(default=0, init=False)
    opened_on: Optional[date] = field(default=None, init=False)

    def reset(self, now: Optional[datetime] = None) -> None:
        now = now or self.clock()
        self.lines = 0
        self.size = 0
        self.opened_on = now.date()

    def should_rotate(self, now: Optional[datetime] = None) -> bool:
        if self.max_lines > 0 and self.lines >= self.max_lines:
            return True
        if self.max_bytes > 0 and self.size >= self.max_bytes:
            return True
        if self.daily:
            today = (now or self.clock()).date()
            if today != self.opened_on:
                return True
        return False

    def record_write(self, nbytes: int) -> None:
        self.lines += 1
        self.size += nbytes
