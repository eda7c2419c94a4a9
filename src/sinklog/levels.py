"""
Severity levels.

Eight totally ordered levels, each with a fixed four-character mnemonic used
by the `%L` template code and by the console/XML sinks.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class Level(IntEnum):
    """Ordinal log severity."""

    FINEST = 0
    FINE = 1
    DEBUG = 2
    TRACE = 3
    INFO = 4
    WARNING = 5
    ERROR = 6
    CRITICAL = 7

    @property
    def mnemonic(self) -> str:
        return _MNEMONICS[self]

    @classmethod
    def parse(cls, value: Any) -> Level:
        """
        Coerce a level name, mnemonic or ordinal into a Level.

        Accepts a Level, an int in range, a full name (case-insensitive),
        or a mnemonic such as ``"EROR"`` or ``"WARN"``.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid log level: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid log level ordinal: {value}") from None
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            if key in _BY_MNEMONIC:
                return _BY_MNEMONIC[key]
        raise ValueError(f"Invalid log level: {value!r}")


_MNEMONICS = {
    Level.FINEST: "FNST",
    Level.FINE: "FINE",
    Level.DEBUG: "DEBG",
    Level.TRACE: "TRAC",
    Level.INFO: "INFO",
    Level.WARNING: "WARN",
    Level.ERROR: "EROR",
    Level.CRITICAL: "CRIT",
}

_BY_MNEMONIC = {mnemonic: level for level, mnemonic in _MNEMONICS.items()}
