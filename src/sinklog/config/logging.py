"""
Logging Configuration.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..levels import Level
from .filters import FilterDescriptor, SinkType


def _default_filters() -> list[FilterDescriptor]:
    return [FilterDescriptor(name="stdout", type=SinkType.CONSOLE, level=Level.INFO)]


class LoggingSettings(BaseSettings):
    """Dispatcher configuration.

    ``filters`` is read from ``SINKLOG_FILTERS`` as a JSON list, e.g.
    ``[{"name": "file", "type": "file", "level": "DEBUG",
    "properties": {"filename": "logs/app.log", "rotate": "true", "maxsize": "10M"}}]``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SINKLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    filters: list[FilterDescriptor] = Field(default_factory=_default_filters, description="Sinks to register, in order")
    time_zone: Literal["local", "utc"] = Field(default="local", description="Zone used when rendering times")
    strict: bool = Field(default=False, description="Fail on invalid filters instead of skipping them")
    bridge_level: str = Field(default="INFO", description="Minimum level forwarded from structlog/stdlib")
    intercept_stdlib: bool = Field(default=True, description="Route stdlib logging through the dispatcher")
