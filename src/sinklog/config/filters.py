"""
Filter descriptors and the sinks they produce.

A filter descriptor names one sink, the minimum level it accepts and the
sink-specific properties. ``build_dispatcher`` registers one sink per
enabled descriptor; where the descriptors come from (settings, a file, code)
is up to the caller.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Iterable, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..diagnostics import get_logger
from ..dispatcher import Dispatcher
from ..exceptions import ConfigurationError, InvalidFilterConfig, InvalidSizeSpec
from ..formatting import FORMAT_DEFAULT, FormatEngine
from ..levels import Level
from ..sinks import BaseSink, ConsoleSink, RotatingFileSink, SocketLogSink, XMLFileSink

logger = get_logger("sinklog.config.filters")

BYTES_BASE = 1024
COUNT_BASE = 1000

_SIZE_RE = re.compile(r"^(\d+)([KMG]?)$", re.IGNORECASE)


def parse_size(value: Any, base: int) -> int:
    """
    Parse ``\\d+[KMG]?`` into an integer.

    K, M and G multiply by ``base``, ``base**2`` and ``base**3``. Sizes use
    base 1024, line/record counts base 1000. Blank means 0 (disabled).
    """
    if isinstance(value, bool):
        raise InvalidSizeSpec(value=str(value), reason="expected a number")
    if isinstance(value, int):
        if value < 0:
            raise InvalidSizeSpec(value=str(value), reason="must not be negative")
        return value

    text = str(value).strip()
    if not text:
        return 0
    match = _SIZE_RE.match(text)
    if match is None:
        raise InvalidSizeSpec(value=text, reason="expected digits with an optional K, M or G suffix")

    number, suffix = match.groups()
    power = "KMG".index(suffix.upper()) + 1 if suffix else 0
    return int(number) * base**power


class SinkType(str, Enum):
    CONSOLE = "console"
    FILE = "file"
    XML = "xml"
    SOCKET = "socket"


class FilterDescriptor(BaseModel):
    """One configured sink: name, sink type, threshold and properties."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1, validation_alias=AliasChoices("name", "tag"))
    enabled: bool = True
    type: SinkType
    level: Level = Level.INFO
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, v: Any) -> Level:
        return Level.parse(v)


class FileSinkOptions(BaseModel):
    """Properties of ``file`` and ``xml`` filters."""

    model_config = ConfigDict(extra="ignore")

    filename: str = Field(min_length=1)
    template: str = Field(default=FORMAT_DEFAULT, validation_alias=AliasChoices("template", "format"))
    rotate: bool = False
    max_size: int = Field(default=0, validation_alias=AliasChoices("max_size", "max-size", "maxsize"))
    max_lines: int = Field(
        default=0,
        validation_alias=AliasChoices("max_lines", "max-lines", "maxlines", "maxrecords", "max_records"),
    )
    daily: bool = False

    @field_validator("max_size", mode="before")
    @classmethod
    def _parse_max_size(cls, v: Any) -> int:
        return parse_size(v, BYTES_BASE)

    @field_validator("max_lines", mode="before")
    @classmethod
    def _parse_max_lines(cls, v: Any) -> int:
        return parse_size(v, COUNT_BASE)


class SocketSinkOptions(BaseModel):
    """Properties of ``socket`` filters."""

    model_config = ConfigDict(extra="ignore")

    endpoint: str = Field(min_length=1)
    protocol: Literal["tcp", "udp", "stream", "datagram"] = "udp"

    @field_validator("protocol", mode="before")
    @classmethod
    def _normalize_protocol(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def build_sink(descriptor: FilterDescriptor, *, engine: Optional[FormatEngine] = None) -> BaseSink:
    """Construct the sink a descriptor describes."""
    try:
        if descriptor.type is SinkType.CONSOLE:
            return ConsoleSink(engine=engine)

        if descriptor.type is SinkType.SOCKET:
            sock = SocketSinkOptions.model_validate(descriptor.properties)
            return SocketLogSink(sock.endpoint, sock.protocol)

        opts = FileSinkOptions.model_validate(descriptor.properties)
        if descriptor.type is SinkType.XML:
            return XMLFileSink(
                opts.filename,
                archive=opts.rotate,
                max_records=opts.max_lines,
                max_bytes=opts.max_size,
                daily=opts.daily,
                engine=engine,
            )
        return RotatingFileSink(
            opts.filename,
            archive=opts.rotate,
            template=opts.template,
            max_lines=opts.max_lines,
            max_bytes=opts.max_size,
            daily=opts.daily,
            engine=engine,
        )
    except (ValidationError, ConfigurationError) as exc:
        raise InvalidFilterConfig(filter_name=descriptor.name, reason=str(exc)) from exc


def build_dispatcher(
    descriptors: Iterable[Union[FilterDescriptor, Mapping[str, Any]]],
    *,
    dispatcher: Optional[Dispatcher] = None,
    strict: bool = False,
    engine: Optional[FormatEngine] = None,
) -> Dispatcher:
    """
    Register one sink per enabled descriptor, in order.

    Invalid descriptors are skipped with a warning, or raise
    ``InvalidFilterConfig`` when ``strict``. Sinks that come up unhealthy
    are not registered.
    """
    dispatcher = dispatcher if dispatcher is not None else Dispatcher()

    for item in descriptors:
        try:
            descriptor = item if isinstance(item, FilterDescriptor) else FilterDescriptor.model_validate(item)
        except ValidationError as exc:
            name = str(item.get("name", "?")) if isinstance(item, Mapping) else "?"
            error = InvalidFilterConfig(filter_name=name, reason=str(exc))
            if strict:
                raise error from exc
            logger.warning("filter_skipped", filter=name, error=str(error))
            continue

        if not descriptor.enabled:
            continue

        try:
            sink = build_sink(descriptor, engine=engine)
        except InvalidFilterConfig as exc:
            if strict:
                raise
            logger.warning("filter_skipped", filter=descriptor.name, error=str(exc))
            continue

        if not sink.healthy():
            logger.warning("filter_sink_unhealthy", filter=descriptor.name, type=descriptor.type.value)
        dispatcher.add_sink(descriptor.name, descriptor.level, sink)

    return dispatcher
