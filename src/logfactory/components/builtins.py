"""
Built-in component types and their parameter models.

Each parameter model is strict (no coercion, unknown fields rejected) and lists
its fields in the same order as the component's constructor, so a positional
``params`` list maps onto the same arguments.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from . import formatters, processors, sinks
from .registry import ComponentCategory, ComponentRegistry

LevelParam = Union[StrictStr, StrictInt]

_INTERNAL_FRAMES = ["logfactory"]


class ComponentParams(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, arbitrary_types_allowed=True)


# =============================================================================
# Sinks
# =============================================================================


class StreamSinkParams(ComponentParams):
    stream: Any = None
    level: LevelParam = "debug"
    bubble: bool = True


class StdioSinkParams(ComponentParams):
    fmt: Literal["console", "json"] = "console"
    stream: Literal["stdout", "stderr"] = "stderr"
    level: LevelParam = "debug"
    bubble: bool = True


class FileSinkParams(ComponentParams):
    path: str = Field(min_length=1)
    mode: Literal["a", "w"] = "a"
    encoding: str = "utf-8"
    level: LevelParam = "debug"
    bubble: bool = True


class RotatingFileSinkParams(ComponentParams):
    path: str = Field(min_length=1)
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    backup_count: int = Field(default=5, ge=0)
    encoding: str = "utf-8"
    level: LevelParam = "debug"
    bubble: bool = True


class NullSinkParams(ComponentParams):
    level: LevelParam = "debug"
    bubble: bool = False


class MemorySinkParams(ComponentParams):
    level: LevelParam = "debug"
    bubble: bool = True


class StdlibSinkParams(ComponentParams):
    logger_name: str = ""
    level: LevelParam = "debug"
    bubble: bool = True


class GCloudSinkParams(ComponentParams):
    project_id: Optional[str] = None
    log_name: str = "logfactory"
    level: LevelParam = "debug"
    bubble: bool = True


# =============================================================================
# Formatters
# =============================================================================


class LineFormatterParams(ComponentParams):
    fmt: Optional[str] = None
    allow_empty_context: bool = False


class JsonFormatterParams(ComponentParams):
    message_key: str = "message"
    sort_keys: bool = False


class KeyValueFormatterParams(ComponentParams):
    sort_keys: bool = True
    drop_missing: bool = True


class ConsoleFormatterParams(ComponentParams):
    colors: bool = False
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    level_width: int = Field(default=9, ge=0)
    channel_width: int = Field(default=16, ge=0)
    separator: str = " | "


# =============================================================================
# Processors
# =============================================================================


class NoParams(ComponentParams):
    pass


class TimeStamperParams(ComponentParams):
    fmt: Optional[str] = "iso"
    utc: bool = True
    key: str = "timestamp"


class CallsiteParameterAdderParams(ComponentParams):
    parameters: Optional[List[str]] = None
    additional_ignores: Optional[List[str]] = None


class EventRenamerParams(ComponentParams):
    to: str = Field(min_length=1)
    replace_by: Optional[str] = None


class StackInfoRendererParams(ComponentParams):
    additional_ignores: Optional[List[str]] = None


class MessageInterpolatorParams(ComponentParams):
    remove_used_context_fields: bool = False


class UidProcessorParams(ComponentParams):
    length: int = Field(default=7, ge=1, le=32)


class TagProcessorParams(ComponentParams):
    tags: Union[List[str], Dict[str, Any], None] = None


def _callsite_parameter_adder(
    parameters: Optional[List[str]] = None,
    additional_ignores: Optional[List[str]] = None,
) -> structlog.processors.CallsiteParameterAdder:
    names = parameters or ["filename", "func_name", "lineno"]
    return structlog.processors.CallsiteParameterAdder(
        parameters={structlog.processors.CallsiteParameter(name) for name in names},
        additional_ignores=_INTERNAL_FRAMES + list(additional_ignores or []),
    )


def _stack_info_renderer(additional_ignores: Optional[List[str]] = None) -> structlog.processors.StackInfoRenderer:
    return structlog.processors.StackInfoRenderer(additional_ignores=_INTERNAL_FRAMES + list(additional_ignores or []))


_BUILTINS = [
    # sinks
    (ComponentCategory.SINK, "StreamSink", sinks.StreamSink, StreamSinkParams),
    (ComponentCategory.SINK, "StdioSink", sinks.StdioSink, StdioSinkParams),
    (ComponentCategory.SINK, "FileSink", sinks.FileSink, FileSinkParams),
    (ComponentCategory.SINK, "RotatingFileSink", sinks.RotatingFileSink, RotatingFileSinkParams),
    (ComponentCategory.SINK, "NullSink", sinks.NullSink, NullSinkParams),
    (ComponentCategory.SINK, "MemorySink", sinks.MemorySink, MemorySinkParams),
    (ComponentCategory.SINK, "StdlibSink", sinks.StdlibSink, StdlibSinkParams),
    (ComponentCategory.SINK, "GCloudSink", sinks.GCloudSink, GCloudSinkParams),
    # formatters
    (ComponentCategory.FORMATTER, "LineFormatter", formatters.LineFormatter, LineFormatterParams),
    (ComponentCategory.FORMATTER, "JsonFormatter", formatters.JsonFormatter, JsonFormatterParams),
    (ComponentCategory.FORMATTER, "KeyValueFormatter", formatters.KeyValueFormatter, KeyValueFormatterParams),
    (ComponentCategory.FORMATTER, "ConsoleFormatter", formatters.ConsoleFormatter, ConsoleFormatterParams),
    # processors
    (ComponentCategory.PROCESSOR, "TimeStamper", structlog.processors.TimeStamper, TimeStamperParams),
    (ComponentCategory.PROCESSOR, "CallsiteParameterAdder", _callsite_parameter_adder, CallsiteParameterAdderParams),
    (ComponentCategory.PROCESSOR, "EventRenamer", structlog.processors.EventRenamer, EventRenamerParams),
    (ComponentCategory.PROCESSOR, "ExceptionRenderer", structlog.processors.ExceptionRenderer, NoParams),
    (ComponentCategory.PROCESSOR, "StackInfoRenderer", _stack_info_renderer, StackInfoRendererParams),
    (ComponentCategory.PROCESSOR, "MessageInterpolator", processors.MessageInterpolator, MessageInterpolatorParams),
    (ComponentCategory.PROCESSOR, "UidProcessor", processors.UidProcessor, UidProcessorParams),
    (ComponentCategory.PROCESSOR, "ProcessIdProcessor", processors.ProcessIdProcessor, NoParams),
    (ComponentCategory.PROCESSOR, "HostnameProcessor", processors.HostnameProcessor, NoParams),
    (ComponentCategory.PROCESSOR, "TagProcessor", processors.TagProcessor, TagProcessorParams),
]


def register_builtins(registry: ComponentRegistry) -> None:
    for category, name, factory, params_model in _BUILTINS:
        registry.register(category, name, factory, params_model)
