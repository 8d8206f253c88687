"""
Pipeline components: sinks, formatters, processors, and the registry/factory
that builds them from configuration.
"""

from .factory import ComponentFactory, Formatter, Sink
from .formatters import BaseFormatter, ConsoleFormatter, JsonFormatter, KeyValueFormatter, LineFormatter
from .processors import (
    HostnameProcessor,
    MessageInterpolator,
    ProcessIdProcessor,
    TagProcessor,
    UidProcessor,
)
from .registry import ComponentCategory, ComponentRegistry, ComponentType, construction_error
from .sinks import (
    BaseSink,
    FileSink,
    GCloudSink,
    MemorySink,
    NullSink,
    RotatingFileSink,
    StdioSink,
    StdlibSink,
    StreamSink,
)

__all__ = [
    "ComponentCategory",
    "ComponentRegistry",
    "ComponentType",
    "ComponentFactory",
    "construction_error",
    "Sink",
    "Formatter",
    "BaseSink",
    "StreamSink",
    "StdioSink",
    "FileSink",
    "RotatingFileSink",
    "NullSink",
    "MemorySink",
    "StdlibSink",
    "GCloudSink",
    "BaseFormatter",
    "LineFormatter",
    "JsonFormatter",
    "KeyValueFormatter",
    "ConsoleFormatter",
    "MessageInterpolator",
    "UidProcessor",
    "ProcessIdProcessor",
    "HostnameProcessor",
    "TagProcessor",
]
