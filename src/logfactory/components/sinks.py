"""
Log sink abstractions and concrete implementations.

A sink receives the finished event dict of one record, renders it with its
formatter and delivers it. Sinks carry a minimum level and a ``bubble`` flag:
a sink that handled a record with ``bubble=False`` stops the record from
reaching the sinks after it in the channel.
"""

from __future__ import annotations

import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, TextIO

from structlog.typing import EventDict

from ..levels import Level, parse_level, to_stdlib
from .formatters import BaseFormatter, ConsoleFormatter, JsonFormatter, LineFormatter

if TYPE_CHECKING:
    from google.cloud.logging import Client as GCloudLoggingClient

LogFormat = Literal["console", "json"]

# Set on records StdlibSink emits so the stdlib bridge does not feed them back
STDLIB_SINK_MARKER = "logfactory_sink"


def resolve_stream(stream: Any) -> TextIO:
    """Accept ``"stdout"``, ``"stderr"``, ``None`` (stderr) or any writable object."""
    if stream is None or stream == "stderr":
        return sys.stderr
    if stream == "stdout":
        return sys.stdout
    if isinstance(stream, str):
        raise ValueError(f"Unknown stream name: {stream!r} (expected 'stdout' or 'stderr')")
    if not callable(getattr(stream, "write", None)):
        raise TypeError(f"Stream {stream!r} has no write() method")
    return stream


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks.

    Args:
        level: Minimum severity this sink handles.
        bubble: When false, records this sink handles are not passed on to later sinks.
    """

    def __init__(self, level: Any = Level.DEBUG, bubble: bool = True) -> None:
        self.level = parse_level(level)
        self.bubble = bubble
        self._formatter: BaseFormatter | None = None

    @property
    def formatter(self) -> BaseFormatter:
        if self._formatter is None:
            self._formatter = self.default_formatter()
        return self._formatter

    def set_formatter(self, formatter: BaseFormatter) -> None:
        self._formatter = formatter

    def default_formatter(self) -> BaseFormatter:
        return LineFormatter()

    def is_handling(self, level: Level) -> bool:
        return level >= self.level

    def handle(self, level: Level, event_dict: EventDict) -> bool:
        """Emit the record if the level qualifies.

        Returns:
            True when propagation to later sinks must stop.
        """
        if not self.is_handling(level):
            return False
        self.emit(level, event_dict)
        return not self.bubble

    @abstractmethod
    def emit(self, level: Level, event_dict: EventDict) -> None:
        """Deliver a log event."""
        ...

    def close(self) -> None:
        """Release held resources. No-op unless the sink owns any."""


class StreamSink(BaseSink):
    """Writes formatted records to a text stream."""

    def __init__(self, stream: Any = None, level: Any = Level.DEBUG, bubble: bool = True) -> None:
        super().__init__(level=level, bubble=bubble)
        self._stream = resolve_stream(stream)

    @property
    def stream(self) -> TextIO:
        return self._stream

    def emit(self, level: Level, event_dict: EventDict) -> None:
        self._stream.write(self.formatter.format(event_dict) + "\n")
        self._stream.flush()


class StdioSink(StreamSink):
    """Standard I/O sink with a console or JSON default format.

    Args:
        fmt: Output format - "console" (colored when the stream is a TTY) or "json"
        stream: "stdout" or "stderr" (default: stderr)
    """

    def __init__(
        self,
        fmt: LogFormat = "console",
        stream: Any = "stderr",
        level: Any = Level.DEBUG,
        bubble: bool = True,
    ) -> None:
        if fmt not in ("console", "json"):
            raise ValueError(f"Unknown stdio format: {fmt!r}")
        super().__init__(stream=stream, level=level, bubble=bubble)
        self._fmt = fmt

    def default_formatter(self) -> BaseFormatter:
        if self._fmt == "json":
            return JsonFormatter()
        use_color = bool(getattr(self._stream, "isatty", lambda: False)())
        return ConsoleFormatter(colors=use_color)


class FileSink(BaseSink):
    """Local file sink (JSON Lines by default)."""

    def __init__(
        self,
        path: str,
        mode: Literal["a", "w"] = "a",
        encoding: str = "utf-8",
        level: Any = Level.DEBUG,
        bubble: bool = True,
    ) -> None:
        super().__init__(level=level, bubble=bubble)
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._encoding = encoding
        self._file = open(self._path, mode, encoding=encoding)

    @property
    def path(self) -> Path:
        return self._path

    def default_formatter(self) -> BaseFormatter:
        return JsonFormatter()

    def emit(self, level: Level, event_dict: EventDict) -> None:
        self._file.write(self.formatter.format(event_dict) + "\n")
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class RotatingFileSink(FileSink):
    """File sink that rolls over to ``<path>.1 .. <path>.N`` past ``max_bytes``."""

    def __init__(
        self,
        path: str,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        encoding: str = "utf-8",
        level: Any = Level.DEBUG,
        bubble: bool = True,
    ) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if backup_count < 0:
            raise ValueError("backup_count must not be negative")
        super().__init__(path, mode="a", encoding=encoding, level=level, bubble=bubble)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    def emit(self, level: Level, event_dict: EventDict) -> None:
        super().emit(level, event_dict)
        self._maybe_rotate()

    def _backup_path(self, index: int) -> Path:
        return self._path.with_name(f"{self._path.name}.{index}")

    def _maybe_rotate(self) -> None:
        if self._path.stat().st_size <= self._max_bytes:
            return
        self._file.close()
        if self._backup_count > 0:
            for i in range(self._backup_count - 1, 0, -1):
                src = self._backup_path(i)
                if src.exists():
                    os.replace(src, self._backup_path(i + 1))
            os.replace(self._path, self._backup_path(1))
        else:
            self._path.unlink()
        self._file = open(self._path, "a", encoding=self._encoding)


class NullSink(BaseSink):
    """Discards every record it handles; by default it also stops propagation."""

    def __init__(self, level: Any = Level.DEBUG, bubble: bool = False) -> None:
        super().__init__(level=level, bubble=bubble)

    def emit(self, level: Level, event_dict: EventDict) -> None:
        return None


class MemorySink(BaseSink):
    """Keeps records in memory. Intended for tests and inspection."""

    def __init__(self, level: Any = Level.DEBUG, bubble: bool = True) -> None:
        super().__init__(level=level, bubble=bubble)
        self.records: list[EventDict] = []
        self.lines: list[str] = []

    def emit(self, level: Level, event_dict: EventDict) -> None:
        self.records.append(dict(event_dict))
        self.lines.append(self.formatter.format(event_dict))

    def has_records(self, level: Any | None = None) -> bool:
        if level is None:
            return bool(self.records)
        wanted = parse_level(level).method_name
        return any(record.get("level") == wanted for record in self.records)

    def clear(self) -> None:
        self.records.clear()
        self.lines.clear()


class StdlibSink(BaseSink):
    """Forwards formatted records to a standard-library ``logging.Logger``."""

    def __init__(self, logger_name: str = "", level: Any = Level.DEBUG, bubble: bool = True) -> None:
        super().__init__(level=level, bubble=bubble)
        self._logger = logging.getLogger(logger_name or None)

    def default_formatter(self) -> BaseFormatter:
        return LineFormatter("{message} {context}")

    def emit(self, level: Level, event_dict: EventDict) -> None:
        self._logger.log(to_stdlib(level), self.formatter.format(event_dict), extra={STDLIB_SINK_MARKER: True})


class GCloudSink(BaseSink):
    """Google Cloud Logging sink (structured entries; the formatter is not used).

    Requires the ``gcloud`` extra (``google-cloud-logging``).
    """

    def __init__(
        self,
        project_id: str | None = None,
        log_name: str = "logfactory",
        level: Any = Level.DEBUG,
        bubble: bool = True,
    ) -> None:
        super().__init__(level=level, bubble=bubble)
        try:
            from google.cloud import logging as gcloud_logging
        except ImportError as exc:
            raise RuntimeError("GCloudSink requires google-cloud-logging (install logfactory[gcloud])") from exc

        self._client: GCloudLoggingClient = gcloud_logging.Client(project=project_id)
        self._logger = self._client.logger(log_name)

    def emit(self, level: Level, event_dict: EventDict) -> None:
        # Cloud Logging severities share the RFC 5424 names
        self._logger.log_struct({str(k): v for k, v in event_dict.items()}, severity=level.name)

    def close(self) -> None:
        self._client.close()


__all__ = [
    "BaseSink",
    "StreamSink",
    "StdioSink",
    "FileSink",
    "RotatingFileSink",
    "NullSink",
    "MemorySink",
    "StdlibSink",
    "GCloudSink",
    "resolve_stream",
    "STDLIB_SINK_MARKER",
]
