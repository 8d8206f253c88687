"""
Channels: named logging pipelines built on structlog.

A channel's pipeline is::

    add_log_level -> ChannelNameAdder -> add_timestamp -> <configured processors> -> SinkDispatcher

The dispatcher hands the finished event dict to each sink in configuration
order and returns an empty string, so the wrapped logger itself writes nothing.
"""

from __future__ import annotations

import threading
from contextlib import ExitStack
from typing import Any, Iterable, Iterator, Mapping, Sequence

from structlog import BoundLoggerBase, DropEvent
from structlog.typing import EventDict, Processor, WrappedLogger

from .components.factory import ComponentFactory
from .components.formatters import RESERVED_KEYS as PIPELINE_KEYS
from .components.processors import ChannelNameAdder, add_timestamp
from .config.schema import ChannelConfig
from .diagnostics import get_logger
from .exceptions import ChannelNotFoundError
from .levels import Level, parse_level

logger = get_logger("logfactory.channels")


# =============================================================================
# Structlog plumbing
# =============================================================================


def add_log_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the level name and number to log event."""
    level = Level[method_name.upper()]
    event_dict["level"] = level.method_name
    event_dict["level_no"] = int(level)
    return event_dict


def merge_context(*contexts: Mapping[Any, Any] | None) -> EventDict:
    """Merge context mappings into a fresh event dict.

    Keys the pipeline writes itself are moved to ``context_<key>``.
    """
    event_dict: EventDict = {}
    for context in contexts:
        for key, value in (context or {}).items():
            if key in PIPELINE_KEYS:
                key = f"context_{key}"
            event_dict[key] = value
    return event_dict


class SinkDispatcher:
    """Final pipeline step: deliver the event to the sinks in order."""

    def __init__(self, sinks: Sequence[Any]) -> None:
        self.sinks = tuple(sinks)

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        level = Level[method_name.upper()]
        for sink in self.sinks:
            if sink.handle(level, event_dict):
                break
        return ""


class _Discard:
    """Wrapped logger that drops the (empty) rendered output."""

    def msg(self, *args: Any, **kwargs: Any) -> None:
        return None

    emergency = alert = critical = error = warning = notice = info = debug = msg


class ChannelLogger(BoundLoggerBase):
    """Bound logger with one method per severity level.

    ``bind()``/``new()``/``unbind()`` work as in any structlog bound logger and
    return loggers that share the channel's processors and sinks.
    """

    def emit(self, level: Any, event: Any = None, context: Mapping[Any, Any] | None = None) -> Any:
        """Run one event through the pipeline.

        ``context`` is taken as a mapping, so its keys need not be strings.
        Bound or context values under a pipeline key (``event``, ``level``,
        ``level_no``, ``channel``, ``timestamp``) are kept as
        ``context_<key>``; the pipeline keys always hold the pipeline's values.
        """
        level = parse_level(level)
        event_dict = merge_context(self._context, context)
        if event is not None:
            event_dict["event"] = event

        try:
            for processor in self._processors:
                event_dict = processor(self._logger, level.method_name, event_dict)
        except DropEvent:
            return None
        return getattr(self._logger, level.method_name)(event_dict)

    def log(self, level: Any, event: Any = None, **kw: Any) -> Any:
        return self.emit(level, event, kw)

    def emergency(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.EMERGENCY, event, kw)

    def alert(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.ALERT, event, kw)

    def critical(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.CRITICAL, event, kw)

    def error(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.ERROR, event, kw)

    def warning(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.WARNING, event, kw)

    def notice(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.NOTICE, event, kw)

    def info(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.INFO, event, kw)

    def debug(self, event: Any = None, **kw: Any) -> Any:
        return self.emit(Level.DEBUG, event, kw)


# =============================================================================
# Channel
# =============================================================================


class Channel:
    """A named pipeline: processor chain followed by sink chain."""

    def __init__(self, name: str, sinks: Iterable[Any] = (), processors: Iterable[Processor] = ()) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("Channel names must be non-empty strings")
        self._name = name
        self._sinks = tuple(sinks)
        self._processors = tuple(processors)
        pipeline = [add_log_level, ChannelNameAdder(name), add_timestamp, *self._processors, SinkDispatcher(self._sinks)]
        self._logger = ChannelLogger(_Discard(), processors=pipeline, context={})

    @property
    def name(self) -> str:
        return self._name

    @property
    def sinks(self) -> tuple[Any, ...]:
        return self._sinks

    @property
    def processors(self) -> tuple[Processor, ...]:
        return self._processors

    @property
    def logger(self) -> ChannelLogger:
        return self._logger

    def log(self, level: Any, message: Any, context: Mapping[Any, Any] | None = None) -> None:
        self._logger.emit(level, message, context)

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()

    def __repr__(self) -> str:
        return f"Channel(name={self._name!r}, sinks={len(self._sinks)}, processors={len(self._processors)})"


# =============================================================================
# Builder
# =============================================================================


class ChannelBuilder:
    """Assemble a Channel from its ChannelConfig."""

    def __init__(self, components: ComponentFactory) -> None:
        self._components = components

    def build_channel(self, config: ChannelConfig) -> Channel:
        """Build sinks (with formatters) then processors, both in configuration order.

        Sinks already opened are closed again if a later component fails.
        """
        sinks = []
        processors = []
        with ExitStack() as cleanup:
            for handler in config.handlers:
                sink = self._components.build_sink(handler)
                cleanup.callback(sink.close)
                if handler.formatter is not None:
                    sink.set_formatter(self._components.build_formatter(handler.formatter))
                sinks.append(sink)

            for spec in config.processors:
                processors.append(self._components.build_processor(spec))

            cleanup.pop_all()

        logger.debug("channel_built", channel=config.name, sinks=len(sinks), processors=len(processors))
        return Channel(config.name, sinks, processors)


# =============================================================================
# Registry
# =============================================================================


class ChannelRegistry:
    """Name -> Channel store. Writes overwrite; lookups of unknown names raise."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}
        self._lock = threading.RLock()

    def put(self, name: str, channel: Channel) -> Channel | None:
        """Store ``channel`` under ``name`` and return the channel it replaced, if any."""
        with self._lock:
            previous = self._channels.get(name)
            self._channels[name] = channel
        return previous

    def get(self, name: str) -> Channel:
        with self._lock:
            try:
                return self._channels[name]
            except KeyError:
                raise ChannelNotFoundError(name) from None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._channels

    def names(self) -> list[str]:
        with self._lock:
            return list(self._channels)

    def close(self) -> None:
        """Close the sinks of every channel."""
        with self._lock:
            channels = list(self._channels.values())
        for channel in channels:
            channel.close()

    def __iter__(self) -> Iterator[Channel]:
        with self._lock:
            return iter(list(self._channels.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)


__all__ = [
    "Channel",
    "ChannelLogger",
    "ChannelBuilder",
    "ChannelRegistry",
    "SinkDispatcher",
    "add_log_level",
    "merge_context",
]
