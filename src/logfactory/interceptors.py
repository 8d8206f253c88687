"""
Interceptors for routing standard library logging into a channel.
"""

from __future__ import annotations

import logging
from typing import Optional

from .components.sinks import STDLIB_SINK_MARKER
from .diagnostics import ROOT_LOGGER_NAME
from .factory import LoggerFactory
from .levels import from_stdlib


class ChannelHandler(logging.Handler):
    """
    Redirect standard library logging records to a logfactory channel.

    The target channel is named explicitly (or is the default channel); the
    handler never reads or consumes the factory's ambient selection.
    """

    def __init__(self, factory: LoggerFactory, channel: Optional[str] = None, level: int = logging.NOTSET) -> None:
        super().__init__(level=level)
        self.factory = factory
        self.channel = channel

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Skip our own diagnostics and StdlibSink output to avoid loops
            if record.name == ROOT_LOGGER_NAME or record.name.startswith(ROOT_LOGGER_NAME + "."):
                return
            if getattr(record, STDLIB_SINK_MARKER, False):
                return

            msg = self.format(record)
            context = {"logger": record.name}
            if record.exc_info and record.exc_info[0] is not None:
                context["exc_info"] = record.exc_info

            target = self.factory.get_channel(self.channel or self.factory.get_default_channel_name())
            target.log(from_stdlib(record.levelno), msg, context)
        except Exception:
            self.handleError(record)


def intercept_stdlib(
    factory: LoggerFactory,
    channel: Optional[str] = None,
    logger_name: str = "",
    level: int = logging.NOTSET,
) -> ChannelHandler:
    """Replace the handlers of a stdlib logger (root by default) with a ChannelHandler."""
    target = logging.getLogger(logger_name or None)
    handler = ChannelHandler(factory, channel=channel, level=level)
    target.handlers = [handler]
    return handler


__all__ = ["ChannelHandler", "intercept_stdlib"]
