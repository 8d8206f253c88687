"""
Record-enrichment processors.

Processors follow the structlog contract ``(logger, method_name, event_dict) ->
event_dict`` so that structlog's own processors and these can share one chain.
"""

from __future__ import annotations

import os
import re
import socket
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from structlog.typing import EventDict, WrappedLogger

# =============================================================================
# Pipeline steps every channel runs first
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


class ChannelNameAdder:
    """Add the channel name to log event."""

    def __init__(self, channel: str) -> None:
        self.channel = channel

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["channel"] = self.channel
        return event_dict


# =============================================================================
# Configurable processors
# =============================================================================


class MessageInterpolator:
    """Replace ``{key}`` placeholders in the message with values from the event dict.

    Placeholders without a matching key are left untouched.
    """

    _PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_.]+)\}")

    def __init__(self, remove_used_context_fields: bool = False) -> None:
        self.remove_used_context_fields = remove_used_context_fields

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        message = event_dict.get("event")
        if not isinstance(message, str) or "{" not in message:
            return event_dict

        used: set[str] = set()

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in event_dict or key == "event":
                return match.group(0)
            used.add(key)
            value = event_dict[key]
            if isinstance(value, datetime):
                return value.isoformat()
            return str(value)

        event_dict["event"] = self._PLACEHOLDER.sub(_replace, message)
        if self.remove_used_context_fields:
            for key in used:
                event_dict.pop(key, None)
        return event_dict


class UidProcessor:
    """Add a per-instance unique id (stable until :meth:`reset`) under ``uid``."""

    def __init__(self, length: int = 7) -> None:
        if not 1 <= length <= 32:
            raise ValueError("The uid length must be an integer between 1 and 32")
        self.length = length
        self.uid = self._generate()

    def _generate(self) -> str:
        return uuid.uuid4().hex[: self.length]

    def reset(self) -> None:
        self.uid = self._generate()

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["uid"] = self.uid
        return event_dict


class ProcessIdProcessor:
    """Add the current process id under ``process_id``."""

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["process_id"] = os.getpid()
        return event_dict


class HostnameProcessor:
    """Add the machine hostname under ``hostname``."""

    def __init__(self) -> None:
        self.hostname = socket.gethostname()

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["hostname"] = self.hostname
        return event_dict


class TagProcessor:
    """Attach a fixed set of tags under ``tags``.

    Accepts a list (``["api", "v2"]``) or a mapping (``{"env": "prod"}``).
    """

    def __init__(self, tags: Iterable[str] | Mapping[str, Any] | None = None) -> None:
        if tags is None:
            self.tags: list[str] | dict[str, Any] = []
        elif isinstance(tags, Mapping):
            self.tags = dict(tags)
        else:
            self.tags = list(tags)

    def add_tags(self, tags: Iterable[str] | Mapping[str, Any]) -> None:
        if isinstance(self.tags, dict) and isinstance(tags, Mapping):
            self.tags.update(tags)
        elif isinstance(self.tags, list) and not isinstance(tags, Mapping):
            self.tags.extend(tags)
        else:
            raise TypeError("Cannot mix list tags and mapping tags")

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        if isinstance(self.tags, dict):
            event_dict["tags"] = dict(self.tags)
        else:
            event_dict["tags"] = list(self.tags)
        return event_dict


__all__ = [
    "add_timestamp",
    "ChannelNameAdder",
    "MessageInterpolator",
    "UidProcessor",
    "ProcessIdProcessor",
    "HostnameProcessor",
    "TagProcessor",
]
