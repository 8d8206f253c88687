"""
Formatters: render a finished event dict into the text a sink writes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import orjson
from structlog.typing import EventDict

# Keys every channel pipeline adds; formatters print them in fixed positions
RESERVED_KEYS = frozenset({"event", "level", "level_no", "channel", "timestamp"})

# Context keys need not be strings
_JSON_OPTIONS = orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC | orjson.OPT_NON_STR_KEYS


def orjson_dumps(v: Any, *, default: Any = str) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=_JSON_OPTIONS).decode()


def context_of(event_dict: EventDict) -> dict[str, Any]:
    """Everything in the event dict that is not one of the reserved keys."""
    return {k: v for k, v in event_dict.items() if k not in RESERVED_KEYS}


class BaseFormatter(ABC):
    """Abstract base class for formatters."""

    @abstractmethod
    def format(self, event_dict: EventDict) -> str:
        """Render one event dict as a single record (no trailing newline)."""
        ...


# =============================================================================
# Line Formatter (engine default)
# =============================================================================


class LineFormatter(BaseFormatter):
    """Single-line ``str.format`` template.

    Available fields: ``timestamp``, ``channel``, ``level`` (upper-case),
    ``message`` and ``context`` (JSON of the remaining keys, empty when there are
    none).
    """

    DEFAULT_FORMAT = "[{timestamp}] {channel}.{level}: {message} {context}"

    def __init__(self, fmt: str | None = None, allow_empty_context: bool = False) -> None:
        self.fmt = fmt or self.DEFAULT_FORMAT
        self.allow_empty_context = allow_empty_context

    def format(self, event_dict: EventDict) -> str:
        context = context_of(event_dict)
        if context:
            rendered_context = orjson_dumps(context)
        else:
            rendered_context = "{}" if self.allow_empty_context else ""
        line = self.fmt.format(
            timestamp=event_dict.get("timestamp", ""),
            channel=event_dict.get("channel", ""),
            level=str(event_dict.get("level", "")).upper(),
            message=event_dict.get("event", ""),
            context=rendered_context,
        )
        return line.rstrip()


# =============================================================================
# JSON Formatter
# =============================================================================


class JsonFormatter(BaseFormatter):
    """One JSON object per record (JSON Lines)."""

    def __init__(self, message_key: str = "message", sort_keys: bool = False) -> None:
        self.message_key = message_key
        self.sort_keys = sort_keys

    def format(self, event_dict: EventDict) -> str:
        payload = dict(event_dict)
        if "event" in payload and self.message_key != "event":
            payload[self.message_key] = payload.pop("event")
        option = _JSON_OPTIONS
        if self.sort_keys:
            option |= orjson.OPT_SORT_KEYS
        return orjson.dumps(payload, default=str, option=option).decode()


# =============================================================================
# Key/Value Formatter
# =============================================================================


class KeyValueFormatter(BaseFormatter):
    """logfmt-style ``key=value`` pairs, reserved keys first."""

    _LEADING = ("timestamp", "level", "channel", "event")

    def __init__(self, sort_keys: bool = True, drop_missing: bool = True) -> None:
        self.sort_keys = sort_keys
        self.drop_missing = drop_missing

    @staticmethod
    def _quote(value: Any) -> str:
        text = str(value)
        if not text or any(c in text for c in ' "='):
            return '"' + text.replace('"', '\\"') + '"'
        return text

    def format(self, event_dict: EventDict) -> str:
        parts = []
        for key in self._LEADING:
            if key not in event_dict and self.drop_missing:
                continue
            parts.append(f"{key}={self._quote(event_dict.get(key, ''))}")
        extras = context_of(event_dict)
        keys = sorted(extras, key=str) if self.sort_keys else list(extras)
        parts.extend(f"{key}={self._quote(extras[key])}" for key in keys)
        return " ".join(parts)


# =============================================================================
# Console Formatter (Aligned Columns)
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "timestamp": "\033[90m",
    "channel": "\033[35m",
    "key": "\033[34m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


class ConsoleFormatter(BaseFormatter):
    """Human-readable console rendering (fixed width, right-aligned columns)."""

    _LEVEL_COLORS = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "NOTICE": "\x1b[34m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[1;31m",
        "ALERT": "\x1b[1;35m",
        "EMERGENCY": "\x1b[1;41m",
    }

    def __init__(
        self,
        colors: bool = False,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        level_width: int = 9,
        channel_width: int = 16,
        separator: str = " | ",
    ) -> None:
        self.colors = colors
        self.timestamp_format = timestamp_format
        self.timestamp_width = len(datetime.now().strftime(timestamp_format))
        self.level_width = level_width
        self.channel_width = channel_width
        self.separator = separator

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            if width <= 3:
                text = text[-width:]
            else:
                text = "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    def _format_timestamp(self, raw_timestamp: Any) -> str:
        if raw_timestamp:
            try:
                dt = datetime.fromisoformat(str(raw_timestamp).replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone().strftime(self.timestamp_format)
            except ValueError:
                pass
        return datetime.now().strftime(self.timestamp_format)

    def _maybe_color(self, text: str, color: str) -> str:
        if not self.colors:
            return text
        return colorize(text, color)

    def _colorize_level(self, text: str, level_upper: str) -> str:
        color = self._LEVEL_COLORS.get(level_upper)
        if not self.colors or not color:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def format(self, event_dict: EventDict) -> str:
        level_upper = str(event_dict.get("level", "info")).upper()
        message_text = str(event_dict.get("event", ""))

        extras = [
            f"{self._maybe_color(k, 'key')}={self._maybe_color(str(v), 'dim')}"
            for k, v in context_of(event_dict).items()
        ]
        if extras:
            message_text = f"{message_text} " + " ".join(extras)

        return self.separator.join(
            [
                self._maybe_color(
                    self._fit_right(self._format_timestamp(event_dict.get("timestamp")), self.timestamp_width),
                    "timestamp",
                ),
                self._colorize_level(self._fit_right(level_upper, self.level_width), level_upper),
                self._maybe_color(self._fit_right(str(event_dict.get("channel", "")), self.channel_width), "channel"),
                message_text,
            ]
        )


__all__ = [
    "BaseFormatter",
    "LineFormatter",
    "JsonFormatter",
    "KeyValueFormatter",
    "ConsoleFormatter",
    "orjson_dumps",
    "context_of",
]
