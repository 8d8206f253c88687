"""
Severity levels (RFC 5424 ordering).
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from .exceptions import InvalidLevelError


class Level(IntEnum):
    DEBUG = 100
    INFO = 200
    NOTICE = 250
    WARNING = 300
    ERROR = 400
    CRITICAL = 500
    ALERT = 550
    EMERGENCY = 600

    @property
    def method_name(self) -> str:
        """Lower-case name, used as the structlog method name and the ``level`` key."""
        return self.name.lower()


LEVEL_NAMES: tuple[str, ...] = tuple(level.method_name for level in Level)

# stdlib logging level -> severity, used by the stdlib bridge
_STDLIB_TO_LEVEL = {
    logging.DEBUG: Level.DEBUG,
    logging.INFO: Level.INFO,
    logging.WARNING: Level.WARNING,
    logging.ERROR: Level.ERROR,
    logging.CRITICAL: Level.CRITICAL,
}

# severity -> stdlib logging level, used by StdlibSink
_LEVEL_TO_STDLIB = {
    Level.DEBUG: logging.DEBUG,
    Level.INFO: logging.INFO,
    Level.NOTICE: logging.INFO,
    Level.WARNING: logging.WARNING,
    Level.ERROR: logging.ERROR,
    Level.CRITICAL: logging.CRITICAL,
    Level.ALERT: logging.CRITICAL,
    Level.EMERGENCY: logging.CRITICAL,
}


def parse_level(value: Any) -> Level:
    """Resolve a Level, its integer value or its (case-insensitive) name.

    Raises:
        InvalidLevelError: ``value`` names no severity.
    """
    if isinstance(value, Level):
        return value
    # bool is an int subclass; True is never a level
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Level(value)
        except ValueError:
            raise InvalidLevelError(value) from None
    if isinstance(value, str):
        try:
            return Level[value.strip().upper()]
        except KeyError:
            raise InvalidLevelError(value) from None
    raise InvalidLevelError(value)


def from_stdlib(levelno: int) -> Level:
    """Map a stdlib ``logging`` level number onto the nearest severity at or below it."""
    if levelno in _STDLIB_TO_LEVEL:
        return _STDLIB_TO_LEVEL[levelno]
    candidates = [std for std in _STDLIB_TO_LEVEL if std <= levelno]
    if not candidates:
        return Level.DEBUG
    return _STDLIB_TO_LEVEL[max(candidates)]


def to_stdlib(level: Level) -> int:
    return _LEVEL_TO_STDLIB[level]


__all__ = ["Level", "LEVEL_NAMES", "parse_level", "from_stdlib", "to_stdlib"]
