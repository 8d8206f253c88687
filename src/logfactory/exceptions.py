"""
logfactory exception hierarchy.

Construction errors (configuration, handlers, formatters, processors) are fatal to
factory creation. Per-call errors (channel lookup, level parsing) are raised to the
immediate caller and never leave the channel selection in a half-updated state.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LoggerFactoryError(Exception):
    """Root of every error raised by logfactory.

    Attributes:
        code: Machine-readable slug.
        details: Extra context (offending names, categories, ...).
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class InvalidConfigurationError(LoggerFactoryError):
    """The channel configuration is malformed or has no unique default channel."""

    def __init__(self, reason: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            f"Invalid configuration: {reason}",
            code="INVALID_CONFIGURATION",
            details=details,
        )


# ================================
# Component construction
# ================================


class ComponentConstructionError(LoggerFactoryError):
    """A sink, formatter or processor could not be built.

    Raised either because the type name is not registered for its category or
    because the component rejected its parameters.
    """

    category: str = "component"
    code: str = "COMPONENT_CONSTRUCTION"

    def __init__(self, *, type_name: str, reason: str) -> None:
        message = f"Unable to create {self.category} ({type_name}): {reason}"
        super().__init__(
            message,
            code=self.__class__.code,
            details={"category": self.category, "type_name": type_name, "reason": reason},
        )
        self.type_name = type_name
        self.reason = reason


class HandlerConstructionError(ComponentConstructionError):
    category = "sink"
    code = "HANDLER_CONSTRUCTION"


class FormatterConstructionError(ComponentConstructionError):
    category = "formatter"
    code = "FORMATTER_CONSTRUCTION"


class ProcessorConstructionError(ComponentConstructionError):
    category = "processor"
    code = "PROCESSOR_CONSTRUCTION"


# ================================
# Per-call errors
# ================================


class ChannelNotFoundError(LoggerFactoryError):
    """Lookup or selection of a channel name that is not registered."""

    def __init__(self, channel: str, *, action: str = "get") -> None:
        super().__init__(
            f"Unable to {action} channel ({channel}): channel not found",
            code="CHANNEL_NOT_FOUND",
            details={"channel": channel},
        )
        self.channel = channel


class InvalidLevelError(LoggerFactoryError, ValueError):
    """An unrecognized severity was passed to the generic logging entry point."""

    def __init__(self, level: Any) -> None:
        super().__init__(
            f"Level {level!r} is not defined",
            code="INVALID_LEVEL",
            details={"level": str(level)},
        )
        self.level = level


__all__ = [
    "LoggerFactoryError",
    "InvalidConfigurationError",
    "ComponentConstructionError",
    "HandlerConstructionError",
    "FormatterConstructionError",
    "ProcessorConstructionError",
    "ChannelNotFoundError",
    "InvalidLevelError",
]
