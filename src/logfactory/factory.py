"""
LoggerFactory: builds every enabled channel from configuration and exposes one
leveled logging facade over them.

Usage::

    factory = LoggerFactory({
        "app": {"default": True, "handlers": {"StdioSink": {}}},
        "audit": {"handlers": {"FileSink": {"params": {"path": "logs/audit.log"}}}},
    })

    factory.info("User logged in", {"user_id": 42})  # -> app
    factory.select_channel("audit").notice("Role changed")  # -> audit, once
    factory.warning("Disk almost full")  # -> app again
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .channels import Channel, ChannelBuilder, ChannelLogger, ChannelRegistry
from .components.factory import ComponentFactory
from .components.registry import ComponentRegistry
from .config.loader import load_config
from .config.schema import ChannelConfig, parse_config
from .config.settings import DefaultPolicy, LoggerFactorySettings
from .diagnostics import get_logger
from .exceptions import ChannelNotFoundError, InvalidConfigurationError, LoggerFactoryError
from .levels import Level
from .selection import create_selection

logger = get_logger("logfactory.factory")

ConfigSource = Union[Mapping[str, Any], Sequence[ChannelConfig]]


def resolve_default_channel(
    channels: Iterable[ChannelConfig],
    policy: DefaultPolicy | str = DefaultPolicy.REJECT,
) -> str:
    """Name of the single enabled channel marked default.

    Raises:
        InvalidConfigurationError: none is marked default, or several are and
            the policy is ``reject``.
    """
    defaults = [channel.name for channel in channels if channel.enabled and channel.default]
    if not defaults:
        raise InvalidConfigurationError("no default channel specified")
    if len(defaults) > 1 and DefaultPolicy(policy) is DefaultPolicy.REJECT:
        raise InvalidConfigurationError(
            f"more than one default channel specified ({', '.join(defaults)})",
            details={"channels": defaults},
        )
    return defaults[-1]


class LoggerFactory:
    """Channel factory and logging facade.

    Construction is all-or-nothing: if any enabled channel fails to build, the
    channels built so far are closed and the error propagates.
    """

    def __init__(
        self,
        config: ConfigSource,
        *,
        registry: Optional[ComponentRegistry] = None,
        settings: Optional[LoggerFactorySettings] = None,
    ) -> None:
        self._settings = settings or LoggerFactorySettings()
        self._registry = registry if registry is not None else ComponentRegistry.with_builtins()

        configs = parse_config(config) if isinstance(config, Mapping) else list(config)
        self._check_unique_names(configs)
        default_channel = resolve_default_channel(configs, self._settings.default_policy)

        builder = ChannelBuilder(ComponentFactory(self._registry))
        self._channels = ChannelRegistry()
        try:
            for channel_config in configs:
                if not channel_config.enabled:
                    logger.debug("channel_skipped", channel=channel_config.name, reason="disabled")
                    continue
                self._channels.put(channel_config.name, builder.build_channel(channel_config))
        except LoggerFactoryError as exc:
            logger.error("factory_construction_failed", code=exc.code, **exc.details)
            self._channels.close()
            raise

        self._selection = create_selection(self._settings.selection_scope, default_channel)

    @staticmethod
    def _check_unique_names(configs: Sequence[ChannelConfig]) -> None:
        seen: set[str] = set()
        for channel_config in configs:
            if channel_config.name in seen:
                raise InvalidConfigurationError(
                    f"duplicate channel name '{channel_config.name}'",
                    details={"channel": channel_config.name},
                )
            seen.add(channel_config.name)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "LoggerFactory":
        """Build from a ``.json`` or ``.toml`` configuration file."""
        return cls(load_config(path), **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[LoggerFactorySettings] = None,
        *,
        registry: Optional[ComponentRegistry] = None,
    ) -> "LoggerFactory":
        """Build from ``settings.config_file``."""
        settings = settings or LoggerFactorySettings()
        if not settings.config_file:
            raise InvalidConfigurationError("no config file set (LOGFACTORY_CONFIG_FILE)")
        return cls.from_file(settings.config_file, registry=registry, settings=settings)

    # =========================================================================
    # Channels
    # =========================================================================

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    @property
    def settings(self) -> LoggerFactorySettings:
        return self._settings

    def add_channel(self, channel: Channel) -> "LoggerFactory":
        """Register a pre-built channel under its own name, replacing any channel of that name."""
        if not isinstance(channel, Channel):
            raise TypeError(f"Expected a Channel, got {type(channel).__name__}")
        previous = self._channels.put(channel.name, channel)
        if previous is not None and previous is not channel:
            logger.info("channel_replaced", channel=channel.name)
        return self

    def get_channel(self, name: Optional[str] = None) -> Channel:
        """The named channel, or the currently selected one when ``name`` is omitted."""
        return self._channels.get(self._selection.current if name is None else name)

    def is_channel(self, name: str) -> bool:
        return self._channels.has(name)

    def channel_names(self) -> list[str]:
        return self._channels.names()

    def select_channel(self, name: str) -> "LoggerFactory":
        """Route the next logging call to ``name``.

        Raises:
            ChannelNotFoundError: ``name`` is not registered; the selection is unchanged.
        """
        if not self._channels.has(name):
            raise ChannelNotFoundError(name, action="use")
        self._selection.select(name)
        return self

    channel = select_channel

    def get_current_channel_name(self) -> str:
        return self._selection.current

    def get_default_channel_name(self) -> str:
        return self._selection.default

    def using(self, name: Optional[str] = None) -> ChannelLogger:
        """The bound logger of a channel (default channel when omitted).

        Logging through it does not touch the ambient selection.
        """
        return self._channels.get(self._selection.default if name is None else name).logger

    # =========================================================================
    # Logging events
    # =========================================================================

    def log(self, level: Any, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Logs with an arbitrary level.

        The selection returns to the default channel afterwards, whether or not
        the call raised.

        Raises:
            InvalidLevelError: ``level`` names no severity.
        """
        try:
            self._channels.get(self._selection.current).log(level, message, context)
        finally:
            self._selection.reset()

    def emergency(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """System is unusable."""
        self.log(Level.EMERGENCY, message, context)

    def alert(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Action must be taken immediately.

        Example: Entire website down, database unavailable, etc.
        """
        self.log(Level.ALERT, message, context)

    def critical(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Critical conditions. Example: Application component unavailable, unexpected exception."""
        self.log(Level.CRITICAL, message, context)

    def error(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Runtime errors that do not require immediate action but should be logged and monitored."""
        self.log(Level.ERROR, message, context)

    def warning(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Exceptional occurrences that are not errors. Example: Use of deprecated APIs."""
        self.log(Level.WARNING, message, context)

    def notice(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Normal but significant events."""
        self.log(Level.NOTICE, message, context)

    def info(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Interesting events. Example: User logs in, SQL logs."""
        self.log(Level.INFO, message, context)

    def debug(self, message: Any, context: Optional[Mapping[Any, Any]] = None) -> None:
        """Detailed debug information."""
        self.log(Level.DEBUG, message, context)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the sinks of every registered channel."""
        self._channels.close()

    def __enter__(self) -> "LoggerFactory":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["LoggerFactory", "resolve_default_channel"]
