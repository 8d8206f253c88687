"""
Channel configuration schema.

The raw configuration is a nested mapping keyed by channel name::

    {
        "app": {
            "default": True,
            "handlers": {
                "StdioSink": {"params": {"fmt": "json"}},
                "FileSink": {
                    "params": ["logs/app.log"],
                    "formatter": {"name": "LineFormatter"},
                },
            },
            "processors": {"UidProcessor": {"params": {"length": 12}}},
        },
        "audit": {"enabled": False},
    }

``handlers`` and ``processors`` may also be lists of ``{"type": ..., ...}``
entries, which lets one channel use the same type more than once.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from ..exceptions import InvalidConfigurationError


# =============================================================================
# Normalized specs
# =============================================================================


class ComponentSpec(BaseModel):
    """One sink, formatter or processor: a registered type name plus its argument bag."""

    model_config = ConfigDict(frozen=True)

    type_name: str = Field(min_length=1)
    params: Any = None


class HandlerSpec(ComponentSpec):
    """A sink plus the formatter bound to it (None: the sink's default formatter)."""

    formatter: Optional[ComponentSpec] = None


class ChannelConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    enabled: bool = True
    default: bool = False
    handlers: Tuple[HandlerSpec, ...] = ()
    processors: Tuple[ComponentSpec, ...] = ()


# =============================================================================
# Raw (file / dict) shapes
# =============================================================================


class _RawFormatter(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    params: Any = None


class _RawHandler(BaseModel):
    model_config = ConfigDict(extra="forbid")

    params: Any = None
    formatter: Optional[_RawFormatter] = None


class _RawHandlerEntry(_RawHandler):
    type: str = Field(min_length=1)


class _RawProcessor(BaseModel):
    model_config = ConfigDict(extra="forbid")

    params: Any = None


class _RawProcessorEntry(_RawProcessor):
    type: str = Field(min_length=1)


class _RawChannel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: StrictBool = True
    default: StrictBool = False
    handlers: Union[Dict[str, Optional[_RawHandler]], List[_RawHandlerEntry], None] = None
    processors: Union[Dict[str, Optional[_RawProcessor]], List[_RawProcessorEntry], None] = None


def _handler_specs(raw: _RawChannel) -> Tuple[HandlerSpec, ...]:
    if raw.handlers is None:
        return ()
    if isinstance(raw.handlers, list):
        pairs = [(entry.type, entry) for entry in raw.handlers]
    else:
        pairs = [(name, entry or _RawHandler()) for name, entry in raw.handlers.items()]

    specs = []
    for type_name, entry in pairs:
        formatter = None
        if entry.formatter is not None:
            formatter = ComponentSpec(type_name=entry.formatter.name, params=entry.formatter.params)
        specs.append(HandlerSpec(type_name=type_name, params=entry.params, formatter=formatter))
    return tuple(specs)


def _processor_specs(raw: _RawChannel) -> Tuple[ComponentSpec, ...]:
    if raw.processors is None:
        return ()
    if isinstance(raw.processors, list):
        return tuple(ComponentSpec(type_name=entry.type, params=entry.params) for entry in raw.processors)
    return tuple(
        ComponentSpec(type_name=name, params=(entry.params if entry else None))
        for name, entry in raw.processors.items()
    )


def parse_channel(name: str, options: Mapping[str, Any] | None) -> ChannelConfig:
    """Validate one channel entry of the raw configuration."""
    if not isinstance(name, str) or not name:
        raise InvalidConfigurationError("channel names must be non-empty strings", details={"channel": repr(name)})
    try:
        raw = _RawChannel.model_validate(dict(options) if isinstance(options, Mapping) else (options or {}))
        return ChannelConfig(
            name=name,
            enabled=raw.enabled,
            default=raw.default,
            handlers=_handler_specs(raw),
            processors=_processor_specs(raw),
        )
    except ValidationError as exc:
        raise InvalidConfigurationError(
            f"channel '{name}' is malformed: {exc.error_count()} validation error(s)",
            details={"channel": name, "errors": exc.errors(include_url=False)},
        ) from exc


def parse_config(config: Mapping[str, Any]) -> List[ChannelConfig]:
    """Turn the raw nested mapping into ordered ChannelConfig objects."""
    if not isinstance(config, Mapping):
        raise InvalidConfigurationError(
            f"expected a mapping of channel name to options, got {type(config).__name__}"
        )
    return [parse_channel(name, options) for name, options in config.items()]


__all__ = [
    "ComponentSpec",
    "HandlerSpec",
    "ChannelConfig",
    "parse_channel",
    "parse_config",
]
