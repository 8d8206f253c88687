"""
logfactory configuration.

- ``settings``: runtime knobs from ``LOGFACTORY_*`` environment variables
- ``schema``: validation of the nested channel configuration mapping
- ``loader``: reading that mapping from JSON / TOML files
"""

from .loader import load_config
from .schema import ChannelConfig, ComponentSpec, HandlerSpec, parse_channel, parse_config
from .settings import DefaultPolicy, LoggerFactorySettings, SelectionScope

__all__ = [
    "LoggerFactorySettings",
    "DefaultPolicy",
    "SelectionScope",
    "ChannelConfig",
    "ComponentSpec",
    "HandlerSpec",
    "parse_channel",
    "parse_config",
    "load_config",
]
