"""
logfactory: configuration-driven logging channels.

Builds named channels (ordered sinks, each with an optional formatter, plus
ordered processors) from a declarative mapping and exposes one leveled logging
facade that routes each event to the selected channel.

Design Pattern: Registry + Factory for component construction.
Library: structlog pipelines, orjson serialization, pydantic validation.
"""

import logging

from .channels import Channel, ChannelBuilder, ChannelLogger, ChannelRegistry
from .components import ComponentCategory, ComponentFactory, ComponentRegistry
from .config import ChannelConfig, ComponentSpec, HandlerSpec, LoggerFactorySettings, load_config, parse_config
from .core import configure, get_factory, reset_factory
from .diagnostics import ROOT_LOGGER_NAME
from .exceptions import (
    ChannelNotFoundError,
    ComponentConstructionError,
    FormatterConstructionError,
    HandlerConstructionError,
    InvalidConfigurationError,
    InvalidLevelError,
    LoggerFactoryError,
    ProcessorConstructionError,
)
from .factory import LoggerFactory
from .interceptors import ChannelHandler, intercept_stdlib
from .levels import Level, parse_level

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "LoggerFactory",
    "LoggerFactorySettings",
    "configure",
    "get_factory",
    "reset_factory",
    "Channel",
    "ChannelBuilder",
    "ChannelLogger",
    "ChannelRegistry",
    "ChannelConfig",
    "ComponentSpec",
    "HandlerSpec",
    "ComponentCategory",
    "ComponentFactory",
    "ComponentRegistry",
    "parse_config",
    "load_config",
    "ChannelHandler",
    "intercept_stdlib",
    "Level",
    "parse_level",
    "LoggerFactoryError",
    "InvalidConfigurationError",
    "ComponentConstructionError",
    "HandlerConstructionError",
    "FormatterConstructionError",
    "ProcessorConstructionError",
    "ChannelNotFoundError",
    "InvalidLevelError",
]
