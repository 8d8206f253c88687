"""
Process-wide LoggerFactory instance.
"""

from __future__ import annotations

from typing import Any, Optional

from .config.settings import LoggerFactorySettings
from .factory import ConfigSource, LoggerFactory

# =============================================================================
# Global State
# =============================================================================

_factory_instance: Optional[LoggerFactory] = None


def _fallback_config(settings: LoggerFactorySettings) -> dict[str, Any]:
    """A single default channel writing to stderr."""
    return {
        "default": {
            "default": True,
            "handlers": {"StdioSink": {"params": {"level": settings.fallback_level}}},
        }
    }


def configure(config: ConfigSource, **kwargs: Any) -> LoggerFactory:
    """Build a LoggerFactory and make it the process-wide instance.

    A previously configured instance is closed first.
    """
    global _factory_instance

    factory = LoggerFactory(config, **kwargs)
    if _factory_instance is not None:
        _factory_instance.close()
    _factory_instance = factory
    return factory


def get_factory(settings: Optional[LoggerFactorySettings] = None) -> LoggerFactory:
    """
    Return the process-wide LoggerFactory.

    If configure() was never called, builds one from ``settings.config_file``,
    or a single stderr channel when no file is set.
    """
    global _factory_instance

    if _factory_instance is None:
        settings = settings or LoggerFactorySettings()
        if settings.config_file:
            _factory_instance = LoggerFactory.from_settings(settings)
        else:
            _factory_instance = LoggerFactory(_fallback_config(settings), settings=settings)
    return _factory_instance


def reset_factory() -> None:
    """Close and forget the process-wide instance (used by tests)."""
    global _factory_instance

    if _factory_instance is not None:
        _factory_instance.close()
    _factory_instance = None
