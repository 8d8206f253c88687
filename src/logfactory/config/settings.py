"""
Factory Settings.
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DefaultPolicy(str, Enum):
    """What to do when more than one enabled channel is marked default."""

    REJECT = "reject"
    LAST = "last"


class SelectionScope(str, Enum):
    """Where the currently selected channel is kept."""

    CONTEXT = "context"  # per thread / asyncio task (contextvars)
    SHARED = "shared"  # one process-wide value behind a lock


class LoggerFactorySettings(BaseSettings):
    """Runtime knobs for LoggerFactory, read from ``LOGFACTORY_*`` env vars."""

    model_config = SettingsConfigDict(
        env_prefix="LOGFACTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    config_file: Optional[str] = Field(default=None, description="Channel configuration file (.json or .toml)")
    default_policy: DefaultPolicy = Field(
        default=DefaultPolicy.REJECT,
        description="Multiple enabled default channels: reject, or let the last one win",
    )
    selection_scope: SelectionScope = Field(default=SelectionScope.CONTEXT, description="Channel selection scope")
    fallback_level: str = Field(
        default="debug",
        description="Minimum level of the stderr channel used when no config file is set",
    )
