import typing as t

import pytest

from logfactory import core
from logfactory.components import ComponentRegistry
from logfactory.config import LoggerFactorySettings


@pytest.fixture(autouse=True)
def reset_global_factory():
    """
    Ensures no test leaks a process-wide LoggerFactory into the next one.
    """
    core.reset_factory()
    yield
    core.reset_factory()


@pytest.fixture
def registry() -> ComponentRegistry:
    """A fresh registry with every built-in component type."""
    return ComponentRegistry.with_builtins()


@pytest.fixture
def settings() -> LoggerFactorySettings:
    """Settings that ignore the developer's environment."""
    return LoggerFactorySettings(_env_file=None)


@pytest.fixture
def memory_config() -> t.Dict[str, t.Any]:
    """Two enabled channels backed by MemorySink plus one disabled channel."""
    return {
        "App": {
            "default": True,
            "handlers": {"MemorySink": {}},
        },
        "Audit": {
            "handlers": {"MemorySink": {"params": {"level": "notice"}}},
            "processors": {"TagProcessor": {"params": {"tags": ["audit"]}}},
        },
        "Legacy": {
            "enabled": False,
            "handlers": {"MemorySink": {}},
        },
    }
