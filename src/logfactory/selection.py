"""
Channel selection state.

Two observable states: at-default (current == default) and selected(name). A
selection lasts for exactly one logging call; the facade resets it afterwards.
The default channel name is fixed when the state is created.
"""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import Optional

from .config.settings import SelectionScope

_ids = itertools.count()


class SelectionState(ABC):
    def __init__(self, default_channel: str) -> None:
        self._default = default_channel

    @property
    def default(self) -> str:
        return self._default

    @property
    @abstractmethod
    def current(self) -> str: ...

    @abstractmethod
    def select(self, name: str) -> None: ...

    @abstractmethod
    def reset(self) -> None: ...

    @property
    def is_at_default(self) -> bool:
        return self.current == self._default


class ContextSelection(SelectionState):
    """Selection kept in a ContextVar: each thread and asyncio task sees its own."""

    def __init__(self, default_channel: str) -> None:
        super().__init__(default_channel)
        self._current: ContextVar[Optional[str]] = ContextVar(f"logfactory_channel_{next(_ids)}", default=None)

    @property
    def current(self) -> str:
        return self._current.get() or self._default

    def select(self, name: str) -> None:
        self._current.set(name)

    def reset(self) -> None:
        self._current.set(None)


class SharedSelection(SelectionState):
    """One process-wide selection guarded by a lock.

    Concurrent callers can still consume each other's selection between
    ``select`` and the logging call; use ContextSelection when that matters.
    """

    def __init__(self, default_channel: str) -> None:
        super().__init__(default_channel)
        self._lock = threading.Lock()
        self._current_name = default_channel

    @property
    def current(self) -> str:
        with self._lock:
            return self._current_name

    def select(self, name: str) -> None:
        with self._lock:
            self._current_name = name

    def reset(self) -> None:
        with self._lock:
            self._current_name = self._default


def create_selection(scope: SelectionScope | str, default_channel: str) -> SelectionState:
    if SelectionScope(scope) is SelectionScope.SHARED:
        return SharedSelection(default_channel)
    return ContextSelection(default_channel)


__all__ = ["SelectionState", "ContextSelection", "SharedSelection", "create_selection"]
