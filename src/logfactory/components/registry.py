"""
ComponentRegistry: maps (category, type name) to a component factory.

Configuration names components by string; the registry turns that name into an
explicit factory function instead of looking classes up by reflection. Built-in
types also carry a pydantic parameter model, so their argument bag is checked
field by field before the factory runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

from ..diagnostics import get_logger
from ..exceptions import (
    ComponentConstructionError,
    FormatterConstructionError,
    HandlerConstructionError,
    ProcessorConstructionError,
)

logger = get_logger("logfactory.components.registry")


class ComponentCategory(str, Enum):
    """The three kinds of pipeline component."""

    SINK = "sink"
    FORMATTER = "formatter"
    PROCESSOR = "processor"


_CONSTRUCTION_ERRORS: Dict[ComponentCategory, Type[ComponentConstructionError]] = {
    ComponentCategory.SINK: HandlerConstructionError,
    ComponentCategory.FORMATTER: FormatterConstructionError,
    ComponentCategory.PROCESSOR: ProcessorConstructionError,
}


def construction_error(category: ComponentCategory | str) -> Type[ComponentConstructionError]:
    """The typed error raised when a component of ``category`` cannot be built."""
    return _CONSTRUCTION_ERRORS[ComponentCategory(category)]


@dataclass(frozen=True)
class ComponentType:
    category: ComponentCategory
    name: str
    factory: Callable[..., Any]
    params_model: Optional[Type[BaseModel]] = None


class ComponentRegistry:
    """Registry of sink, formatter and processor types."""

    def __init__(self) -> None:
        self._types: Dict[Tuple[ComponentCategory, str], ComponentType] = {}

    @classmethod
    def with_builtins(cls) -> "ComponentRegistry":
        """A registry pre-populated with every built-in component type."""
        from .builtins import register_builtins

        registry = cls()
        register_builtins(registry)
        return registry

    def register(
        self,
        category: ComponentCategory | str,
        name: str,
        factory: Callable[..., Any],
        params_model: Optional[Type[BaseModel]] = None,
    ) -> ComponentType:
        """Register ``factory`` under ``(category, name)``; an existing entry is replaced."""
        category = ComponentCategory(category)
        if not name:
            raise ValueError("Component type names must be non-empty")
        if not callable(factory):
            raise TypeError(f"Factory for {category.value} '{name}' is not callable")

        key = (category, name)
        if key in self._types:
            logger.debug("component_type_replaced", category=category.value, type_name=name)

        component_type = ComponentType(category=category, name=name, factory=factory, params_model=params_model)
        self._types[key] = component_type
        return component_type

    def _decorator(
        self, category: ComponentCategory, name: str, params_model: Optional[Type[BaseModel]]
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(factory: Callable[..., Any]) -> Callable[..., Any]:
            self.register(category, name, factory, params_model)
            return factory

        return decorator

    def register_sink(self, name: str, params_model: Optional[Type[BaseModel]] = None):
        """Decorator form of :meth:`register` for sinks."""
        return self._decorator(ComponentCategory.SINK, name, params_model)

    def register_formatter(self, name: str, params_model: Optional[Type[BaseModel]] = None):
        return self._decorator(ComponentCategory.FORMATTER, name, params_model)

    def register_processor(self, name: str, params_model: Optional[Type[BaseModel]] = None):
        return self._decorator(ComponentCategory.PROCESSOR, name, params_model)

    def resolve(self, category: ComponentCategory | str, name: str) -> ComponentType:
        """Look up a registered type.

        Raises:
            HandlerConstructionError / FormatterConstructionError /
            ProcessorConstructionError: nothing is registered under that name.
        """
        category = ComponentCategory(category)
        try:
            return self._types[(category, name)]
        except KeyError:
            raise construction_error(category)(type_name=name, reason=f"unknown {category.value} type") from None

    def is_registered(self, category: ComponentCategory | str, name: str) -> bool:
        return (ComponentCategory(category), name) in self._types

    def names(self, category: ComponentCategory | str) -> list[str]:
        category = ComponentCategory(category)
        return sorted(name for cat, name in self._types if cat is category)

    def copy(self) -> "ComponentRegistry":
        clone = ComponentRegistry()
        clone._types = dict(self._types)
        return clone

    def __len__(self) -> int:
        return len(self._types)


__all__ = [
    "ComponentCategory",
    "ComponentType",
    "ComponentRegistry",
    "construction_error",
]
