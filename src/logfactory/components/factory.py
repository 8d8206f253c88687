"""
ComponentFactory: build one sink, formatter or processor from its ComponentSpec.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, Tuple, runtime_checkable

from pydantic import ValidationError

from ..config.schema import ComponentSpec
from .registry import ComponentCategory, ComponentRegistry, ComponentType, construction_error


@runtime_checkable
class Sink(Protocol):
    def handle(self, level: Any, event_dict: Any) -> bool: ...

    def set_formatter(self, formatter: Any) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class Formatter(Protocol):
    def format(self, event_dict: Any) -> str: ...


def _conforms(category: ComponentCategory, instance: Any) -> bool:
    if category is ComponentCategory.SINK:
        return isinstance(instance, Sink)
    if category is ComponentCategory.FORMATTER:
        return isinstance(instance, Formatter)
    return callable(instance)


class ComponentFactory:
    """Instantiate registered component types.

    Parameters are forwarded without coercion: a list positionally, a mapping by
    keyword, ``None`` as no arguments at all. When the type has a parameter
    model, the bag is validated against it first and only the fields actually
    supplied are passed on, so the component's own defaults still apply.
    """

    def __init__(self, registry: ComponentRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    def build(self, category: ComponentCategory | str, spec: ComponentSpec) -> Any:
        """Build a component.

        Raises:
            HandlerConstructionError / FormatterConstructionError /
            ProcessorConstructionError: unknown type, rejected parameters, a
                failing constructor, or a result lacking the category's interface.
        """
        category = ComponentCategory(category)
        component_type = self._registry.resolve(category, spec.type_name)
        error_cls = construction_error(category)

        try:
            args, kwargs = self._arguments(component_type, spec.params)
        except ValidationError as exc:
            raise error_cls(
                type_name=spec.type_name,
                reason=f"invalid params: {exc.error_count()} validation error(s)",
            ) from exc
        except (TypeError, ValueError) as exc:
            raise error_cls(type_name=spec.type_name, reason=str(exc)) from exc

        try:
            instance = component_type.factory(*args, **kwargs)
        except Exception as exc:
            raise error_cls(type_name=spec.type_name, reason=f"{type(exc).__name__}: {exc}") from exc

        if not _conforms(category, instance):
            raise error_cls(
                type_name=spec.type_name,
                reason=f"{type(instance).__name__} does not implement the {category.value} interface",
            )
        return instance

    def build_sink(self, spec: ComponentSpec) -> Any:
        return self.build(ComponentCategory.SINK, spec)

    def build_formatter(self, spec: ComponentSpec) -> Any:
        return self.build(ComponentCategory.FORMATTER, spec)

    def build_processor(self, spec: ComponentSpec) -> Any:
        return self.build(ComponentCategory.PROCESSOR, spec)

    @staticmethod
    def _arguments(component_type: ComponentType, params: Any) -> Tuple[Tuple[Any, ...], Dict[str, Any]]:
        model = component_type.params_model
        if model is None:
            if params is None:
                return (), {}
            if isinstance(params, list):
                return tuple(params), {}
            if isinstance(params, dict):
                return (), dict(params)
            raise TypeError(f"params must be a list or a mapping, got {type(params).__name__}")

        if params is None:
            data: Dict[str, Any] = {}
        elif isinstance(params, list):
            fields = list(model.model_fields)
            if len(params) > len(fields):
                raise TypeError(f"expected at most {len(fields)} positional params, got {len(params)}")
            data = dict(zip(fields, params))
        elif isinstance(params, dict):
            data = dict(params)
        else:
            raise TypeError(f"params must be a list or a mapping, got {type(params).__name__}")

        validated = model.model_validate(data)
        return (), {name: getattr(validated, name) for name in model.model_fields if name in validated.model_fields_set}


__all__ = ["ComponentFactory", "Sink", "Formatter"]
