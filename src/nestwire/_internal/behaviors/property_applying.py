from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, get_type_hints

from nestwire._internal.adapters import describe_key
from nestwire._internal.behaviors.base import Behavior
from nestwire._internal.type_checks import is_runtime_class
from nestwire.exceptions import NestwireCompositionError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView, InjectInto


class PropertyApplicator(Behavior):
    """Apply string-keyed property values to a freshly produced instance.

    A property ``name`` is applied through a ``set_name`` method or through a
    settable ``property`` called ``name``. String values are converted to the
    setter's annotated type with the container's converters; a string that
    cannot be converted is looked up as a component key instead.
    """

    descriptor = "PropertyApplied"

    def __init__(self, delegate: ComponentAdapter) -> None:
        super().__init__(delegate)
        self._properties: dict[str, Any] = {}

    @property
    def properties(self) -> Mapping[str, Any]:
        return dict(self._properties)

    def set_properties(self, properties: Mapping[str, Any]) -> None:
        self._properties = dict(properties)

    def set_property(self, name: str, value: Any) -> None:
        self._properties[name] = value

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        instance = super().get_instance(container, into)
        for name, value in self._properties.items():
            setter, target_type = self._setter(instance, name)
            setter(self._convert(container, name, value, target_type))
        return instance

    def _setter(self, instance: Any, name: str) -> tuple[Callable[[Any], Any], Any]:
        method = getattr(instance, f"set_{name}", None)
        if callable(method):
            parameters = list(inspect.signature(method).parameters)
            hints = get_type_hints(method)
            return method, hints.get(parameters[0]) if parameters else None

        descriptor = inspect.getattr_static(type(instance), name, None)
        if isinstance(descriptor, property) and descriptor.fset is not None:
            target_type = get_type_hints(descriptor.fget).get("return") if descriptor.fget is not None else None

            def assign(value: Any) -> None:
                setattr(instance, name, value)

            return assign, target_type

        msg = f"{describe_key(self.implementation)} has no setter for property {name!r}."
        raise NestwireCompositionError(msg)

    def _convert(self, container: ContainerView, name: str, value: Any, target_type: Any) -> Any:
        if not isinstance(value, str) or target_type in (None, str, Any):
            return value
        if is_runtime_class(target_type) and isinstance(value, target_type):
            return value
        if container.converters.can_convert(target_type):
            return container.converters.convert(value, target_type)
        component = container.get_component(value)
        if component is None:
            msg = f"Cannot apply {value!r} to property {name!r} of {describe_key(self.implementation)}."
            raise NestwireCompositionError(msg)
        return component


__all__ = ["PropertyApplicator"]
