from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Protocol

from nestwire._internal.adapters import BoundAdapter, describe_key
from nestwire._internal.resolver import (
    NO_KEY,
    ComponentResolver,
    ProducesType,
    needs_conversion,
    produced_type_of,
)
from nestwire._internal.type_checks import is_assignable, is_runtime_class
from nestwire.exceptions import NestwireCompositionError, NestwireUnsatisfiedDependencyError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView, InjectInto
    from nestwire._internal.dependencies import DependencyMetadata

_resolver = ComponentResolver()


class Resolution(Protocol):
    """Outcome of matching one dependency.

    Matching happens when the resolution is created; the instance is only
    produced by ``resolve_instance``.
    """

    @property
    def is_resolved(self) -> bool: ...

    def resolve_instance(self, into: InjectInto | None) -> Any: ...


class _Unresolved:
    __slots__ = ()

    @property
    def is_resolved(self) -> bool:
        return False

    def resolve_instance(self, into: InjectInto | None) -> Any:
        return None


UNRESOLVED = _Unresolved()


class ValueResolution:
    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    @property
    def is_resolved(self) -> bool:
        return True

    def resolve_instance(self, into: InjectInto | None) -> Any:
        return self._value


def factory_object(adapter: ComponentAdapter, expected: Any) -> Any | None:
    """Return the factory behind adapter when expected names the factory type rather than its product."""
    produced = produced_type_of(adapter)
    if expected is None or produced is None or is_assignable(expected, produced):
        return None
    if not is_assignable(expected, adapter.implementation):
        return None
    producer = adapter.find_adapter_of_type(ProducesType)
    return getattr(producer, "provider", None)


class AdapterResolution:
    """Resolution backed by a matched adapter, produced through the container."""

    __slots__ = ("_adapter", "_container", "_expected")

    def __init__(self, container: ContainerView, adapter: ComponentAdapter, expected: Any) -> None:
        self._container = container
        self._adapter = adapter
        self._expected = expected

    @property
    def adapter(self) -> ComponentAdapter:
        return self._adapter

    @property
    def is_resolved(self) -> bool:
        return True

    def resolve_instance(self, into: InjectInto | None) -> Any:
        expected = self._expected
        provider = factory_object(self._adapter, expected)
        if provider is not None:
            return provider
        # Parent-owned matches are produced by their owner, never by the requesting child.
        owner = self._adapter.container if isinstance(self._adapter, BoundAdapter) else self._container
        value = owner.get_component_into(self._adapter.key, into)
        if isinstance(value, str) and expected is not None and needs_conversion(self._container, expected, self._adapter):
            return self._container.converters.convert(value, expected)
        return value


class Parameter(Protocol):
    """How one injection point of a component is satisfied."""

    def resolve(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> Resolution: ...

    def verify(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> None: ...


class ComponentParameter:
    """Satisfy an injection point from the container.

    Without a key the dependency is matched by type, name and qualifier. With a
    key it is looked up strictly by that key.

    Args:
        key: Optional explicit key of the component to inject.

    """

    DEFAULT: ClassVar[ComponentParameter]

    __slots__ = ("_key",)

    def __init__(self, key: Any = NO_KEY) -> None:
        self._key = key

    @property
    def key(self) -> Any:
        return self._key

    def resolve(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> Resolution:
        adapter = _resolver.adapter_for(container, requester, dependency, use_names=use_names, key=self._key)
        if adapter is None:
            return UNRESOLVED
        return AdapterResolution(container, adapter, dependency.declared_type)

    def verify(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> None:
        adapter = _resolver.verify(container, requester, dependency, use_names=use_names, key=self._key)
        if adapter is None and not dependency.has_default:
            requested = dependency.requested if self._key is NO_KEY else self._key
            raise NestwireUnsatisfiedDependencyError(requester.implementation, [requested])

    def __repr__(self) -> str:
        if self._key is NO_KEY:
            return "ComponentParameter()"
        return f"ComponentParameter({describe_key(self._key)})"


ComponentParameter.DEFAULT = ComponentParameter()


class ConstantParameter:
    """Satisfy an injection point with a fixed value.

    String values are converted when the declared type is one the container's
    converters support.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def resolve(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> Resolution:
        return ValueResolution(self._converted(container, dependency.declared_type))

    def verify(
        self,
        container: ContainerView,
        requester: ComponentAdapter,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
    ) -> None:
        self._converted(container, dependency.declared_type)

    def _converted(self, container: ContainerView, expected: Any) -> Any:
        value = self._value
        if expected is None or not is_runtime_class(expected) or is_assignable(expected, type(value)):
            return value
        if isinstance(value, str) and container.converters.can_convert(expected):
            return container.converters.convert(value, expected)
        msg = f"Constant {value!r} is not assignable to {describe_key(expected)}."
        raise NestwireCompositionError(msg)

    def __repr__(self) -> str:
        return f"ConstantParameter({self._value!r})"


__all__ = [
    "UNRESOLVED",
    "AdapterResolution",
    "ComponentParameter",
    "ConstantParameter",
    "Parameter",
    "Resolution",
    "ValueResolution",
    "factory_object",
]
