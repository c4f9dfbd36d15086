from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from nestwire._internal.adapters import LifecycleStrategyAdapter, describe_key
from nestwire._internal.characteristics import USE_NAMES_KEY, is_present
from nestwire._internal.container_interface import InjectInto
from nestwire._internal.dependencies import (
    DependencyMetadata,
    callable_dependencies,
    constructor_dependencies,
    return_type,
)
from nestwire._internal.parameters import ComponentParameter, Parameter, Resolution
from nestwire._internal.resolution_stack import guard_resolution
from nestwire._internal.type_checks import is_concrete_class
from nestwire.exceptions import (
    NestwireCompositionError,
    NestwireNotConcreteTypeError,
    NestwireUnsatisfiedDependencyError,
)

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView
    from nestwire._internal.lifecycle import LifecycleStrategy
    from nestwire._internal.monitor import ComponentMonitor

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class AbstractInjector(LifecycleStrategyAdapter):
    """Base producer: match dependencies, then call a target with them.

    Production is guarded against re-entry on the same call chain, which is how
    cyclic dependencies surface as ``NestwireCyclicDependencyError``.
    """

    def __init__(
        self,
        key: Any,
        implementation: Any,
        dependencies: tuple[DependencyMetadata, ...],
        parameters: Sequence[Parameter] | None = None,
        *,
        monitor: ComponentMonitor | None = None,
        lifecycle: LifecycleStrategy | None = None,
        use_names: bool = False,
    ) -> None:
        super().__init__(key, implementation, lifecycle, monitor)
        if parameters is not None and len(parameters) > len(dependencies):
            msg = (
                f"{describe_key(implementation)} accepts {len(dependencies)} injectable parameters, "
                f"got {len(parameters)} explicit parameters."
            )
            raise NestwireCompositionError(msg)
        self._dependencies = dependencies
        self._parameters = tuple(parameters) if parameters is not None else ()
        self._use_names = use_names

    @property
    def dependencies(self) -> tuple[DependencyMetadata, ...]:
        return self._dependencies

    @property
    def use_names(self) -> bool:
        return self._use_names

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        with guard_resolution(self, self._implementation):
            args, kwargs = self._arguments(container)
            return self._instantiate(container, args, kwargs)

    def verify(self, container: ContainerView) -> None:
        with guard_resolution(self, self._implementation):
            for dependency, parameter in self._bindings():
                parameter.verify(container, self, dependency, use_names=self._use_names)

    def _bindings(self) -> list[tuple[DependencyMetadata, Parameter]]:
        explicit: list[Parameter] = list(self._parameters)
        return [
            (dependency, explicit[index] if index < len(explicit) else ComponentParameter.DEFAULT)
            for index, dependency in enumerate(self._dependencies)
        ]

    def _arguments(self, container: ContainerView) -> tuple[list[Any], dict[str, Any]]:
        matched: list[tuple[DependencyMetadata, Resolution]] = []
        unsatisfied: list[Any] = []
        for dependency, parameter in self._bindings():
            resolution = parameter.resolve(container, self, dependency, use_names=self._use_names)
            if not resolution.is_resolved and not dependency.has_default:
                unsatisfied.append(dependency.requested)
            matched.append((dependency, resolution))
        if unsatisfied:
            raise NestwireUnsatisfiedDependencyError(self._implementation, unsatisfied)

        into = InjectInto(self._implementation, self._key)
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for dependency, resolution in matched:
            value = resolution.resolve_instance(into) if resolution.is_resolved else dependency.default
            if dependency.positional_only:
                args.append(value)
            else:
                kwargs[dependency.name] = value
        return args, kwargs

    def _instantiate(self, container: ContainerView, args: list[Any], kwargs: dict[str, Any]) -> Any:
        self._monitor.instantiating(container, self)
        started_at = time.perf_counter()
        try:
            instance = self._target()(*args, **kwargs)
        except Exception as error:
            self._monitor.instantiation_failed(container, self, error)
            raise
        self._monitor.instantiated(container, self, instance, time.perf_counter() - started_at)
        return instance

    def _target(self) -> Callable[..., Any]:
        raise NotImplementedError


class ConstructorInjector(AbstractInjector):
    """Produce instances by calling the implementation's constructor.

    Constructor parameters are described by their annotations. ``Annotated``
    metadata may carry a ``Qualifier``; explicit ``parameters`` override the
    matching for the leading constructor parameters.

    Args:
        key: Registration key.
        implementation: Concrete class to instantiate.
        parameters: Optional explicit parameters, applied positionally.
        monitor: Monitor notified around instantiation.
        lifecycle: Strategy applied to produced instances.
        use_names: Whether parameter names may select among candidates.

    Raises:
        NestwireNotConcreteTypeError: If implementation is abstract or not a class.

    """

    def __init__(
        self,
        key: Any,
        implementation: type[Any],
        parameters: Sequence[Parameter] | None = None,
        *,
        monitor: ComponentMonitor | None = None,
        lifecycle: LifecycleStrategy | None = None,
        use_names: bool = False,
    ) -> None:
        if not is_concrete_class(implementation):
            raise NestwireNotConcreteTypeError(implementation)
        super().__init__(
            key,
            implementation,
            constructor_dependencies(implementation),
            parameters,
            monitor=monitor,
            lifecycle=lifecycle,
            use_names=use_names,
        )

    def _target(self) -> Callable[..., Any]:
        return self._implementation

    def describe(self) -> str:
        return f"ConstructorInjector-{describe_key(self._implementation)}"


class ProviderAdapter(AbstractInjector):
    """Produce instances by calling a factory object.

    The factory is either an object with a ``provide`` method or a plain
    callable. Its return annotation names the produced type, which is also the
    default key. The adapter satisfies requests for the factory type and for
    the produced type independently.

    Args:
        provider: Factory object or callable. Its parameters are injected.
        key: Registration key, defaulting to the produced type.
        monitor: Monitor notified around every call.
        lifecycle: Strategy applied to produced instances.
        use_names: Whether parameter names may select among candidates.

    """

    def __init__(
        self,
        provider: Any,
        key: Any = _MISSING,
        *,
        monitor: ComponentMonitor | None = None,
        lifecycle: LifecycleStrategy | None = None,
        use_names: bool = False,
    ) -> None:
        method = getattr(provider, "provide", None)
        if method is None and callable(provider):
            method = provider
        if method is None or not callable(method):
            msg = f"{provider!r} has no provide() method and is not callable."
            raise NestwireCompositionError(msg)
        produced = return_type(method, owner=provider)
        if produced is None:
            msg = f"Provider {provider!r} must annotate its return type."
            raise NestwireCompositionError(msg)

        implementation = type(provider) if method is not provider else produced
        super().__init__(
            produced if key is _MISSING else key,
            implementation,
            callable_dependencies(method, owner=provider),
            monitor=monitor,
            lifecycle=lifecycle,
            use_names=use_names,
        )
        self._provider = provider
        self._method = method
        self._produced_type = produced

    @property
    def provider(self) -> Any:
        return self._provider

    @property
    def produced_type(self) -> Any:
        return self._produced_type

    def _target(self) -> Callable[..., Any]:
        return self._method

    def _lifecycle_type(self) -> Any:
        return self._produced_type

    def describe(self) -> str:
        return f"ProviderAdapter-{describe_key(self._produced_type)}"


class InjectionFactory(Protocol):
    """Create the base producer for a registration."""

    def create_component_adapter(
        self,
        monitor: ComponentMonitor,
        lifecycle: LifecycleStrategy,
        flags: Mapping[str, Any],
        key: Any,
        implementation: Any,
        parameters: Sequence[Parameter] | None,
    ) -> ComponentAdapter: ...


class ConstructorInjection:
    """Injection factory producing ``ConstructorInjector`` instances.

    Reads ``Characteristics.USE_NAMES`` without consuming it; the container
    strips it once the pipeline has run.
    """

    def create_component_adapter(
        self,
        monitor: ComponentMonitor,
        lifecycle: LifecycleStrategy,
        flags: Mapping[str, Any],
        key: Any,
        implementation: Any,
        parameters: Sequence[Parameter] | None,
    ) -> ComponentAdapter:
        injector = ConstructorInjector(
            key,
            implementation,
            parameters,
            monitor=monitor,
            lifecycle=lifecycle,
            use_names=is_present(flags, USE_NAMES_KEY),
        )
        logger.debug("Created %s for key %s", injector.describe(), describe_key(key))
        return monitor.new_injector(injector)


__all__ = [
    "AbstractInjector",
    "ConstructorInjection",
    "ConstructorInjector",
    "InjectionFactory",
    "ProviderAdapter",
]
