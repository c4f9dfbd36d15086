from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from nestwire._internal.lifecycle import LifecycleStrategy, NullLifecycleStrategy
from nestwire._internal.monitor import ComponentMonitor, NullComponentMonitor
from nestwire._internal.type_checks import is_assignable, is_runtime_class
from nestwire.exceptions import NestwireCompositionError

if TYPE_CHECKING:
    from nestwire._internal.container_interface import ContainerView, InjectInto

AdapterT = TypeVar("AdapterT")


@runtime_checkable
class ComponentAdapter(Protocol):
    """Handle for one registered component: identity plus production capability."""

    @property
    def key(self) -> Any: ...

    @property
    def implementation(self) -> Any: ...

    @property
    def delegate(self) -> ComponentAdapter | None: ...

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any: ...

    def verify(self, container: ContainerView) -> None: ...

    def describe(self) -> str: ...

    def find_adapter_of_type(self, adapter_type: type[AdapterT]) -> AdapterT | None: ...


@runtime_checkable
class ComponentLifecycle(Protocol):
    """Adapter-level lifecycle driven by the owning container."""

    def start(self, container: ContainerView) -> None: ...

    def stop(self, container: ContainerView) -> None: ...

    def dispose(self, container: ContainerView) -> None: ...

    def component_has_lifecycle(self) -> bool: ...

    def is_started(self) -> bool: ...


@runtime_checkable
class LifecycleCapable(Protocol):
    """Adapter that applies a lifecycle strategy to the instances it produces."""

    def start_component(self, instance: Any) -> None: ...

    def stop_component(self, instance: Any) -> None: ...

    def dispose_component(self, instance: Any) -> None: ...

    def has_lifecycle(self, component_type: Any = None) -> bool: ...


@runtime_checkable
class MonitorCapable(Protocol):
    def change_monitor(self, monitor: ComponentMonitor) -> ComponentMonitor: ...

    def current_monitor(self) -> ComponentMonitor: ...


def describe_key(key: Any) -> str:
    if is_runtime_class(key):
        return key.__qualname__
    return repr(key)


class AbstractAdapter:
    """Common state of concrete adapters: key, implementation and monitor."""

    def __init__(self, key: Any, implementation: Any, monitor: ComponentMonitor | None = None) -> None:
        if key is None:
            msg = "Component key cannot be None."
            raise NestwireCompositionError(msg)
        self._key = key
        self._implementation = implementation
        self._monitor: ComponentMonitor = monitor if monitor is not None else NullComponentMonitor()

    @property
    def key(self) -> Any:
        return self._key

    @property
    def implementation(self) -> Any:
        return self._implementation

    @property
    def delegate(self) -> ComponentAdapter | None:
        return None

    def verify(self, container: ContainerView) -> None:
        return

    def describe(self) -> str:
        return f"{type(self).__name__}-{describe_key(self._implementation)}"

    def find_adapter_of_type(self, adapter_type: type[AdapterT]) -> AdapterT | None:
        if isinstance(self, adapter_type):
            return self
        return None

    def change_monitor(self, monitor: ComponentMonitor) -> ComponentMonitor:
        previous = self._monitor
        self._monitor = monitor
        return previous

    def current_monitor(self) -> ComponentMonitor:
        return self._monitor

    def __repr__(self) -> str:
        return f"{self.describe()}[{describe_key(self._key)}]"


class LifecycleStrategyAdapter(AbstractAdapter):
    """Adapter applying a lifecycle strategy to the instances it produces."""

    def __init__(
        self,
        key: Any,
        implementation: Any,
        lifecycle: LifecycleStrategy | None = None,
        monitor: ComponentMonitor | None = None,
    ) -> None:
        super().__init__(key, implementation, monitor)
        self._lifecycle: LifecycleStrategy = lifecycle if lifecycle is not None else NullLifecycleStrategy()

    @property
    def lifecycle(self) -> LifecycleStrategy:
        return self._lifecycle

    def start_component(self, instance: Any) -> None:
        self._lifecycle.start(instance)

    def stop_component(self, instance: Any) -> None:
        self._lifecycle.stop(instance)

    def dispose_component(self, instance: Any) -> None:
        self._lifecycle.dispose(instance)

    def has_lifecycle(self, component_type: Any = None) -> bool:
        return self._lifecycle.has_lifecycle(component_type if component_type is not None else self._lifecycle_type())

    def called_after_context_start(self, adapter: ComponentAdapter) -> bool:
        return self._lifecycle.called_after_context_start(adapter)

    def called_after_construction(self, adapter: ComponentAdapter) -> bool:
        return self._lifecycle.called_after_construction(adapter)

    def _lifecycle_type(self) -> Any:
        return self._implementation


class InstanceAdapter(LifecycleStrategyAdapter):
    """Adapter around an instance built outside the container.

    Args:
        key: Registration key. When it is a type, the instance must be assignable to it.
        instance: The instance returned by every ``get_instance`` call.
        lifecycle: Strategy applied when the container starts, stops or disposes it.
        monitor: Monitor of the owning container.

    """

    def __init__(
        self,
        key: Any,
        instance: Any,
        lifecycle: LifecycleStrategy | None = None,
        monitor: ComponentMonitor | None = None,
    ) -> None:
        if instance is None:
            msg = f"Cannot register None as the instance for {describe_key(key)}."
            raise NestwireCompositionError(msg)
        if is_runtime_class(key) and not is_assignable(key, type(instance)):
            msg = f"{type(instance).__qualname__} instance is not assignable to key {describe_key(key)}."
            raise NestwireCompositionError(msg)
        super().__init__(key, type(instance), lifecycle, monitor)
        self._instance = instance
        self._started = False

    @property
    def instance(self) -> Any:
        return self._instance

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._instance

    def start(self, container: ContainerView) -> None:
        self.start_component(self._instance)
        self._started = True

    def stop(self, container: ContainerView) -> None:
        self.stop_component(self._instance)
        self._started = False

    def dispose(self, container: ContainerView) -> None:
        self.dispose_component(self._instance)

    def component_has_lifecycle(self) -> bool:
        return self.has_lifecycle()

    def is_started(self) -> bool:
        return self._started

    def describe(self) -> str:
        return f"Instance-{describe_key(self._implementation)}"


class LateInstanceAdapter(AbstractAdapter):
    """Fallback instance supplied by a monitor, outside registration and lifecycle."""

    def __init__(self, key: Any, instance: Any) -> None:
        super().__init__(key, type(instance))
        self._instance = instance

    @property
    def instance(self) -> Any:
        return self._instance

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._instance

    def describe(self) -> str:
        return f"LateInstance-{describe_key(self._implementation)}"


class BoundAdapter:
    """Parent-owned adapter paired with the container that must produce it.

    Children see their parent's adapters through this wrapper so that the
    parent, never the child, is used as resolution context.
    """

    __slots__ = ("_adapter", "_container")

    def __init__(self, adapter: ComponentAdapter, container: ContainerView) -> None:
        self._adapter = adapter
        self._container = container

    @property
    def key(self) -> Any:
        return self._adapter.key

    @property
    def implementation(self) -> Any:
        return self._adapter.implementation

    @property
    def delegate(self) -> ComponentAdapter:
        return self._adapter

    @property
    def container(self) -> ContainerView:
        return self._container

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._adapter.get_instance(self._container, into)

    def verify(self, container: ContainerView) -> None:
        self._adapter.verify(self._container)

    def describe(self) -> str:
        return f"Bound:{self._adapter.describe()}"

    def find_adapter_of_type(self, adapter_type: type[AdapterT]) -> AdapterT | None:
        if isinstance(self, adapter_type):
            return self
        return self._adapter.find_adapter_of_type(adapter_type)

    def __repr__(self) -> str:
        return f"{self.describe()}[{describe_key(self.key)}]"


def unwrap_bound(adapter: ComponentAdapter) -> ComponentAdapter:
    while isinstance(adapter, BoundAdapter):
        adapter = adapter.delegate
    return adapter


__all__ = [
    "AbstractAdapter",
    "BoundAdapter",
    "ComponentAdapter",
    "ComponentLifecycle",
    "InstanceAdapter",
    "LateInstanceAdapter",
    "LifecycleCapable",
    "LifecycleStrategyAdapter",
    "MonitorCapable",
    "describe_key",
    "unwrap_bound",
]
