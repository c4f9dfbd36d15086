from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from nestwire._internal.adapters import (
    ComponentAdapter,
    ComponentLifecycle,
    LifecycleCapable,
    MonitorCapable,
    describe_key,
)
from nestwire._internal.monitor import ComponentMonitor, NullComponentMonitor
from nestwire.exceptions import NestwireConfigurationError

if TYPE_CHECKING:
    from nestwire._internal.container_interface import ContainerView, InjectInto

AdapterT = TypeVar("AdapterT")


class Behavior:
    """Decorator adding one capability around an inner adapter.

    Every adapter call is forwarded to the delegate. Capabilities the delegate
    lacks degrade to no-ops, except ``current_monitor`` which raises
    ``NestwireConfigurationError`` when no monitor was ever established.
    """

    descriptor = "Behavior"

    def __init__(self, delegate: ComponentAdapter) -> None:
        self._delegate = delegate

    @property
    def key(self) -> Any:
        return self._delegate.key

    @property
    def implementation(self) -> Any:
        return self._delegate.implementation

    @property
    def delegate(self) -> ComponentAdapter:
        return self._delegate

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._delegate.get_instance(container, into)

    def verify(self, container: ContainerView) -> None:
        self._delegate.verify(container)

    def describe(self) -> str:
        return f"{self.descriptor}:{self._delegate.describe()}"

    def find_adapter_of_type(self, adapter_type: type[AdapterT]) -> AdapterT | None:
        if isinstance(self, adapter_type):
            return self
        return self._delegate.find_adapter_of_type(adapter_type)

    # region Monitor
    def change_monitor(self, monitor: ComponentMonitor) -> ComponentMonitor:
        if isinstance(self._delegate, MonitorCapable):
            return self._delegate.change_monitor(monitor)
        return NullComponentMonitor()

    def current_monitor(self) -> ComponentMonitor:
        if isinstance(self._delegate, MonitorCapable):
            return self._delegate.current_monitor()
        msg = f"No component monitor found in delegate of {self.describe()}."
        raise NestwireConfigurationError(msg)

    # endregion Monitor

    # region Component lifecycle
    def start(self, container: ContainerView) -> None:
        if isinstance(self._delegate, ComponentLifecycle):
            self._delegate.start(container)

    def stop(self, container: ContainerView) -> None:
        if isinstance(self._delegate, ComponentLifecycle):
            self._delegate.stop(container)

    def dispose(self, container: ContainerView) -> None:
        if isinstance(self._delegate, ComponentLifecycle):
            self._delegate.dispose(container)

    def component_has_lifecycle(self) -> bool:
        if isinstance(self._delegate, ComponentLifecycle):
            return self._delegate.component_has_lifecycle()
        return False

    def is_started(self) -> bool:
        if isinstance(self._delegate, ComponentLifecycle):
            return self._delegate.is_started()
        return False

    # endregion Component lifecycle

    # region Lifecycle strategy
    def start_component(self, instance: Any) -> None:
        if isinstance(self._delegate, LifecycleCapable):
            self._delegate.start_component(instance)

    def stop_component(self, instance: Any) -> None:
        if isinstance(self._delegate, LifecycleCapable):
            self._delegate.stop_component(instance)

    def dispose_component(self, instance: Any) -> None:
        if isinstance(self._delegate, LifecycleCapable):
            self._delegate.dispose_component(instance)

    def has_lifecycle(self, component_type: Any = None) -> bool:
        if isinstance(self._delegate, LifecycleCapable):
            return self._delegate.has_lifecycle(component_type)
        return False

    # endregion Lifecycle strategy

    def __repr__(self) -> str:
        return f"{self.describe()}[{describe_key(self.key)}]"


__all__ = ["Behavior"]
