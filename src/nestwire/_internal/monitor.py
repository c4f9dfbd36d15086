from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from nestwire.exceptions import NestwireLifecycleError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView

logger = logging.getLogger(__name__)

AdapterT = TypeVar("AdapterT")


class ComponentMonitor(Protocol):
    """Observer consulted at the extension points of the engine.

    A monitor never alters control flow beyond what each hook allows: it may
    supply a fallback instance from ``no_component_found`` and it may wrap an
    adapter returned from ``changed_behavior`` or ``new_injector``.
    """

    def instantiating(self, container: ContainerView | None, adapter: ComponentAdapter) -> None: ...

    def instantiated(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        instance: Any,
        duration: float,
    ) -> None: ...

    def instantiation_failed(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        error: BaseException,
    ) -> None: ...

    def invoking(self, method_name: str, instance: Any) -> None: ...

    def invoked(self, method_name: str, instance: Any, duration: float) -> None: ...

    def lifecycle_invocation_failed(self, method_name: str, instance: Any, error: BaseException) -> None:
        """Handle a failing lifecycle call.

        Implementations are expected to raise; returning lets the lifecycle
        strategy continue as if the call had succeeded.
        """

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None: ...

    def changed_behavior(self, adapter: AdapterT) -> AdapterT: ...

    def new_injector(self, injector: AdapterT) -> AdapterT: ...


class NullComponentMonitor:
    """Monitor that observes nothing and rethrows lifecycle failures."""

    def instantiating(self, container: ContainerView | None, adapter: ComponentAdapter) -> None:
        return

    def instantiated(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        instance: Any,
        duration: float,
    ) -> None:
        return

    def instantiation_failed(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        error: BaseException,
    ) -> None:
        return

    def invoking(self, method_name: str, instance: Any) -> None:
        return

    def invoked(self, method_name: str, instance: Any, duration: float) -> None:
        return

    def lifecycle_invocation_failed(self, method_name: str, instance: Any, error: BaseException) -> None:
        raise NestwireLifecycleError(method_name, instance, error) from error

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        return None

    def changed_behavior(self, adapter: AdapterT) -> AdapterT:
        return adapter

    def new_injector(self, injector: AdapterT) -> AdapterT:
        return injector

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ForwardingComponentMonitor(NullComponentMonitor):
    """Monitor that forwards every hook to a delegate monitor.

    Subclasses override the hooks they care about and call ``super()`` to keep
    the chain intact.
    """

    def __init__(self, delegate: ComponentMonitor | None = None) -> None:
        self._delegate: ComponentMonitor = delegate if delegate is not None else NullComponentMonitor()

    @property
    def delegate(self) -> ComponentMonitor:
        return self._delegate

    def instantiating(self, container: ContainerView | None, adapter: ComponentAdapter) -> None:
        self._delegate.instantiating(container, adapter)

    def instantiated(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        instance: Any,
        duration: float,
    ) -> None:
        self._delegate.instantiated(container, adapter, instance, duration)

    def instantiation_failed(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        error: BaseException,
    ) -> None:
        self._delegate.instantiation_failed(container, adapter, error)

    def invoking(self, method_name: str, instance: Any) -> None:
        self._delegate.invoking(method_name, instance)

    def invoked(self, method_name: str, instance: Any, duration: float) -> None:
        self._delegate.invoked(method_name, instance, duration)

    def lifecycle_invocation_failed(self, method_name: str, instance: Any, error: BaseException) -> None:
        self._delegate.lifecycle_invocation_failed(method_name, instance, error)

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        return self._delegate.no_component_found(container, key)

    def changed_behavior(self, adapter: AdapterT) -> AdapterT:
        return self._delegate.changed_behavior(adapter)

    def new_injector(self, injector: AdapterT) -> AdapterT:
        return self._delegate.new_injector(injector)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(delegate={self._delegate!r})"


class LoggingComponentMonitor(ForwardingComponentMonitor):
    """Monitor that writes engine events to a standard library logger.

    Args:
        delegate: Monitor to forward every event to after logging it.
        log: Logger to write to. Defaults to this module's logger.

    """

    def __init__(
        self,
        delegate: ComponentMonitor | None = None,
        *,
        log: logging.Logger | None = None,
    ) -> None:
        super().__init__(delegate)
        self._log = log if log is not None else logger

    def instantiating(self, container: ContainerView | None, adapter: ComponentAdapter) -> None:
        self._log.debug("Instantiating %s", adapter.describe())
        super().instantiating(container, adapter)

    def instantiated(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        instance: Any,
        duration: float,
    ) -> None:
        self._log.debug("Instantiated %s in %.3fms", adapter.describe(), duration * 1000)
        super().instantiated(container, adapter, instance, duration)

    def instantiation_failed(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        error: BaseException,
    ) -> None:
        self._log.warning("Instantiation of %s failed: %s", adapter.describe(), error)
        super().instantiation_failed(container, adapter, error)

    def invoking(self, method_name: str, instance: Any) -> None:
        self._log.debug("Invoking %s() on %s", method_name, type(instance).__qualname__)
        super().invoking(method_name, instance)

    def invoked(self, method_name: str, instance: Any, duration: float) -> None:
        self._log.debug(
            "Invoked %s() on %s in %.3fms",
            method_name,
            type(instance).__qualname__,
            duration * 1000,
        )
        super().invoked(method_name, instance, duration)

    def lifecycle_invocation_failed(self, method_name: str, instance: Any, error: BaseException) -> None:
        self._log.warning("%s() on %s failed: %s", method_name, type(instance).__qualname__, error)
        super().lifecycle_invocation_failed(method_name, instance, error)

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        self._log.debug("No component found for %r in %r", key, container)
        return super().no_component_found(container, key)


__all__ = [
    "ComponentMonitor",
    "ForwardingComponentMonitor",
    "LoggingComponentMonitor",
    "NullComponentMonitor",
]
