from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from nestwire._internal.monitor import ComponentMonitor, NullComponentMonitor
from nestwire._internal.type_checks import is_runtime_class

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter


@runtime_checkable
class Startable(Protocol):
    """Structural type for components with ``start`` and ``stop`` callbacks."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


@runtime_checkable
class Disposable(Protocol):
    """Structural type for components with a ``dispose`` callback."""

    def dispose(self) -> None: ...


class LifecycleStrategy(Protocol):
    """Policy deciding whether and when component callbacks run.

    ``called_after_context_start`` makes the container instantiate and start
    lifecycle components during ``Container.start``. ``called_after_construction``
    starts them as soon as they are first retrieved instead.
    """

    def start(self, component: Any) -> None: ...

    def stop(self, component: Any) -> None: ...

    def dispose(self, component: Any) -> None: ...

    def has_lifecycle(self, component_type: Any) -> bool: ...

    def called_after_context_start(self, adapter: ComponentAdapter) -> bool: ...

    def called_after_construction(self, adapter: ComponentAdapter) -> bool: ...


class NullLifecycleStrategy:
    """Lifecycle strategy for containers whose components have no callbacks."""

    def start(self, component: Any) -> None:
        return

    def stop(self, component: Any) -> None:
        return

    def dispose(self, component: Any) -> None:
        return

    def has_lifecycle(self, component_type: Any) -> bool:
        return False

    def called_after_context_start(self, adapter: ComponentAdapter) -> bool:
        return True

    def called_after_construction(self, adapter: ComponentAdapter) -> bool:
        return False


class StartableLifecycleStrategy:
    """Call ``start``/``stop``/``dispose`` on components that provide them.

    Components are matched structurally against :class:`Startable` and
    :class:`Disposable`. Every call is reported to the monitor; a failing call
    is handed to ``monitor.lifecycle_invocation_failed`` which raises
    :class:`nestwire.exceptions.NestwireLifecycleError` by default.

    Args:
        monitor: Monitor notified around every lifecycle call.

    """

    def __init__(self, monitor: ComponentMonitor | None = None) -> None:
        self._monitor: ComponentMonitor = monitor if monitor is not None else NullComponentMonitor()

    def start(self, component: Any) -> None:
        if isinstance(component, Startable):
            self._invoke("start", component)

    def stop(self, component: Any) -> None:
        if isinstance(component, Startable):
            self._invoke("stop", component)

    def dispose(self, component: Any) -> None:
        if isinstance(component, Disposable):
            self._invoke("dispose", component)

    def has_lifecycle(self, component_type: Any) -> bool:
        if not is_runtime_class(component_type):
            return False
        return issubclass(component_type, (Startable, Disposable))

    def called_after_context_start(self, adapter: ComponentAdapter) -> bool:
        return True

    def called_after_construction(self, adapter: ComponentAdapter) -> bool:
        return False

    def change_monitor(self, monitor: ComponentMonitor) -> ComponentMonitor:
        previous = self._monitor
        self._monitor = monitor
        return previous

    def current_monitor(self) -> ComponentMonitor:
        return self._monitor

    def _invoke(self, method_name: str, component: Any) -> None:
        self._monitor.invoking(method_name, component)
        started_at = time.perf_counter()
        try:
            getattr(component, method_name)()
        except Exception as error:  # noqa: BLE001
            self._monitor.lifecycle_invocation_failed(method_name, component, error)
            return
        self._monitor.invoked(method_name, component, time.perf_counter() - started_at)


class LazyStartableLifecycleStrategy(StartableLifecycleStrategy):
    """Start components when they are first retrieved rather than on container start."""

    def called_after_context_start(self, adapter: ComponentAdapter) -> bool:
        return False

    def called_after_construction(self, adapter: ComponentAdapter) -> bool:
        return True


__all__ = [
    "Disposable",
    "LazyStartableLifecycleStrategy",
    "LifecycleStrategy",
    "NullLifecycleStrategy",
    "Startable",
    "StartableLifecycleStrategy",
]
