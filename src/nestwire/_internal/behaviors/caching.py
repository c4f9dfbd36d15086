from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn, Protocol

from nestwire._internal.adapters import ComponentAdapter, LifecycleCapable, describe_key
from nestwire._internal.behaviors.base import Behavior
from nestwire.exceptions import NestwireIllegalLifecycleTransitionError

if TYPE_CHECKING:
    from nestwire._internal.container_interface import ContainerView, InjectInto


@dataclass(slots=True)
class StoredInstance:
    """Memoized instance together with its component lifecycle flags."""

    instance: Any
    started: bool = False
    disposed: bool = False


class InstanceReference(Protocol):
    def get(self) -> StoredInstance | None: ...

    def set(self, value: StoredInstance | None) -> None: ...


class SimpleReference:
    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value: StoredInstance | None = None

    def get(self) -> StoredInstance | None:
        return self._value

    def set(self, value: StoredInstance | None) -> None:
        self._value = value


class Memoized(Behavior):
    """Produce the wrapped component once and keep it in a reference.

    When the delegate has a lifecycle, the memoized instance gets a real one:
    ``start`` instantiates it lazily and starts it, ``stop`` and ``dispose``
    act on the memoized instance and reject repeated transitions.
    """

    descriptor = "Memoized"

    def __init__(self, delegate: ComponentAdapter, reference: InstanceReference) -> None:
        super().__init__(delegate)
        self._reference = reference
        self._delegate_has_lifecycle = isinstance(delegate, LifecycleCapable) and delegate.has_lifecycle()

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._stored(container, into).instance

    def flush(self) -> None:
        """Drop the memoized instance, stopping and disposing it first if it was started."""
        stored = self._reference.get()
        if stored is not None and self._delegate_has_lifecycle and stored.started:
            self.stop_component(stored.instance)
            stored.started = False
            self.dispose_component(stored.instance)
            stored.disposed = True
        self._reference.set(None)

    def _stored(self, container: ContainerView, into: InjectInto | None) -> StoredInstance:
        stored = self._reference.get()
        if stored is None:
            stored = StoredInstance(self._delegate.get_instance(container, into))
            self._reference.set(stored)
        return stored

    # region Component lifecycle
    def start(self, container: ContainerView) -> None:
        if not self._delegate_has_lifecycle:
            return
        stored = self._stored(container, None)
        if stored.disposed or stored.started:
            self._illegal(stored, "start")
        self.start_component(stored.instance)
        stored.started = True

    def stop(self, container: ContainerView) -> None:
        if not self._delegate_has_lifecycle:
            return
        stored = self._reference.get()
        if stored is None or not stored.started:
            self._illegal(stored, "stop")
        self.stop_component(stored.instance)
        stored.started = False

    def dispose(self, container: ContainerView) -> None:
        if not self._delegate_has_lifecycle:
            return
        stored = self._reference.get()
        if stored is None:
            return
        if stored.disposed:
            self._illegal(stored, "dispose")
        self.dispose_component(stored.instance)
        stored.disposed = True

    def component_has_lifecycle(self) -> bool:
        return self._delegate_has_lifecycle

    def is_started(self) -> bool:
        stored = self._reference.get()
        return stored is not None and stored.started

    # endregion Component lifecycle

    def _illegal(self, stored: StoredInstance | None, action: str) -> NoReturn:
        if stored is None:
            state = "not instantiated"
        elif stored.disposed:
            state = "disposed"
        elif stored.started:
            state = "started"
        else:
            state = "not started"
        raise NestwireIllegalLifecycleTransitionError(
            f"component {describe_key(self.key)}",
            state,
            action,
        )


class Cached(Memoized):
    """Memoize the wrapped component for the lifetime of its container."""

    descriptor = "Cached"

    def __init__(self, delegate: ComponentAdapter) -> None:
        super().__init__(delegate, SimpleReference())


__all__ = ["Cached", "InstanceReference", "Memoized", "SimpleReference", "StoredInstance"]
