from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nestwire._internal.adapters import describe_key
from nestwire._internal.behaviors.base import Behavior
from nestwire._internal.container_interface import InjectInto
from nestwire.exceptions import NestwireGuardError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView


class Guarded(Behavior):
    """Check a precondition component before producing the wrapped one.

    The guard is looked up by key on every production. A callable guard is
    called with the guarded key and must return a truthy value; any other
    guard must itself be truthy.
    """

    descriptor = "Guarded"

    def __init__(self, delegate: ComponentAdapter, guard_key: Any) -> None:
        super().__init__(delegate)
        self._guard_key = guard_key

    @property
    def guard_key(self) -> Any:
        return self._guard_key

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        guard = container.get_component_into(self._guard_key, InjectInto(self.implementation, self.key))
        if guard is None:
            msg = f"Guard {describe_key(self._guard_key)} of {describe_key(self.key)} is not registered."
            raise NestwireGuardError(msg)
        passed = guard(self.key) if callable(guard) else bool(guard)
        if not passed:
            msg = f"Guard {describe_key(self._guard_key)} rejected production of {describe_key(self.key)}."
            raise NestwireGuardError(msg)
        return super().get_instance(container, into)


__all__ = ["Guarded"]
