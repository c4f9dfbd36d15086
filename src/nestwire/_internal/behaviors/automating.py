from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nestwire._internal.behaviors.base import Behavior

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView


class Automated(Behavior):
    """Mark a component for instantiation during container start.

    The component reports a lifecycle even when its type has no callbacks, so
    the container produces it on ``start`` although nothing depends on it.
    """

    descriptor = "Automated"

    def __init__(self, delegate: ComponentAdapter) -> None:
        super().__init__(delegate)
        self._started = False

    def has_lifecycle(self, component_type: Any = None) -> bool:
        return True

    def component_has_lifecycle(self) -> bool:
        return True

    def start(self, container: ContainerView) -> None:
        super().start(container)
        self._started = True

    def stop(self, container: ContainerView) -> None:
        super().stop(container)
        self._started = False

    def is_started(self) -> bool:
        return self._started


__all__ = ["Automated"]
