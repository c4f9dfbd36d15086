from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from nestwire._internal.behaviors.base import Behavior

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView, InjectInto


class Synchronized(Behavior):
    """Serialize production of the wrapped component on a per-adapter monitor lock."""

    descriptor = "Synchronized"

    def __init__(self, delegate: ComponentAdapter) -> None:
        super().__init__(delegate)
        self._lock = threading.RLock()

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        with self._lock:
            return super().get_instance(container, into)


class Locked(Behavior):
    """Serialize production of the wrapped component with an explicit reentrant lock.

    Args:
        delegate: Adapter to wrap.
        lock: Lock to use, so several components can share one. Defaults to a
            private ``threading.RLock``.

    """

    descriptor = "Locked"

    def __init__(self, delegate: ComponentAdapter, lock: threading.RLock | None = None) -> None:
        super().__init__(delegate)
        self._lock = lock if lock is not None else threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        self._lock.acquire()
        try:
            return super().get_instance(container, into)
        finally:
            self._lock.release()


__all__ = ["Locked", "Synchronized"]
