from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

ValueT = TypeVar("ValueT")

_UNSET: Any = object()


class PerThreadMap(Generic[ValueT]):
    """Private value per calling thread, with explicit get, set and discard.

    Values are created on first access from each thread with ``factory`` and
    are never visible to other threads. A thread's value is dropped together
    with the thread, so a later thread never inherits it.

    Args:
        factory: Callable producing the initial value for a thread.

    """

    __slots__ = ("_factory", "_local")

    def __init__(self, factory: Callable[[], ValueT]) -> None:
        self._factory = factory
        self._local = threading.local()

    def get(self) -> ValueT:
        value = getattr(self._local, "value", _UNSET)
        if value is _UNSET:
            value = self._factory()
            self._local.value = value
        return value

    def set(self, value: ValueT) -> None:
        self._local.value = value

    def discard(self) -> None:
        self._local.__dict__.pop("value", None)


__all__ = ["PerThreadMap"]
