from __future__ import annotations

import logging
from typing import Any

from nestwire._internal.adapters import ComponentAdapter
from nestwire._internal.behaviors.caching import Memoized, StoredInstance
from nestwire._internal.thread_map import PerThreadMap
from nestwire.exceptions import NestwireThreadCacheInvalidatedError

logger = logging.getLogger(__name__)


class StoreSnapshot:
    """Handle on one thread's stored instances.

    A snapshot shares its mapping with the thread it was taken from; putting it
    on another thread makes both threads see the same instances.
    """

    __slots__ = ("_instances",)

    def __init__(self, instances: dict[Any, StoredInstance]) -> None:
        self._instances = instances

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, key: object) -> bool:
        return key in self._instances

    def __repr__(self) -> str:
        return f"StoreSnapshot(size={len(self._instances)})"


class ThreadScopedStore:
    """Per-thread memo table shared by every ``Stored`` adapter of a component factory.

    Each calling thread sees its own mapping from component key to stored
    instance. A unit of work (for example one request) can start from
    ``reset_cache_for_thread`` and end with ``invalidate_cache_for_thread`` to
    make sure nothing leaks into the next unit handled by the same thread.
    """

    def __init__(self) -> None:
        self._maps: PerThreadMap[dict[Any, StoredInstance] | None] = PerThreadMap(dict)

    def _instances(self) -> dict[Any, StoredInstance]:
        instances = self._maps.get()
        if instances is None:
            msg = "Thread-scoped store was invalidated for this thread; reset or put a cache first."
            raise NestwireThreadCacheInvalidatedError(msg)
        return instances

    def get_stored(self, key: Any) -> StoredInstance | None:
        return self._instances().get(key)

    def set_stored(self, key: Any, value: StoredInstance | None) -> None:
        instances = self._instances()
        if value is None:
            instances.pop(key, None)
        else:
            instances[key] = value

    def get_cache_for_thread(self) -> StoreSnapshot:
        return StoreSnapshot(self._instances())

    def put_cache_for_thread(self, snapshot: StoreSnapshot) -> None:
        self._maps.set(snapshot._instances)  # noqa: SLF001

    def reset_cache_for_thread(self) -> StoreSnapshot:
        instances: dict[Any, StoredInstance] = {}
        self._maps.set(instances)
        return StoreSnapshot(instances)

    def invalidate_cache_for_thread(self) -> None:
        self._maps.set(None)

    @property
    def cache_size(self) -> int:
        instances = self._maps.get()
        return 0 if instances is None else len(instances)

    def dispose(self) -> None:
        logger.debug("Disposing thread-scoped store for the calling thread")
        self._maps.discard()


class _StoreReference:
    __slots__ = ("_key", "_store")

    def __init__(self, store: ThreadScopedStore, key: Any) -> None:
        self._store = store
        self._key = key

    def get(self) -> StoredInstance | None:
        return self._store.get_stored(self._key)

    def set(self, value: StoredInstance | None) -> None:
        self._store.set_stored(self._key, value)


class Stored(Memoized):
    """Memoize the wrapped component once per calling thread.

    Component lifecycle calls act on the calling thread's instance only.
    """

    descriptor = "Stored"

    def __init__(self, delegate: ComponentAdapter, store: ThreadScopedStore) -> None:
        super().__init__(delegate, _StoreReference(store, delegate.key))
        self._store = store

    @property
    def store(self) -> ThreadScopedStore:
        return self._store


__all__ = ["StoreSnapshot", "Stored", "ThreadScopedStore"]
