from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

TRUE = "true"
FALSE = "false"

CACHE_KEY = "cache"
STORE_KEY = "store"
SYNCHRONIZE_KEY = "synchronize"
LOCK_KEY = "lock"
PROPERTY_APPLYING_KEY = "property-applying"
AUTOMATIC_KEY = "automatic"
HIDE_IMPL_KEY = "hide-impl"
INTERCEPT_KEY = "intercept"
GUARD_KEY = "guard"
ENABLE_CIRCULAR_KEY = "enable-circular"
USE_NAMES_KEY = "use-names"
STATIC_INJECTION_KEY = "static-injection"
NONE_KEY = "none"

Flags = Mapping[str, Any]


def _flag(key: str, value: Any = TRUE) -> Flags:
    return MappingProxyType({key: value})


class Characteristics:
    """Configuration flags selecting the behaviors applied to one registration.

    Combine flags with ``|`` or pass several to ``Container.with_flags``.

    Examples:
        .. code-block:: python

            container.add_component(Service, flags=Characteristics.CACHE | Characteristics.LOCK)
            container.with_flags(Characteristics.NO_CACHE).add_component(RequestHandler)

    """

    CACHE = _flag(CACHE_KEY)
    NO_CACHE = _flag(CACHE_KEY, FALSE)
    STORE = _flag(STORE_KEY)
    SYNCHRONIZE = _flag(SYNCHRONIZE_KEY)
    LOCK = _flag(LOCK_KEY)
    PROPERTY_APPLYING = _flag(PROPERTY_APPLYING_KEY)
    AUTOMATIC = _flag(AUTOMATIC_KEY)
    HIDE_IMPL = _flag(HIDE_IMPL_KEY)
    NO_HIDE_IMPL = _flag(HIDE_IMPL_KEY, FALSE)
    INTERCEPT = _flag(INTERCEPT_KEY)
    ENABLE_CIRCULAR = _flag(ENABLE_CIRCULAR_KEY)
    USE_NAMES = _flag(USE_NAMES_KEY)
    STATIC_INJECTION = _flag(STATIC_INJECTION_KEY)
    NONE = _flag(NONE_KEY)

    @staticmethod
    def guard(key: Any) -> Flags:
        """Return a flag guarding production with the component registered under key.

        Args:
            key: Key of a registered component, carried as the flag value.

        """
        return _flag(GUARD_KEY, key)


def merge_flags(*flags: Flags | None) -> dict[str, Any]:
    """Merge flag mappings left to right into a mutable working configuration."""
    merged: dict[str, Any] = {}
    for item in flags:
        if item:
            merged.update(item)
    return merged


def is_present(flags: Flags, key: str, value: str | None = TRUE) -> bool:
    """Return true when key is present and, unless value is None, equal to value."""
    if key not in flags:
        return False
    return value is None or flags[key] == value


def consume(flags: dict[str, Any], key: str, value: str | None = TRUE) -> bool:
    """Remove key from the working configuration when present with the given value."""
    if not is_present(flags, key, value):
        return False
    del flags[key]
    return True


__all__ = [
    "Characteristics",
    "Flags",
    "consume",
    "is_present",
    "merge_flags",
]
