from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard, get_origin


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_concrete_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate can be instantiated by a constructor injector.

    Args:
        candidate: Value registered as an implementation.

    """
    if not is_runtime_class(candidate):
        return False
    if getattr(candidate, "_is_protocol", False):
        return False
    return not inspect.isabstract(candidate)


def is_assignable(expected: Any, implementation: Any) -> bool:
    """Return true when instances of implementation satisfy a request for expected.

    Protocols that are not runtime checkable cannot take part in ``issubclass``,
    so those fall back to a nominal check against the implementation's MRO.

    Args:
        expected: Requested dependency type.
        implementation: Implementation type of a candidate adapter.

    """
    if expected is Any or expected is object:
        return True
    origin = get_origin(expected)
    if origin is not None and is_runtime_class(origin):
        expected = origin
    if not is_runtime_class(expected) or not is_runtime_class(implementation):
        return expected == implementation
    try:
        return issubclass(implementation, expected)
    except TypeError:
        return expected in implementation.__mro__


__all__ = ["is_assignable", "is_concrete_class", "is_runtime_class"]
