from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from nestwire.exceptions import NestwireCyclicDependencyError

# Adapters currently producing on this thread, outermost first.
_in_progress: ContextVar[tuple[tuple[int, Any], ...]] = ContextVar(
    "nestwire_resolution_stack",
    default=(),
)


@contextmanager
def guard_resolution(owner: object, implementation: Any) -> Iterator[None]:
    """Track owner as in progress for the duration of the block.

    Tracking is per call chain rather than per container, so two threads
    producing the same component never see each other's entries.

    Args:
        owner: The producer entering construction, compared by identity.
        implementation: Implementation type reported in the cycle chain.

    Raises:
        NestwireCyclicDependencyError: If owner is already in progress.

    """
    stack = _in_progress.get()
    owner_id = id(owner)
    if any(entry_id == owner_id for entry_id, _ in stack):
        chain = [entry_implementation for _, entry_implementation in stack]
        start = next(index for index, (entry_id, _) in enumerate(stack) if entry_id == owner_id)
        raise NestwireCyclicDependencyError([*chain[start:], implementation])
    token = _in_progress.set((*stack, (owner_id, implementation)))
    try:
        yield
    finally:
        _in_progress.reset(token)


__all__ = ["guard_resolution"]
