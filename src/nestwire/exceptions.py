from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def _describe_key(key: Any) -> str:
    if isinstance(key, type):
        return key.__qualname__
    return repr(key)


class NestwireError(Exception):
    """Represent a base class for all nestwire-specific failures.

    Catch this type when you want to handle any nestwire error path without
    matching each concrete exception class individually.
    """


class NestwireCompositionError(NestwireError):
    """Signal that a container cannot be composed as requested.

    Raised by registration and wiring APIs such as ``Container.add_component``,
    ``Container.add_adapter`` and ``Container.add_child_container`` when the
    requested graph is malformed.

    Typical fixes include registering components under distinct keys, avoiding
    nested ``with_flags`` views, and wiring child containers only below their
    parent.
    """


class NestwireDuplicateKeyError(NestwireCompositionError):
    """Signal a registration under a key that is already taken in a container.

    Keys are unique per container only, so the same key may be registered again
    in a child container. The container is left unchanged.

    Typical fixes include registering the second implementation under an explicit
    key, or removing the first registration with ``Container.remove_component``.
    """

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Duplicate key {_describe_key(key)} already registered in this container.")


class NestwireUnprocessedConfigurationError(NestwireCompositionError):
    """Signal configuration flags that no behavior consumed.

    Raised at registration time when flags remain after the behavior pipeline
    has run. This usually points to a typo in a flag name or to a flag that only
    makes sense for another registration method. The component is not registered.
    """

    def __init__(self, flags: Mapping[str, Any]) -> None:
        self.flags = dict(flags)
        super().__init__(f"Unprocessed configuration flags: {self.flags!r}.")


class NestwireUnsatisfiedDependencyError(NestwireError):
    """Signal that a constructor or factory dependency has no candidate.

    Raised at resolution and ``verify`` time when no compatible adapter exists
    in the container or anywhere up its parent chain.

    Typical fixes include registering the dependency, registering it on a
    parent container, or giving the parameter a default value.
    """

    def __init__(self, implementation: Any, unsatisfied: Iterable[Any]) -> None:
        self.implementation = implementation
        self.unsatisfied = tuple(unsatisfied)
        names = ", ".join(_describe_key(item) for item in self.unsatisfied)
        super().__init__(
            f"{_describe_key(implementation)} has unsatisfied dependencies: {names}.",
        )


class NestwireAmbiguousResolutionError(NestwireError):
    """Signal more than one compatible candidate for a requested type.

    The ``candidates`` attribute lists the implementation type of every
    matching adapter.

    Typical fixes include requesting the component by key, enabling
    ``Characteristics.USE_NAMES`` with a matching parameter name, or
    qualifying the dependency with ``Annotated[T, Qualifier(...)]``.
    """

    def __init__(self, requested: Any, candidates: Iterable[Any]) -> None:
        self.requested = requested
        self.candidates = tuple(candidates)
        names = ", ".join(_describe_key(item) for item in self.candidates)
        super().__init__(
            f"Ambiguous resolution of {_describe_key(requested)}: candidates are {names}.",
        )


class NestwireCyclicDependencyError(NestwireError):
    """Signal a component that transitively requests itself during construction.

    The ``chain`` attribute holds the implementation types in resolution order,
    ending with the repeated one. Containers retry a cyclic failure once against
    their parent before it reaches the caller.

    Typical fixes include breaking the cycle, moving one side to a parent
    container, or registering one side with ``Characteristics.ENABLE_CIRCULAR``.
    """

    def __init__(self, chain: Iterable[Any]) -> None:
        self.chain = tuple(chain)
        path = " -> ".join(_describe_key(item) for item in self.chain)
        super().__init__(f"Cyclic dependency detected: {path}.")


class NestwireIllegalLifecycleTransitionError(NestwireError):
    """Signal a lifecycle call that the current state forbids.

    Raised by container ``start``, ``stop``, ``dispose`` and component removal,
    and by memoized components started or stopped twice. The state is not
    changed.
    """

    def __init__(self, subject: str, state: Any, action: str) -> None:
        self.subject = subject
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} {subject} in state {state}.")


class NestwireNotConcreteTypeError(NestwireCompositionError):
    """Signal an attempt to construct a type that cannot be instantiated.

    Abstract classes, protocols and non-class objects cannot be wrapped in a
    constructor injector.

    Typical fixes include registering a concrete implementation under the abstract
    key, or registering an instance or provider instead.
    """

    def __init__(self, implementation: Any) -> None:
        self.implementation = implementation
        super().__init__(f"{_describe_key(implementation)} is not a concrete class.")


class NestwireConfigurationError(NestwireError):
    """Signal a capability that was requested but never established.

    Raised for example by ``current_monitor`` on a behavior whose delegate has no
    monitor, or by implementation hiding over a key that is not a type.
    """


class NestwireLifecycleError(NestwireError):
    """Signal a failure inside a component's ``start``, ``stop`` or ``dispose``.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, method: str, instance: Any, cause: BaseException) -> None:
        self.method = method
        self.instance = instance
        super().__init__(f"{method}() failed on {type(instance).__qualname__}: {cause}")


class NestwireGuardError(NestwireError):
    """Signal a guarded component whose precondition failed.

    The guard component is looked up by the key given to
    ``Characteristics.guard`` and must be truthy, or return a truthy value when
    called with the guarded component key.
    """


class NestwireThreadCacheInvalidatedError(NestwireError):
    """Signal use of a thread-scoped store after it was invalidated.

    Typical fix is calling ``reset_cache_for_thread`` or
    ``put_cache_for_thread`` before resolving stored components again on this
    thread.
    """
