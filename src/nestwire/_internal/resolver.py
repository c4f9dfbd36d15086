from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from nestwire._internal.adapters import BoundAdapter, LateInstanceAdapter
from nestwire._internal.markers import key_qualifier
from nestwire._internal.type_checks import is_assignable, is_runtime_class
from nestwire.exceptions import NestwireAmbiguousResolutionError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView
    from nestwire._internal.dependencies import DependencyMetadata

logger = logging.getLogger(__name__)


class _NoKey:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_KEY"


NO_KEY: Any = _NoKey()


@runtime_checkable
class ProducesType(Protocol):
    """Adapter that produces a type other than its implementation, such as a provider."""

    @property
    def produced_type(self) -> Any: ...


def produced_type_of(adapter: ComponentAdapter) -> Any | None:
    producer = adapter.find_adapter_of_type(ProducesType)
    if producer is None:
        return None
    return producer.produced_type


def satisfies(expected: Any, adapter: ComponentAdapter) -> bool:
    """Return true when adapter can satisfy a request for expected.

    A factory adapter satisfies requests for its own type and, independently,
    requests for the type it produces.
    """
    if is_assignable(expected, adapter.implementation):
        return True
    produced = produced_type_of(adapter)
    return produced is not None and is_assignable(expected, produced)


def needs_conversion(container: ContainerView, expected: Any, adapter: ComponentAdapter) -> bool:
    return (
        adapter.implementation is str
        and expected is not str
        and is_runtime_class(expected)
        and container.converters.can_convert(expected)
    )


def qualifies(adapter: ComponentAdapter, qualifier: Any) -> bool:
    if qualifier is None:
        return True
    registered = key_qualifier(adapter.key)
    return registered is None or registered == qualifier


def _is_requester(adapter: ComponentAdapter, requester: ComponentAdapter | None) -> bool:
    if requester is None:
        return False
    return adapter is requester or adapter.key == requester.key


class ComponentResolver:
    """Match a requested dependency to exactly one adapter.

    The search runs in a fixed order:

    1. An explicit key resolves by key only, locally and then up the parents.
    2. The requested type used as a key wins over any assignability search.
    3. Otherwise every local adapter assignable to the type is a candidate,
       minus the requester itself and minus candidates whose ``BindKey``
       carries another qualifier.
    4. One candidate is the answer. Several candidates are settled by name
       binding when enabled, otherwise the request is ambiguous. With no
       candidate the name binding is tried locally, then the parent is asked.
    5. The owning container's monitor may supply a late instance last.

    The resolver only compares metadata already extracted at registration
    time; it never inspects signatures itself.
    """

    def adapter_for(
        self,
        container: ContainerView,
        requester: ComponentAdapter | None,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
        key: Any = NO_KEY,
    ) -> ComponentAdapter | None:
        """Return the adapter satisfying dependency, or ``None`` when unsatisfied.

        Args:
            container: Container the requester is resolved in.
            requester: Adapter whose dependency is being resolved, excluded from
                the candidates. ``None`` for direct lookups.
            dependency: Injection point metadata.
            use_names: Whether the dependency name may select a candidate.
            key: Explicit key given at parameter declaration time.

        Raises:
            NestwireAmbiguousResolutionError: If several candidates remain.

        """
        if key is not NO_KEY:
            return container.get_adapter(key)

        expected = dependency.declared_type
        name = dependency.name if use_names else None
        if expected is None:
            result = self._named(container, requester, name, None)
        else:
            result = self._by_type(container, requester, expected, name, dependency.qualifier)
            if result is None:
                late = container.late_adapter(expected)
                result = late if late is not None and not _is_requester(late, requester) else None

        if result is None:
            return None
        if expected is not None and not satisfies(expected, result) and not needs_conversion(container, expected, result):
            logger.debug("Resolved %r for %r but it is not compatible", result, expected)
            return None
        return result

    def verify(
        self,
        container: ContainerView,
        requester: ComponentAdapter | None,
        dependency: DependencyMetadata,
        *,
        use_names: bool = False,
        key: Any = NO_KEY,
    ) -> ComponentAdapter | None:
        """Run the same search as ``adapter_for`` and verify the match without producing it."""
        adapter = self.adapter_for(container, requester, dependency, use_names=use_names, key=key)
        if adapter is not None:
            adapter.verify(container)
        return adapter

    def _by_type(
        self,
        container: ContainerView,
        requester: ComponentAdapter | None,
        expected: Any,
        name: str | None,
        qualifier: Any,
    ) -> ComponentAdapter | None:
        by_key = container.find_adapter(expected)
        if by_key is not None and not _is_requester(by_key, requester) and qualifies(by_key, qualifier):
            return by_key

        candidates = [
            adapter
            for adapter in container.get_adapters_by_type(expected, qualifier=qualifier)
            if not _is_requester(adapter, requester)
        ]
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            named = self._named(container, requester, name, expected)
            if named is not None:
                return named
            raise NestwireAmbiguousResolutionError(
                expected,
                [candidate.implementation for candidate in candidates],
            )

        named = self._named(container, requester, name, expected)
        if named is not None:
            return named
        parent = container.parent
        if parent is None:
            return None
        found = parent.get_adapter_by_type(expected, name=name, qualifier=qualifier)
        if found is None or isinstance(found, (BoundAdapter, LateInstanceAdapter)):
            return found
        return BoundAdapter(found, parent)

    def _named(
        self,
        container: ContainerView,
        requester: ComponentAdapter | None,
        name: str | None,
        expected: Any,
    ) -> ComponentAdapter | None:
        if name is None:
            return None
        found = container.find_adapter(name)
        if found is None or _is_requester(found, requester):
            return None
        if expected is not None and not satisfies(expected, found) and not needs_conversion(container, expected, found):
            return None
        return found


__all__ = [
    "NO_KEY",
    "ComponentResolver",
    "ProducesType",
    "needs_conversion",
    "produced_type_of",
    "qualifies",
    "satisfies",
]
