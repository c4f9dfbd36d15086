from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from nestwire._internal.behaviors.base import Behavior
from nestwire._internal.container_interface import InjectInto
from nestwire._internal.dependencies import DependencyMetadata, static_dependencies
from nestwire._internal.parameters import ComponentParameter
from nestwire._internal.type_checks import is_runtime_class
from nestwire.exceptions import NestwireUnsatisfiedDependencyError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView

logger = logging.getLogger(__name__)


class StaticsInitializedSet:
    """Types whose static members were already injected, shared per component factory."""

    def __init__(self) -> None:
        self._types: set[Any] = set()
        self._lock = threading.RLock()

    def __contains__(self, implementation: object) -> bool:
        with self._lock:
            return implementation in self._types

    def run_once(self, implementation: Any, action: Callable[[], None]) -> None:
        with self._lock:
            if implementation in self._types:
                return
            self._types.add(implementation)
            try:
                action()
            except BaseException:
                self._types.discard(implementation)
                raise


class StaticInjected(Behavior):
    """Outermost layer assigning ``StaticMember`` class attributes once per class.

    Members are resolved like constructor dependencies the first time any
    registration of the class is produced.
    """

    descriptor = "StaticInjected"

    def __init__(self, delegate: ComponentAdapter, statics: StaticsInitializedSet) -> None:
        super().__init__(delegate)
        self._statics = statics
        implementation = delegate.implementation
        self._members = static_dependencies(implementation) if is_runtime_class(implementation) else ()

    @property
    def members(self) -> tuple[DependencyMetadata, ...]:
        return self._members

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        if self._members:
            self._statics.run_once(self.implementation, lambda: self._inject(container))
        return super().get_instance(container, into)

    def _inject(self, container: ContainerView) -> None:
        into = InjectInto(self.implementation, self.key)
        for member in self._members:
            resolution = ComponentParameter.DEFAULT.resolve(container, self, member)
            if not resolution.is_resolved:
                raise NestwireUnsatisfiedDependencyError(self.implementation, [member.requested])
            setattr(self.implementation, member.name, resolution.resolve_instance(into))
            logger.debug("Injected static member %s.%s", self.implementation.__qualname__, member.name)


__all__ = ["StaticInjected", "StaticsInitializedSet"]
