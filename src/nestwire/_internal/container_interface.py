from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, overload

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.converters import Converters
    from nestwire._internal.lifecycle_state import LifecycleState

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class InjectInto:
    """Target site of a nested resolution: who asked, and under which key."""

    implementation: Any
    key: Any


class ContainerView(ABC):
    """Read side of a container, shared by containers and immutable views."""

    @overload
    @abstractmethod
    def get_component(self, key: type[T], *, qualifier: Any | None = None) -> T | None: ...

    @overload
    @abstractmethod
    def get_component(self, key: Any, *, qualifier: Any | None = None) -> Any | None: ...

    @abstractmethod
    def get_component(self, key: Any, *, qualifier: Any | None = None) -> Any | None:
        """Return the component registered under key, or resolved by type.

        Args:
            key: Registration key, or a type to resolve by assignability.
            qualifier: Optional qualifier narrowing a type lookup.

        Raises:
            NestwireAmbiguousResolutionError: If several candidates match a type.

        """

    @abstractmethod
    def get_component_into(self, key: Any, into: InjectInto | None) -> Any | None:
        """Return the component for key on behalf of a target site."""

    @abstractmethod
    def get_components(self, component_type: type[T] = object) -> list[T]:  # type: ignore[assignment]
        """Return every component assignable to component_type, instantiating as needed."""

    @abstractmethod
    def find_adapter(self, key: Any) -> ComponentAdapter | None:
        """Return the adapter for key from this container or its parents, without fallback."""

    @abstractmethod
    def get_adapter(self, key: Any) -> ComponentAdapter | None:
        """Return the adapter for key, consulting parents and the monitor fallback."""

    @abstractmethod
    def late_adapter(self, key: Any) -> ComponentAdapter | None:
        """Return a fallback adapter synthesized by the monitor for an unresolved key."""

    @abstractmethod
    def get_adapter_by_type(
        self,
        component_type: Any,
        *,
        name: str | None = None,
        qualifier: Any | None = None,
    ) -> ComponentAdapter | None:
        """Return the single adapter matching component_type."""

    @abstractmethod
    def get_adapters_by_type(
        self,
        component_type: Any,
        *,
        qualifier: Any | None = None,
    ) -> list[ComponentAdapter]:
        """Return the local adapters whose implementation is assignable to component_type."""

    @property
    @abstractmethod
    def adapters(self) -> tuple[ComponentAdapter, ...]:
        """Return the local adapters in registration order."""

    @property
    @abstractmethod
    def parent(self) -> ContainerView | None:
        """Return the read-only parent view, if any."""

    @property
    @abstractmethod
    def converters(self) -> Converters:
        """Return the string converters used for configuration values."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the container name used in logs and errors."""

    @property
    @abstractmethod
    def lifecycle_state(self) -> LifecycleState:
        """Return the current lifecycle state."""

    @abstractmethod
    def verify(self) -> None:
        """Check every registration's dependencies without instantiating anything."""


__all__ = ["ContainerView", "InjectInto"]
