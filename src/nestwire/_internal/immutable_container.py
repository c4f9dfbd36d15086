from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from nestwire._internal.container_interface import ContainerView
from nestwire.exceptions import NestwireCompositionError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import InjectInto
    from nestwire._internal.converters import Converters
    from nestwire._internal.lifecycle_state import LifecycleState

T = TypeVar("T")


class ImmutableContainer(ContainerView):
    """Read-only view over a container, used as the parent seen by children.

    Lookups go straight to the wrapped container. Lifecycle calls are rejected,
    and registration methods are not exposed at all. Views compare equal to
    each other, and to the container itself, when they wrap the same container.
    """

    __slots__ = ("_delegate",)

    def __init__(self, delegate: ContainerView) -> None:
        if delegate is None:
            msg = "ImmutableContainer needs a container to wrap."
            raise NestwireCompositionError(msg)
        while isinstance(delegate, ImmutableContainer):
            delegate = delegate._delegate
        self._delegate = delegate

    def get_component(self, key: Any, *, qualifier: Any | None = None) -> Any | None:
        return self._delegate.get_component(key, qualifier=qualifier)

    def get_component_into(self, key: Any, into: InjectInto | None) -> Any | None:
        return self._delegate.get_component_into(key, into)

    def get_components(self, component_type: type[T] = object) -> list[T]:  # type: ignore[assignment]
        return self._delegate.get_components(component_type)

    def find_adapter(self, key: Any) -> ComponentAdapter | None:
        return self._delegate.find_adapter(key)

    def get_adapter(self, key: Any) -> ComponentAdapter | None:
        return self._delegate.get_adapter(key)

    def late_adapter(self, key: Any) -> ComponentAdapter | None:
        return self._delegate.late_adapter(key)

    def get_adapter_by_type(
        self,
        component_type: Any,
        *,
        name: str | None = None,
        qualifier: Any | None = None,
    ) -> ComponentAdapter | None:
        return self._delegate.get_adapter_by_type(component_type, name=name, qualifier=qualifier)

    def get_adapters_by_type(
        self,
        component_type: Any,
        *,
        qualifier: Any | None = None,
    ) -> list[ComponentAdapter]:
        return self._delegate.get_adapters_by_type(component_type, qualifier=qualifier)

    @property
    def adapters(self) -> tuple[ComponentAdapter, ...]:
        return self._delegate.adapters

    @property
    def parent(self) -> ContainerView | None:
        return self._delegate.parent

    @property
    def converters(self) -> Converters:
        return self._delegate.converters

    @property
    def name(self) -> str:
        return self._delegate.name

    @property
    def lifecycle_state(self) -> LifecycleState:
        return self._delegate.lifecycle_state

    def verify(self) -> None:
        self._delegate.verify()

    def start(self) -> None:
        self._reject("start")

    def stop(self) -> None:
        self._reject("stop")

    def dispose(self) -> None:
        self._reject("dispose")

    def _reject(self, action: str) -> None:
        msg = f"Cannot {action} {self._delegate.name!r} through an immutable view."
        raise NestwireCompositionError(msg)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ImmutableContainer):
            return self._delegate is other._delegate
        return self._delegate is other

    def __hash__(self) -> int:
        return hash(self._delegate)

    def __repr__(self) -> str:
        return f"[Immutable]:{self._delegate!r}"


__all__ = ["ImmutableContainer"]
