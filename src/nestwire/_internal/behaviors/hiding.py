from __future__ import annotations

import inspect
import types
from typing import TYPE_CHECKING, Any, Generic, Protocol

from nestwire._internal.adapters import describe_key
from nestwire._internal.behaviors.base import Behavior
from nestwire._internal.markers import BindKey
from nestwire._internal.type_checks import is_runtime_class
from nestwire.exceptions import NestwireConfigurationError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.container_interface import ContainerView, InjectInto

_UNSET: Any = object()
_SKIPPED_BASES = (object, Protocol, Generic)


def capabilities_of(key: Any) -> tuple[type[Any], ...]:
    """Return the capability types a hidden component may expose for key.

    Args:
        key: Registration key: a type, a ``BindKey`` over a type, or a tuple of types.

    Raises:
        NestwireConfigurationError: If key does not name any type.

    """
    if is_runtime_class(key):
        return (key,)
    if isinstance(key, BindKey) and is_runtime_class(key.type):
        return (key.type,)
    if isinstance(key, tuple) and key and all(is_runtime_class(item) for item in key):
        return tuple(key)
    msg = f"Cannot hide the implementation of {describe_key(key)}: the key must be a type or a tuple of types."
    raise NestwireConfigurationError(msg)


def _public_members(capabilities: tuple[type[Any], ...]) -> dict[str, type[Any]]:
    members: dict[str, type[Any]] = {}
    for capability in capabilities:
        for klass in capability.__mro__:
            if klass in _SKIPPED_BASES:
                continue
            names = [*vars(klass), *getattr(klass, "__annotations__", {})]
            for name in names:
                if not name.startswith("_"):
                    members.setdefault(name, capability)
    return members


def _is_method(capability: type[Any], name: str) -> bool:
    static = inspect.getattr_static(capability, name, None)
    if isinstance(static, (staticmethod, classmethod, types.FunctionType)):
        return True
    return callable(static) and not isinstance(static, property)


class HiddenImplementation(Behavior):
    """Expose the component only through its declared capability set.

    ``get_instance`` produces the real instance and returns it behind a
    :class:`HiddenProxy`. Every method call on the proxy goes through
    ``invoke_method`` so subclasses can act around it.

    Args:
        delegate: Adapter producing the real instance.
        lazy: Produce the real instance on first use through the proxy instead.
            A lazy proxy lets a constructor cycle close.

    """

    descriptor = "Hidden"

    def __init__(self, delegate: ComponentAdapter, *, lazy: bool = False) -> None:
        super().__init__(delegate)
        self._lazy = lazy
        self._capabilities = capabilities_of(delegate.key)
        self._members = _public_members(self._capabilities)

    @property
    def capabilities(self) -> tuple[type[Any], ...]:
        return self._capabilities

    def get_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        if self._lazy:
            return HiddenProxy(self, container, into)
        return HiddenProxy(self, container, into, self.real_instance(container, into))

    def declaring_capability(self, name: str) -> type[Any] | None:
        return self._members.get(name)

    def real_instance(self, container: ContainerView, into: InjectInto | None) -> Any:
        return self._delegate.get_instance(container, into)

    def invoke_method(
        self,
        instance: Any,
        capability: type[Any],
        name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        return getattr(instance, name)(*args, **kwargs)

    # Lifecycle callbacks reach the real instance, not the proxy.
    def start_component(self, instance: Any) -> None:
        super().start_component(_unwrap(instance))

    def stop_component(self, instance: Any) -> None:
        super().stop_component(_unwrap(instance))

    def dispose_component(self, instance: Any) -> None:
        super().dispose_component(_unwrap(instance))


class HiddenProxy:
    """Dispatch wrapper exposing only the public members of a capability set.

    Members that are not declared by any capability raise ``AttributeError``
    even when the real instance has them.
    """

    __slots__ = ("_nestwire_container", "_nestwire_hidden", "_nestwire_instance", "_nestwire_into")

    def __init__(
        self,
        hidden: HiddenImplementation,
        container: ContainerView,
        into: InjectInto | None,
        instance: Any = _UNSET,
    ) -> None:
        self._nestwire_hidden = hidden
        self._nestwire_container = container
        self._nestwire_into = into
        self._nestwire_instance = instance

    def _nestwire_target(self) -> Any:
        if self._nestwire_instance is _UNSET:
            self._nestwire_instance = self._nestwire_hidden.real_instance(
                self._nestwire_container,
                self._nestwire_into,
            )
        return self._nestwire_instance

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        hidden = self._nestwire_hidden
        capability = hidden.declaring_capability(name)
        if capability is None:
            msg = f"{name!r} is not exposed by {describe_key(hidden.key)}"
            raise AttributeError(msg)
        if not _is_method(capability, name):
            return getattr(self._nestwire_target(), name)

        def dispatch(*args: Any, **kwargs: Any) -> Any:
            return hidden.invoke_method(self._nestwire_target(), capability, name, args, kwargs)

        dispatch.__name__ = name
        return dispatch

    def __repr__(self) -> str:
        return f"HiddenProxy[{describe_key(self._nestwire_hidden.key)}]"


def _unwrap(instance: Any) -> Any:
    if isinstance(instance, HiddenProxy):
        return instance._nestwire_target()  # noqa: SLF001
    return instance


__all__ = ["HiddenImplementation", "HiddenProxy", "capabilities_of"]
