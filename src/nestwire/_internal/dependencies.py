from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, get_args, get_origin, get_type_hints

from nestwire._internal.markers import StaticMember, qualifier_of, split_annotated
from nestwire.exceptions import NestwireCompositionError

_MISSING: Any = object()


@dataclass(frozen=True, slots=True, kw_only=True)
class DependencyMetadata:
    """What one injection point asks for, extracted once at registration time.

    Attributes:
        name: Parameter or attribute name, used for name binding.
        declared_type: Declared type with ``Annotated`` metadata stripped, or
            ``None`` when the injection point has no annotation.
        qualifier: Value of a ``Qualifier`` marker, if any.
        default: Default value, or the module-private missing sentinel.
        positional_only: Whether the value must be passed positionally.

    """

    name: str
    declared_type: Any = None
    qualifier: Any = None
    default: Any = _MISSING
    positional_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    @property
    def requested(self) -> Any:
        return self.declared_type if self.declared_type is not None else self.name


def _type_hints(target: Any, owner: Any) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as error:
        msg = f"Cannot evaluate annotations of {owner!r}: {error}"
        raise NestwireCompositionError(msg) from error


def callable_dependencies(target: Callable[..., Any], *, owner: Any, skip_first: bool = False) -> tuple[DependencyMetadata, ...]:
    """Return the injection points of target's parameters.

    Args:
        target: Function or method whose parameters are injected.
        owner: Object named in error messages.
        skip_first: Drop the first parameter, for unbound ``__init__`` functions.

    Raises:
        NestwireCompositionError: If the annotations cannot be evaluated.

    """
    signature = inspect.signature(target)
    hints = _type_hints(target, owner)
    parameters = list(signature.parameters.values())
    if skip_first:
        parameters = parameters[1:]

    dependencies: list[DependencyMetadata] = []
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(parameter.name)
        declared_type, metadata = split_annotated(annotation)
        dependencies.append(
            DependencyMetadata(
                name=parameter.name,
                declared_type=declared_type,
                qualifier=qualifier_of(metadata),
                default=_MISSING if parameter.default is inspect.Parameter.empty else parameter.default,
                positional_only=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
            ),
        )
    return tuple(dependencies)


def constructor_dependencies(implementation: type[Any]) -> tuple[DependencyMetadata, ...]:
    init = implementation.__init__
    # slot wrappers of builtin bases carry no annotations
    if init is object.__init__ or not inspect.isfunction(init):
        return ()
    return callable_dependencies(init, owner=implementation, skip_first=True)


def _mentions_static_member(implementation: type[Any]) -> bool:
    # Raw scan first, so classes with unresolvable annotations are not evaluated.
    for klass in implementation.__mro__:
        try:
            annotations = inspect.get_annotations(klass)
        except NameError:
            continue
        for annotation in annotations.values():
            text = annotation if isinstance(annotation, str) else repr(annotation)
            if StaticMember.__name__ in text:
                return True
    return False


def static_dependencies(implementation: type[Any]) -> tuple[DependencyMetadata, ...]:
    """Return the class attributes declared as ``ClassVar[Annotated[T, StaticMember()]]``."""
    if not _mentions_static_member(implementation):
        return ()
    hints = _type_hints(implementation, implementation)
    members: list[DependencyMetadata] = []
    for name, hint in hints.items():
        if get_origin(hint) is not ClassVar:
            continue
        args = get_args(hint)
        if not args:
            continue
        declared_type, metadata = split_annotated(args[0])
        if not any(isinstance(item, StaticMember) for item in metadata):
            continue
        members.append(
            DependencyMetadata(name=name, declared_type=declared_type, qualifier=qualifier_of(metadata)),
        )
    return tuple(members)


def return_type(target: Callable[..., Any], *, owner: Any) -> Any:
    return _type_hints(target, owner).get("return")


__all__ = [
    "DependencyMetadata",
    "callable_dependencies",
    "constructor_dependencies",
    "return_type",
    "static_dependencies",
]
