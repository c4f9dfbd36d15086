from __future__ import annotations

from typing import Annotated, Any, NamedTuple, get_args, get_origin

_ANNOTATED_MARKER_MIN_ARGS = 2


class Qualifier(NamedTuple):
    """Narrow a dependency to candidates registered under a matching ``BindKey``.

    Attach ``Qualifier`` metadata to ``typing.Annotated`` on a constructor
    parameter. Candidates whose key is a ``BindKey`` with a different qualifier
    are dropped before the ambiguity check.

    Examples:
        .. code-block:: python

            class Reporter:
                def __init__(self, db: Annotated[Database, Qualifier("replica")]) -> None:
                    self.db = db


            container.add_component(BindKey(Database, "primary"), PrimaryDatabase)
            container.add_component(BindKey(Database, "replica"), ReplicaDatabase)
            container.add_component(Reporter)

    """

    value: Any


class BindKey(NamedTuple):
    """Registration key made of a type and a qualifier.

    ``BindKey(Database, "primary")`` registers an implementation that matches
    requests for ``Database`` qualified with ``Qualifier("primary")`` as well as
    unqualified requests.
    """

    type: Any
    qualifier: Any

    def __repr__(self) -> str:
        name = getattr(self.type, "__qualname__", repr(self.type))
        return f"BindKey({name}, {self.qualifier!r})"


class StaticMember:
    """Mark a class attribute for one-time static injection.

    Declare the attribute as ``ClassVar[Annotated[T, StaticMember()]]``. The
    first time the container produces the class, the attribute is resolved
    like a constructor dependency and assigned on the class itself.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "StaticMember()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StaticMember)

    def __hash__(self) -> int:
        return hash(StaticMember)


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Return the base type of an annotation and its ``Annotated`` metadata.

    Args:
        annotation: Annotation to inspect, possibly ``Annotated[...]``.

    """
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        if len(args) >= _ANNOTATED_MARKER_MIN_ARGS:
            return args[0], tuple(args[1:])
    return annotation, ()


def qualifier_of(metadata: tuple[Any, ...]) -> Any | None:
    for item in metadata:
        if isinstance(item, Qualifier):
            return item.value
    return None


def key_qualifier(key: Any) -> Any | None:
    if isinstance(key, BindKey):
        return key.qualifier
    return None


__all__ = [
    "BindKey",
    "Qualifier",
    "StaticMember",
    "key_qualifier",
    "qualifier_of",
    "split_annotated",
]
