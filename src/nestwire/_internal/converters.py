from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Any

_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0"})


def _to_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    msg = f"Cannot convert {value!r} to bool."
    raise ValueError(msg)


class Converters:
    """Convert string configuration values into simple target types.

    Used when a string registered with ``Container.add_config`` or applied by
    ``PropertyApplicator`` satisfies a parameter of another type.
    """

    def __init__(self) -> None:
        self._converters: dict[type[Any], Callable[[str], Any]] = {
            str: str,
            int: int,
            float: float,
            bool: _to_bool,
            Decimal: Decimal,
            Path: Path,
        }

    def can_convert(self, target: Any) -> bool:
        return target in self._converters

    def convert(self, value: str, target: Any) -> Any:
        return self._converters[target](value)

    def register(self, target: type[Any], converter: Callable[[str], Any]) -> None:
        self._converters[target] = converter


__all__ = ["Converters"]
