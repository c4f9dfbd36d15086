from __future__ import annotations

import importlib
from typing import Any


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type):
        return base_settings
    return None


_base_settings: type[Any] | None = None
_loaded = False


def settings_base() -> type[Any] | None:
    """Return ``pydantic_settings.BaseSettings``, importing it on first use."""
    global _base_settings, _loaded  # noqa: PLW0603
    if not _loaded:
        _base_settings = _load_base_settings("pydantic_settings")
        _loaded = True
    return _base_settings


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return true when candidate is a class deriving from pydantic-settings' ``BaseSettings``."""
    base = settings_base()
    if base is None or not isinstance(candidate, type):
        return False
    return issubclass(candidate, base) and candidate is not base


__all__ = ["is_pydantic_settings_subclass", "settings_base"]
