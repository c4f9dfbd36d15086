from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from nestwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from nestwire._internal.monitor import ForwardingComponentMonitor

if TYPE_CHECKING:
    from nestwire._internal.container_interface import ContainerView
    from nestwire._internal.monitor import ComponentMonitor

logger = logging.getLogger(__name__)


class SettingsMonitor(ForwardingComponentMonitor):
    """Monitor supplying pydantic-settings classes nobody registered.

    When a lookup for a ``BaseSettings`` subclass finds no registration, the
    settings class is built from the environment once per monitor and the same
    instance is returned for every later miss. Other misses go to the delegate.

    Examples:
        .. code-block:: python

            class AppSettings(BaseSettings):
                database_url: str = "sqlite://"

            container = Container(monitor=SettingsMonitor())
            container.add_component(Database)  # Database.__init__(self, settings: AppSettings)

    """

    def __init__(self, delegate: ComponentMonitor | None = None) -> None:
        super().__init__(delegate)
        self._settings: dict[type[Any], Any] = {}
        self._lock = threading.Lock()

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        if not is_pydantic_settings_subclass(key):
            return super().no_component_found(container, key)
        with self._lock:
            settings = self._settings.get(key)
            if settings is None:
                settings = key()
                self._settings[key] = settings
                logger.debug("Built settings %s for %r", key.__qualname__, container.name)
            return settings


__all__ = ["SettingsMonitor", "is_pydantic_settings_subclass"]
