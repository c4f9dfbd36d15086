from __future__ import annotations

from typing import Any

import pytest

pytest.importorskip("pydantic_settings")

from pydantic_settings import BaseSettings

from nestwire import Container, ContainerView, NullComponentMonitor
from nestwire.integrations.pydantic_settings import SettingsMonitor, is_pydantic_settings_subclass


class AppSettings(BaseSettings):
    database_url: str = "sqlite://"


class Database:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings


class _AnswerMonitor(NullComponentMonitor):
    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        return 42 if key == "answer" else None


def test_unregistered_settings_are_built_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://db")
    container = Container(monitor=SettingsMonitor())
    container.add_component(Database)

    database = container.get_component(Database)

    assert database.settings.database_url == "postgres://db"


def test_settings_are_built_once_per_monitor() -> None:
    container = Container(monitor=SettingsMonitor(), flags=None)
    container.add_component(Database)

    first = container.get_component(Database)
    second = container.get_component(Database)

    assert first is not second
    assert first.settings is second.settings
    assert container.get_component(AppSettings) is first.settings


def test_registered_settings_take_precedence() -> None:
    container = Container(monitor=SettingsMonitor())
    container.add_component(AppSettings(database_url="mysql://explicit"))
    container.add_component(Database)

    assert container.get_component(Database).settings.database_url == "mysql://explicit"


def test_other_misses_are_forwarded_to_delegate() -> None:
    container = Container(monitor=SettingsMonitor(_AnswerMonitor()))

    assert container.get_component("answer") == 42
    assert container.get_component("question") is None


def test_is_pydantic_settings_subclass() -> None:
    assert is_pydantic_settings_subclass(AppSettings) is True
    assert is_pydantic_settings_subclass(BaseSettings) is False
    assert is_pydantic_settings_subclass(Database) is False
    assert is_pydantic_settings_subclass("AppSettings") is False
