"""Shared pytest fixtures for nestwire tests."""

import pytest

from nestwire import Characteristics, Container


@pytest.fixture()
def container() -> Container:
    """Root container with the default caching flags."""
    return Container(name="root")


@pytest.fixture()
def transient_container() -> Container:
    """Root container producing a new instance on every lookup."""
    return Container(flags=Characteristics.NO_CACHE, name="transient")


@pytest.fixture()
def child(container: Container) -> Container:
    """Child of ``container`` created through ``make_child_container``."""
    child = container.make_child_container()
    child.name = "child"
    return child


@pytest.fixture()
def events() -> list[str]:
    """Ordered record of lifecycle callbacks made by test components."""
    return []
