from __future__ import annotations

import pytest

from nestwire import Container, LifecycleState

pytest_plugins = ["nestwire.integrations.pytest_plugin"]


class _Service:
    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass


def test_nestwire_container_fixture_is_fresh(nestwire_container: Container) -> None:
    assert isinstance(nestwire_container, Container)
    assert nestwire_container.name == "nestwire-test"
    assert nestwire_container.adapters == ()
    assert nestwire_container.lifecycle_state is LifecycleState.CONSTRUCTED


def test_nestwire_child_container_is_attached(
    nestwire_container: Container,
    nestwire_child_container: Container,
) -> None:
    assert nestwire_child_container.parent == nestwire_container
    assert nestwire_container.children == (nestwire_child_container,)
    assert nestwire_child_container.name == "nestwire-test-child"


def test_started_container_is_left_for_teardown(nestwire_container: Container) -> None:
    nestwire_container.add_component(_Service)
    nestwire_container.start()

    assert nestwire_container.lifecycle_state is LifecycleState.STARTED


def test_container_disposed_by_the_test_is_not_disposed_again(nestwire_container: Container) -> None:
    nestwire_container.dispose()

    assert nestwire_container.lifecycle_state is LifecycleState.DISPOSED


class TestOverriddenContainer:
    @pytest.fixture()
    def nestwire_container(self) -> Container:
        container = Container(name="overridden")
        container.add_component(_Service)
        return container

    def test_override_is_used_by_the_child_fixture(self, nestwire_child_container: Container) -> None:
        assert isinstance(nestwire_child_container.get_component(_Service), _Service)
