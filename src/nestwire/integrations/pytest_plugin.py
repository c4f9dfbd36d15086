"""Pytest fixtures providing per-test containers.

Load the plugin from a test module or a ``conftest.py``:

.. code-block:: python

    pytest_plugins = ["nestwire.integrations.pytest_plugin"]

Override ``nestwire_container`` to register components for every test that
uses it.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from nestwire._internal.container import Container
from nestwire._internal.lifecycle_state import LifecycleState


@pytest.fixture()
def nestwire_container() -> Iterator[Container]:
    """Create a per-test container, disposed at teardown unless the test already did.

    Yields:
        A new ``Container`` with default flags.

    """
    container = Container(name="nestwire-test")
    yield container
    if container.lifecycle_state is not LifecycleState.DISPOSED:
        container.dispose()


@pytest.fixture()
def nestwire_child_container(nestwire_container: Container) -> Container:
    """Create a child of ``nestwire_container``; it is disposed together with its parent."""
    child = nestwire_container.make_child_container()
    child.name = "nestwire-test-child"
    return child
