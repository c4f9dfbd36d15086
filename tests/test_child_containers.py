"""Tests for container hierarchies and the immutable parent view."""

import pytest

from nestwire import (
    BindKey,
    Characteristics,
    Container,
    ImmutableContainer,
    NestwireCompositionError,
    NestwireUnsatisfiedDependencyError,
)


class Storage:
    pass


class DiskStorage(Storage):
    pass


class MemoryStorage(Storage):
    pass


class Uploader:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage


class TestDelegation:
    def test_child_sees_parent_components(self, container: Container, child: Container) -> None:
        """Lookups fall back to the parent when the child has no match."""
        container.add_component(DiskStorage)

        assert child.get_component(DiskStorage) is container.get_component(DiskStorage)

    def test_parent_does_not_see_child_components(self, container: Container, child: Container) -> None:
        child.add_component(DiskStorage)

        assert container.get_component(DiskStorage) is None
        assert container.get_components(Storage) == []

    def test_child_registration_shadows_parent_key(self, container: Container, child: Container) -> None:
        container.add_component(Storage, DiskStorage)
        child.add_component(Storage, MemoryStorage)

        assert isinstance(child.get_component(Storage), MemoryStorage)
        assert isinstance(container.get_component(Storage), DiskStorage)

    def test_child_dependency_resolves_from_parent(self, container: Container, child: Container) -> None:
        container.add_component(DiskStorage)
        child.add_component(Uploader)

        assert child.get_component(Uploader).storage is container.get_component(DiskStorage)

    def test_parent_component_is_wired_in_parent_context(self, container: Container, child: Container) -> None:
        """A parent component never receives dependencies registered only in a child."""
        container.add_component(Uploader)
        child.add_component(DiskStorage)

        with pytest.raises(NestwireUnsatisfiedDependencyError):
            child.get_component(Uploader)

    def test_qualified_lookup_reaches_parent(self, container: Container, child: Container) -> None:
        container.add_component(BindKey(Storage, "fast"), MemoryStorage)
        container.add_component(BindKey(Storage, "slow"), DiskStorage)

        assert isinstance(child.get_component(Storage, qualifier="fast"), MemoryStorage)

    def test_parent_adapter_is_bound_to_parent(self, container: Container, child: Container) -> None:
        container.add_component(DiskStorage)

        adapter = child.find_adapter(DiskStorage)

        assert adapter is not None
        assert adapter.key is DiskStorage
        assert adapter.delegate is container.find_adapter(DiskStorage)

    def test_same_key_may_be_registered_in_parent_and_child(self, container: Container, child: Container) -> None:
        container.add_component(DiskStorage)
        child.add_component(DiskStorage)

        assert child.get_component(DiskStorage) is not container.get_component(DiskStorage)


class TestChildCreation:
    def test_make_child_container_registers_the_child(self, container: Container) -> None:
        made = container.make_child_container()

        assert container.children == (made,)
        assert made.parent == container

    def test_child_inherits_default_flags(self) -> None:
        parent = Container(flags=Characteristics.NO_CACHE, name="transient-parent")
        made = parent.make_child_container()
        made.add_component(DiskStorage)

        assert made.get_component(DiskStorage) is not made.get_component(DiskStorage)

    def test_child_shares_converters_and_monitor(self, container: Container, child: Container) -> None:
        assert child.converters is container.converters
        assert child.current_monitor() is container.current_monitor()


class TestChildTracking:
    def test_adding_a_child_twice_tracks_it_once(self, container: Container) -> None:
        other = Container(name="other")

        container.add_child_container(other)
        container.add_child_container(other)

        assert container.children == (other,)

    def test_container_cannot_be_its_own_child(self, container: Container) -> None:
        with pytest.raises(NestwireCompositionError, match="would close a cycle"):
            container.add_child_container(container)

    def test_ancestor_cannot_become_a_child(self, container: Container, child: Container) -> None:
        grandchild = child.make_child_container()

        with pytest.raises(NestwireCompositionError):
            child.add_child_container(container)
        with pytest.raises(NestwireCompositionError):
            grandchild.add_child_container(container)

    def test_remove_child_container(self, container: Container, child: Container) -> None:
        assert container.remove_child_container(child) is True
        assert container.remove_child_container(child) is False
        assert container.children == ()


class TestImmutableView:
    def test_view_rejects_lifecycle_calls(self, child: Container) -> None:
        parent = child.parent
        assert parent is not None

        with pytest.raises(NestwireCompositionError, match="through an immutable view"):
            parent.start()
        with pytest.raises(NestwireCompositionError):
            parent.stop()
        with pytest.raises(NestwireCompositionError):
            parent.dispose()

    def test_views_compare_by_wrapped_container(self, container: Container, child: Container) -> None:
        view = ImmutableContainer(container)

        assert view == child.parent
        assert view == container
        assert hash(view) == hash(container)
        assert ImmutableContainer(view) == view

    def test_view_needs_a_container(self) -> None:
        with pytest.raises(NestwireCompositionError):
            ImmutableContainer(None)  # type: ignore[arg-type]

    def test_view_forwards_lookups(self, container: Container) -> None:
        container.add_component(DiskStorage)
        view = ImmutableContainer(container)

        assert view.get_component(Storage) is container.get_component(DiskStorage)
        assert view.adapters == container.adapters
        assert view.name == "root"
