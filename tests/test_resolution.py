"""Tests for dependency matching: keys, types, names, qualifiers and cycles."""

from typing import Annotated, Any

import pytest

from nestwire import (
    BindKey,
    Characteristics,
    ComponentParameter,
    Container,
    ContainerView,
    NestwireAmbiguousResolutionError,
    NestwireCyclicDependencyError,
    NestwireUnsatisfiedDependencyError,
    NullComponentMonitor,
    Qualifier,
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


class NamedUploader:
    def __init__(self, memory: Storage) -> None:
        self.storage = memory


class QualifiedUploader:
    def __init__(self, storage: Annotated[Storage, Qualifier("fast")]) -> None:
        self.storage = storage


class CycleA:
    def __init__(self, b: "CycleB") -> None:
        self.b = b


class CycleB:
    def __init__(self, a: CycleA) -> None:
        self.a = a


class Greeter:
    def greet(self) -> str:
        return "hello"


class LoudGreeter(Greeter):
    def __init__(self, inner: Greeter) -> None:
        self.inner = inner

    def greet(self) -> str:
        return self.inner.greet().upper()


class TestTypeMatching:
    def test_single_assignable_candidate_is_used(self, container: Container) -> None:
        container.add_component(DiskStorage)
        container.add_component(Uploader)

        assert isinstance(container.get_component(Uploader).storage, DiskStorage)

    def test_two_candidates_are_ambiguous(self, container: Container) -> None:
        container.add_component(DiskStorage)
        container.add_component(MemoryStorage)
        container.add_component(Uploader)

        with pytest.raises(NestwireAmbiguousResolutionError) as exc_info:
            container.get_component(Uploader)

        assert exc_info.value.requested is Storage
        assert set(exc_info.value.candidates) == {DiskStorage, MemoryStorage}

    def test_direct_type_lookup_is_ambiguous_too(self, container: Container) -> None:
        container.add_component(DiskStorage)
        container.add_component(MemoryStorage)

        with pytest.raises(NestwireAmbiguousResolutionError, match="Storage"):
            container.get_component(Storage)

    def test_type_used_as_key_wins_over_assignable_candidates(self, container: Container) -> None:
        container.add_component(Storage, MemoryStorage)
        container.add_component(DiskStorage)
        container.add_component(Uploader)

        assert isinstance(container.get_component(Uploader).storage, MemoryStorage)

    def test_type_used_as_key_wins_over_name_binding(self) -> None:
        container = Container(flags=Characteristics.CACHE | Characteristics.USE_NAMES)
        container.add_component(Storage, DiskStorage)
        container.add_component("memory", MemoryStorage)
        container.add_component(NamedUploader)

        assert isinstance(container.get_component(NamedUploader).storage, DiskStorage)

    def test_unsatisfied_dependency_lists_requested_type(self, container: Container) -> None:
        container.add_component(Uploader)

        with pytest.raises(NestwireUnsatisfiedDependencyError) as exc_info:
            container.get_component(Uploader)

        assert exc_info.value.implementation is Uploader
        assert exc_info.value.unsatisfied == (Storage,)

    def test_same_type_resolves_to_same_component(self, container: Container) -> None:
        container.add_component(DiskStorage)

        assert container.get_component(Storage) is container.get_component(Storage)
        assert container.get_adapter_by_type(Storage) is container.get_adapter_by_type(Storage)


class TestNameBinding:
    def test_name_settles_ambiguity_when_enabled(self) -> None:
        container = Container(flags=Characteristics.CACHE | Characteristics.USE_NAMES)
        container.add_component("disk", DiskStorage)
        container.add_component("memory", MemoryStorage)
        container.add_component(NamedUploader)

        assert isinstance(container.get_component(NamedUploader).storage, MemoryStorage)

    def test_name_is_ignored_without_use_names(self, container: Container) -> None:
        container.add_component("disk", DiskStorage)
        container.add_component("memory", MemoryStorage)
        container.add_component(NamedUploader)

        with pytest.raises(NestwireAmbiguousResolutionError):
            container.get_component(NamedUploader)

    def test_name_must_be_type_compatible(self) -> None:
        container = Container(flags=Characteristics.CACHE | Characteristics.USE_NAMES)
        container.add_component("disk", DiskStorage)
        container.add_component("other", MemoryStorage)
        container.add_component("memory", "not a storage")
        container.add_component(NamedUploader)

        with pytest.raises(NestwireAmbiguousResolutionError):
            container.get_component(NamedUploader)

    def test_get_adapter_by_type_with_name(self, container: Container) -> None:
        container.add_component("disk", DiskStorage)
        container.add_component("memory", MemoryStorage)

        adapter = container.get_adapter_by_type(Storage, name="disk")

        assert adapter is not None
        assert adapter.key == "disk"


class TestQualifiers:
    def test_qualifier_filters_candidates(self, container: Container) -> None:
        container.add_component(BindKey(Storage, "slow"), DiskStorage)
        container.add_component(BindKey(Storage, "fast"), MemoryStorage)
        container.add_component(QualifiedUploader)

        assert isinstance(container.get_component(QualifiedUploader).storage, MemoryStorage)

    def test_unqualified_registration_still_matches(self, container: Container) -> None:
        container.add_component(BindKey(Storage, "slow"), DiskStorage)
        container.add_component("plain", MemoryStorage)
        container.add_component(QualifiedUploader)

        assert isinstance(container.get_component(QualifiedUploader).storage, MemoryStorage)

    def test_get_component_with_qualifier(self, container: Container) -> None:
        container.add_component(BindKey(Storage, "slow"), DiskStorage)
        container.add_component(BindKey(Storage, "fast"), MemoryStorage)

        assert isinstance(container.get_component(Storage, qualifier="slow"), DiskStorage)

    def test_bind_key_lookup_by_key(self, container: Container) -> None:
        container.add_component(BindKey(Storage, "slow"), DiskStorage)

        assert isinstance(container.get_component(BindKey(Storage, "slow")), DiskStorage)


class TestExplicitKeys:
    def test_explicit_key_skips_type_matching(self, container: Container) -> None:
        container.add_component(DiskStorage)
        container.add_component("chosen", MemoryStorage)
        container.add_component(Uploader, Uploader, ComponentParameter("chosen"))

        assert isinstance(container.get_component(Uploader).storage, MemoryStorage)

    def test_explicit_key_is_looked_up_in_parent(self, container: Container, child: Container) -> None:
        container.add_component("chosen", MemoryStorage)
        child.add_component(Uploader, Uploader, ComponentParameter("chosen"))

        assert child.get_component(Uploader).storage is container.get_component("chosen")

    def test_missing_explicit_key_is_unsatisfied(self, container: Container) -> None:
        container.add_component(DiskStorage)
        container.add_component(Uploader, Uploader, ComponentParameter("absent"))

        with pytest.raises(NestwireUnsatisfiedDependencyError):
            container.get_component(Uploader)


class TestCycles:
    def test_mutual_dependency_is_cyclic(self, container: Container) -> None:
        container.add_component(CycleA)
        container.add_component(CycleB)

        with pytest.raises(NestwireCyclicDependencyError) as exc_info:
            container.get_component(CycleA)

        assert exc_info.value.chain == (CycleA, CycleB, CycleA)

    def test_failed_cycle_leaves_nothing_memoized(self, container: Container) -> None:
        container.add_component(CycleA)
        container.add_component(CycleB)

        with pytest.raises(NestwireCyclicDependencyError):
            container.get_component(CycleA)

        assert container.ordered_adapters == ()

    def test_cycle_is_rescued_by_parent(self, container: Container, child: Container) -> None:
        placeholder = CycleA.__new__(CycleA)
        container.add_component("placeholder-a", placeholder)
        container.add_component(CycleB, CycleB, ComponentParameter("placeholder-a"))
        child.add_component(CycleA)
        child.add_component(CycleB)

        b = child.get_component(CycleB)

        assert b.a is child.get_component(CycleA)
        assert b.a.b is container.get_component(CycleB)
        assert b.a.b.a is placeholder

    def test_cycle_without_parent_candidate_is_reraised(self, container: Container, child: Container) -> None:
        child.add_component(CycleA)
        child.add_component(CycleB)

        with pytest.raises(NestwireCyclicDependencyError):
            child.get_component(CycleA)

    def test_child_can_decorate_parent_component_of_same_key(self, container: Container, child: Container) -> None:
        container.add_component(Greeter)
        child.add_component(Greeter, LoudGreeter)

        greeter = child.get_component(Greeter)

        assert isinstance(greeter, LoudGreeter)
        assert greeter.inner is container.get_component(Greeter)
        assert greeter.greet() == "HELLO"


class _FallbackMonitor(NullComponentMonitor):
    def __init__(self, fallbacks: dict[Any, Any]) -> None:
        self.fallbacks = fallbacks
        self.misses: list[Any] = []

    def no_component_found(self, container: ContainerView, key: Any) -> Any | None:
        self.misses.append(key)
        return self.fallbacks.get(key)


class TestLateInstances:
    def test_monitor_supplies_missing_key(self) -> None:
        monitor = _FallbackMonitor({"answer": 42})
        container = Container(monitor=monitor)

        assert container.get_component("answer") == 42
        assert "answer" in monitor.misses

    def test_monitor_supplies_missing_dependency(self) -> None:
        storage = MemoryStorage()
        container = Container(monitor=_FallbackMonitor({Storage: storage}))
        container.add_component(Uploader)

        assert container.get_component(Uploader).storage is storage

    def test_late_instances_are_not_tracked_for_lifecycle(self) -> None:
        container = Container(monitor=_FallbackMonitor({"answer": 42}))

        container.get_component("answer")

        assert container.ordered_adapters == ()
        assert container.adapters == ()
