"""Tests for the exception hierarchy and its messages."""

import abc

import pytest

from nestwire import (
    Characteristics,
    Container,
    LifecycleState,
    NestwireAmbiguousResolutionError,
    NestwireCompositionError,
    NestwireConfigurationError,
    NestwireCyclicDependencyError,
    NestwireDuplicateKeyError,
    NestwireError,
    NestwireGuardError,
    NestwireIllegalLifecycleTransitionError,
    NestwireLifecycleError,
    NestwireNotConcreteTypeError,
    NestwireThreadCacheInvalidatedError,
    NestwireUnprocessedConfigurationError,
    NestwireUnsatisfiedDependencyError,
)


class Service:
    pass


class First:
    pass


class Second:
    pass


class NeedsBoth:
    def __init__(self, first: First, second: Second) -> None:
        self.first = first
        self.second = second


class Resource:
    pass


@pytest.mark.parametrize(
    "error_type",
    [
        NestwireAmbiguousResolutionError,
        NestwireCompositionError,
        NestwireConfigurationError,
        NestwireCyclicDependencyError,
        NestwireGuardError,
        NestwireIllegalLifecycleTransitionError,
        NestwireLifecycleError,
        NestwireThreadCacheInvalidatedError,
        NestwireUnsatisfiedDependencyError,
    ],
)
def test_every_error_is_a_nestwire_error(error_type: type[Exception]) -> None:
    assert issubclass(error_type, NestwireError)


@pytest.mark.parametrize(
    "error_type",
    [NestwireDuplicateKeyError, NestwireNotConcreteTypeError, NestwireUnprocessedConfigurationError],
)
def test_registration_errors_are_composition_errors(error_type: type[Exception]) -> None:
    assert issubclass(error_type, NestwireCompositionError)


class TestNestwireDuplicateKeyError:
    def test_raises_on_second_registration(self, container: Container) -> None:
        container.add_component(Service)

        with pytest.raises(NestwireDuplicateKeyError) as exc_info:
            container.add_component(Service)

        assert exc_info.value.key is Service
        assert str(exc_info.value) == "Duplicate key Service already registered in this container."

    def test_string_keys_are_quoted(self, container: Container) -> None:
        container.add_component("db-url", "sqlite://")

        with pytest.raises(NestwireDuplicateKeyError, match="Duplicate key 'db-url'"):
            container.add_component("db-url", "postgres://")


class TestNestwireUnprocessedConfigurationError:
    def test_lists_the_leftover_flags(self, container: Container) -> None:
        with pytest.raises(NestwireUnprocessedConfigurationError) as exc_info:
            container.add_component(Service, flags={"made-up": "true"})

        assert exc_info.value.flags == {"made-up": "true"}
        assert container.find_adapter(Service) is None


class TestNestwireNotConcreteTypeError:
    def test_abstract_class_is_rejected(self, container: Container) -> None:
        class Port(abc.ABC):
            @abc.abstractmethod
            def send(self) -> None: ...

        with pytest.raises(NestwireNotConcreteTypeError, match="Port is not a concrete class") as exc_info:
            container.add_component(Port)

        assert exc_info.value.implementation is Port


class TestNestwireUnsatisfiedDependencyError:
    def test_names_every_missing_dependency(self, container: Container) -> None:
        container.add_component(NeedsBoth)

        with pytest.raises(NestwireUnsatisfiedDependencyError) as exc_info:
            container.get_component(NeedsBoth)

        assert exc_info.value.unsatisfied == (First, Second)
        assert str(exc_info.value) == "NeedsBoth has unsatisfied dependencies: First, Second."

    def test_defaults_fill_missing_dependencies(self, container: Container) -> None:
        class Cache:
            pass

        class WithDefault:
            def __init__(self, optional: Cache | None = None) -> None:
                self.optional = optional

        container.add_component(WithDefault)

        assert container.get_component(WithDefault).optional is None

    def test_verify_reports_without_producing(self, container: Container) -> None:
        built: list[object] = []

        class Missing:
            pass

        class NeedsMissing:
            def __init__(self, missing: Missing) -> None:
                built.append(self)

        container.add_component(NeedsMissing)

        with pytest.raises(NestwireUnsatisfiedDependencyError):
            container.verify()
        assert built == []


class TestNestwireAmbiguousResolutionError:
    def test_message_lists_candidates(self) -> None:
        error = NestwireAmbiguousResolutionError(Service, [int, str])

        assert str(error) == "Ambiguous resolution of Service: candidates are int, str."
        assert error.candidates == (int, str)


class TestNestwireCyclicDependencyError:
    def test_message_shows_the_path(self) -> None:
        error = NestwireCyclicDependencyError([First, Second, First])

        assert str(error) == "Cyclic dependency detected: First -> Second -> First."


class TestNestwireIllegalLifecycleTransitionError:
    def test_keeps_state_and_action(self, container: Container) -> None:
        with pytest.raises(NestwireIllegalLifecycleTransitionError) as exc_info:
            container.stop()

        assert exc_info.value.state is LifecycleState.CONSTRUCTED
        assert exc_info.value.action == "stop"
        assert str(exc_info.value) == "Cannot stop container 'root' in state CONSTRUCTED."


class TestNestwireLifecycleError:
    def test_wraps_the_original_failure(self) -> None:
        resource = Resource()
        cause = OSError("disk gone")

        error = NestwireLifecycleError("dispose", resource, cause)

        assert error.method == "dispose"
        assert error.instance is resource
        assert str(error) == "dispose() failed on Resource: disk gone"


class TestNestwireGuardError:
    def test_guard_error_names_guard_and_component(self, container: Container) -> None:
        container.add_config("maintenance-off", value=False)
        container.add_component(Service, flags=Characteristics.guard("maintenance-off"))

        with pytest.raises(NestwireGuardError, match="'maintenance-off' rejected production of Service"):
            container.get_component(Service)
