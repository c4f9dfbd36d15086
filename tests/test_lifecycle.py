"""Tests for container and component lifecycle."""

import logging

import pytest

from nestwire import (
    Container,
    LazyStartableLifecycleStrategy,
    LifecycleState,
    NestwireIllegalLifecycleTransitionError,
    NestwireLifecycleError,
)


class EventLog:
    def __init__(self) -> None:
        self.events: list[str] = []


class Database:
    def __init__(self, log: EventLog) -> None:
        self.log = log

    def start(self) -> None:
        self.log.events.append("start database")

    def stop(self) -> None:
        self.log.events.append("stop database")

    def dispose(self) -> None:
        self.log.events.append("dispose database")


class Service:
    def __init__(self, log: EventLog, db: Database) -> None:
        self.log = log
        self.db = db

    def start(self) -> None:
        self.log.events.append("start service")

    def stop(self) -> None:
        self.log.events.append("stop service")

    def dispose(self) -> None:
        self.log.events.append("dispose service")


class BrokenOnStop:
    def start(self) -> None:
        pass

    def stop(self) -> None:
        raise RuntimeError("boom")


class FailsOnStart:
    def start(self) -> None:
        raise ValueError("nope")

    def stop(self) -> None:
        pass


class BrokenResource:
    def dispose(self) -> None:
        raise RuntimeError(type(self).__name__)


class ChildResource(BrokenResource):
    pass


class RootResource(BrokenResource):
    pass


@pytest.fixture()
def log(container: Container) -> EventLog:
    log = EventLog()
    container.add_component(log)
    return log


class TestStateMachine:
    def test_new_container_is_constructed(self, container: Container) -> None:
        assert container.lifecycle_state is LifecycleState.CONSTRUCTED

    def test_stop_before_start_is_rejected(self, container: Container) -> None:
        with pytest.raises(NestwireIllegalLifecycleTransitionError, match="Cannot stop container 'root'"):
            container.stop()

        assert container.lifecycle_state is LifecycleState.CONSTRUCTED

    def test_double_start_is_rejected(self, container: Container) -> None:
        container.start()

        with pytest.raises(NestwireIllegalLifecycleTransitionError, match="in state STARTED"):
            container.start()

    def test_dispose_without_start(self, container: Container) -> None:
        container.dispose()

        assert container.lifecycle_state is LifecycleState.DISPOSED

    def test_disposed_is_final(self, container: Container) -> None:
        container.dispose()

        with pytest.raises(NestwireIllegalLifecycleTransitionError):
            container.dispose()
        with pytest.raises(NestwireIllegalLifecycleTransitionError):
            container.start()
        assert container.lifecycle_state is LifecycleState.DISPOSED

    def test_dispose_of_started_container_stops_first(self, container: Container, log: EventLog) -> None:
        container.add_component(Database)
        container.start()

        container.dispose()

        assert log.events == ["start database", "stop database", "dispose database"]
        assert container.lifecycle_state is LifecycleState.DISPOSED

    def test_removal_is_rejected_while_started(self, container: Container, log: EventLog) -> None:
        container.add_component(Database)
        container.start()

        with pytest.raises(NestwireIllegalLifecycleTransitionError, match="remove a component from"):
            container.remove_component(Database)


class TestOrdering:
    def test_start_follows_production_order_and_stop_reverses_it(
        self,
        container: Container,
        log: EventLog,
    ) -> None:
        container.add_component(Service)
        container.add_component(Database)

        container.start()
        container.stop()
        container.dispose()

        assert log.events == [
            "start database",
            "start service",
            "stop service",
            "stop database",
            "dispose service",
            "dispose database",
        ]

    def test_restart_starts_components_again(self, container: Container, log: EventLog) -> None:
        container.add_component(Database)

        container.start()
        container.stop()
        container.start()

        assert log.events == ["start database", "stop database", "start database"]
        assert container.lifecycle_state is LifecycleState.STARTED

    def test_component_added_after_start_is_started(self, container: Container, log: EventLog) -> None:
        container.start()

        container.add_component(Database)

        assert log.events == ["start database"]

    def test_memoized_component_rejects_second_start(self, container: Container, log: EventLog) -> None:
        container.add_component(Database)
        container.start()
        adapter = container.find_adapter(Database)
        assert adapter is not None

        with pytest.raises(NestwireIllegalLifecycleTransitionError, match="component Database"):
            adapter.start(container)

    def test_plain_components_are_not_started(self, container: Container, log: EventLog) -> None:
        container.start()

        assert container.get_component(EventLog) is log
        assert log.events == []


class TestChildren:
    def test_children_follow_parent_lifecycle(self, container: Container, child: Container, log: EventLog) -> None:
        child.add_component(Database)

        container.start()
        assert child.lifecycle_state is LifecycleState.STARTED
        assert log.events == ["start database"]

        container.stop()
        assert child.lifecycle_state is LifecycleState.STOPPED

        container.dispose()
        assert child.lifecycle_state is LifecycleState.DISPOSED
        assert log.events == ["start database", "stop database", "dispose database"]

    def test_child_added_unstarted_is_not_stopped(self, container: Container) -> None:
        container.start()
        orphan = Container(name="orphan")
        container.add_child_container(orphan)

        container.stop()

        assert orphan.lifecycle_state is LifecycleState.CONSTRUCTED

    def test_already_disposed_child_is_skipped(self, container: Container, child: Container) -> None:
        child.dispose()

        container.dispose()

        assert container.lifecycle_state is LifecycleState.DISPOSED


class TestFailures:
    def test_failing_start_is_wrapped(self, container: Container) -> None:
        container.add_component(FailsOnStart)

        with pytest.raises(NestwireLifecycleError, match="start\\(\\) failed on FailsOnStart: nope") as exc_info:
            container.start()

        assert exc_info.value.method == "start"
        assert isinstance(exc_info.value.instance, FailsOnStart)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_stop_continues_after_child_failure(
        self,
        container: Container,
        child: Container,
        log: EventLog,
    ) -> None:
        child.add_component(BrokenOnStop)
        container.add_component(Database)
        container.start()

        with pytest.raises(NestwireLifecycleError, match="boom") as exc_info:
            container.stop()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "stop database" in log.events
        assert child.lifecycle_state is LifecycleState.STOPPED
        assert container.lifecycle_state is LifecycleState.STOPPED

    def test_dispose_reports_first_failure_and_logs_the_rest(
        self,
        container: Container,
        child: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        child.add_component(ChildResource)
        container.add_component(RootResource)
        child.get_component(ChildResource)
        container.get_component(RootResource)

        with caplog.at_level(logging.WARNING, logger="nestwire"), pytest.raises(
            NestwireLifecycleError,
            match="ChildResource",
        ):
            container.dispose()

        assert container.lifecycle_state is LifecycleState.DISPOSED
        assert child.lifecycle_state is LifecycleState.DISPOSED
        assert any("RootResource" in record.getMessage() for record in caplog.records)


class TestStrategies:
    def test_lazy_strategy_starts_on_first_retrieval(self) -> None:
        container = Container(lifecycle=LazyStartableLifecycleStrategy(), name="lazy")
        log = EventLog()
        container.add_component(log)
        container.add_component(Database)

        container.start()
        assert log.events == []

        container.get_component(Database)
        container.get_component(Database)
        assert log.events == ["start database"]

        container.stop()
        assert log.events == ["start database", "stop database"]

    def test_lazy_registration_after_start_waits_for_retrieval(self) -> None:
        container = Container(lifecycle=LazyStartableLifecycleStrategy(), name="lazy")
        log = EventLog()
        container.add_component(log)
        container.start()

        container.add_component(Database)
        assert log.events == []

        container.get_component(Database)
        container.stop()
        container.dispose()
        assert log.events == ["start database", "stop database", "dispose database"]

    def test_registration_after_start_is_stopped_and_disposed(self, container: Container, log: EventLog) -> None:
        container.start()

        container.add_component(Database)
        container.stop()
        container.dispose()

        assert log.events == ["start database", "stop database", "dispose database"]

    def test_context_manager_starts_and_disposes(self) -> None:
        log = EventLog()

        with Container(name="scoped") as container:
            container.add_component(log)
            container.add_component(Database)
            container.get_component(Database)
            assert container.lifecycle_state is LifecycleState.STARTED

        assert container.lifecycle_state is LifecycleState.DISPOSED
        assert log.events == ["start database", "stop database", "dispose database"]
