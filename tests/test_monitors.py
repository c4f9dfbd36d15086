"""Tests for component monitors."""

import logging
from typing import Any

import pytest

from nestwire import (
    Characteristics,
    ComponentAdapter,
    Container,
    ContainerView,
    ForwardingComponentMonitor,
    LoggingComponentMonitor,
    NullComponentMonitor,
)


class Widget:
    pass


class Exploding:
    def __init__(self) -> None:
        raise ValueError("kaboom")


class Engine:
    def start(self) -> None:
        pass

    def stop(self) -> None:
        raise RuntimeError("stuck")


class RecordingMonitor(ForwardingComponentMonitor):
    def __init__(self, delegate: Any = None) -> None:
        super().__init__(delegate)
        self.events: list[tuple[Any, ...]] = []

    def instantiated(
        self,
        container: ContainerView | None,
        adapter: ComponentAdapter,
        instance: Any,
        duration: float,
    ) -> None:
        self.events.append(("instantiated", adapter.key))
        super().instantiated(container, adapter, instance, duration)

    def invoked(self, method_name: str, instance: Any, duration: float) -> None:
        self.events.append(("invoked", method_name, type(instance)))
        super().invoked(method_name, instance, duration)

    def lifecycle_invocation_failed(self, method_name: str, instance: Any, error: BaseException) -> None:
        self.events.append(("failed", method_name, str(error)))

    def changed_behavior(self, adapter: Any) -> Any:
        self.events.append(("behavior", adapter.describe()))
        return super().changed_behavior(adapter)


class TestLoggingComponentMonitor:
    def test_instantiation_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        container = Container(monitor=LoggingComponentMonitor(), name="logged")
        container.add_component(Widget)

        with caplog.at_level(logging.DEBUG, logger="nestwire"):
            container.get_component(Widget)

        messages = [record.getMessage() for record in caplog.records if record.name == "nestwire._internal.monitor"]
        assert "Instantiating ConstructorInjector-Widget" in messages
        assert any(message.startswith("Instantiated ConstructorInjector-Widget in") for message in messages)

    def test_custom_logger_is_used(self, caplog: pytest.LogCaptureFixture) -> None:
        log = logging.getLogger("app.di")
        container = Container(monitor=LoggingComponentMonitor(log=log), name="logged")

        with caplog.at_level(logging.DEBUG, logger="app.di"):
            container.get_component("missing")

        assert [record.getMessage() for record in caplog.records if record.name == "app.di"] == [
            "No component found for 'missing' in logged:0<|",
        ]

    def test_failed_instantiation_is_logged_and_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        container = Container(monitor=LoggingComponentMonitor(), name="logged")
        container.add_component(Exploding)

        with caplog.at_level(logging.WARNING, logger="nestwire"), pytest.raises(ValueError, match="kaboom"):
            container.get_component(Exploding)

        assert any("Instantiation of ConstructorInjector-Exploding failed" in r.getMessage() for r in caplog.records)


class TestCustomMonitors:
    def test_monitor_sees_instantiations_and_behaviors(self) -> None:
        monitor = RecordingMonitor()
        container = Container(monitor=monitor)
        container.add_component(Widget)

        container.get_component(Widget)

        assert monitor.events == [
            ("behavior", "Cached:ConstructorInjector-Widget"),
            ("instantiated", Widget),
        ]

    def test_monitor_can_swallow_lifecycle_failures(self) -> None:
        monitor = RecordingMonitor()
        container = Container(monitor=monitor, flags=Characteristics.CACHE)
        container.add_component(Engine)

        container.start()
        container.stop()

        assert ("invoked", "start", Engine) in monitor.events
        assert ("failed", "stop", "stuck") in monitor.events

    def test_forwarding_monitor_reaches_delegate(self) -> None:
        recording = RecordingMonitor()
        container = Container(monitor=ForwardingComponentMonitor(recording))
        container.add_component(Widget)

        container.get_component(Widget)

        assert ("instantiated", Widget) in recording.events

    def test_null_monitor_finds_nothing(self, container: Container) -> None:
        assert NullComponentMonitor().no_component_found(container, "key") is None


class TestChangeMonitor:
    def test_change_monitor_returns_previous(self, container: Container) -> None:
        previous = container.current_monitor()
        replacement = RecordingMonitor()

        assert container.change_monitor(replacement) is previous
        assert container.current_monitor() is replacement

    def test_change_monitor_reaches_adapters_and_children(self, container: Container, child: Container) -> None:
        container.add_component(Widget)
        child.add_component(Engine)
        replacement = RecordingMonitor()

        container.change_monitor(replacement)
        container.get_component(Widget)
        container.start()

        adapter = container.find_adapter(Widget)
        assert adapter is not None
        assert adapter.current_monitor() is replacement
        assert child.current_monitor() is replacement
        assert ("instantiated", Widget) in replacement.events
        assert ("invoked", "start", Engine) in replacement.events
