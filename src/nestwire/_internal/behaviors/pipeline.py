from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nestwire._internal.behaviors.automating import Automated
from nestwire._internal.behaviors.caching import Cached
from nestwire._internal.behaviors.guarding import Guarded
from nestwire._internal.behaviors.hiding import HiddenImplementation
from nestwire._internal.behaviors.intercepting import Intercepted
from nestwire._internal.behaviors.locking import Locked, Synchronized
from nestwire._internal.behaviors.property_applying import PropertyApplicator
from nestwire._internal.behaviors.static_injection import StaticInjected, StaticsInitializedSet
from nestwire._internal.behaviors.storing import Stored, ThreadScopedStore
from nestwire._internal.characteristics import (
    AUTOMATIC_KEY,
    CACHE_KEY,
    ENABLE_CIRCULAR_KEY,
    FALSE,
    GUARD_KEY,
    HIDE_IMPL_KEY,
    INTERCEPT_KEY,
    LOCK_KEY,
    PROPERTY_APPLYING_KEY,
    STORE_KEY,
    SYNCHRONIZE_KEY,
    consume,
)
from nestwire._internal.injectors import ConstructorInjection, InjectionFactory

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter
    from nestwire._internal.lifecycle import LifecycleStrategy
    from nestwire._internal.monitor import ComponentMonitor
    from nestwire._internal.parameters import Parameter

logger = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class StepContext:
    """Working state of one registration passing through the pipeline."""

    flags: dict[str, Any]
    store: ThreadScopedStore


@dataclass(frozen=True, slots=True)
class BehaviorStep:
    """One tagged pipeline slot: consumes its flags and wraps, or passes through."""

    name: str
    apply: Callable[[StepContext, ComponentAdapter], ComponentAdapter]


def _synchronizing(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, SYNCHRONIZE_KEY):
        return Synchronized(adapter)
    return adapter


def _locking(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, LOCK_KEY):
        return Locked(adapter)
    return adapter


def _property_applying(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, PROPERTY_APPLYING_KEY):
        return PropertyApplicator(adapter)
    return adapter


def _automating(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, AUTOMATIC_KEY):
        return Automated(adapter)
    return adapter


def _hiding(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, HIDE_IMPL_KEY, FALSE):
        return adapter
    if consume(context.flags, INTERCEPT_KEY):
        # Interception implies hiding.
        consume(context.flags, HIDE_IMPL_KEY)
        return Intercepted(adapter)
    if consume(context.flags, HIDE_IMPL_KEY):
        return HiddenImplementation(adapter)
    return adapter


def _caching(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    if consume(context.flags, STORE_KEY):
        context.flags.pop(CACHE_KEY, None)
        return Stored(adapter, context.store)
    if consume(context.flags, CACHE_KEY, FALSE):
        return adapter
    if consume(context.flags, CACHE_KEY):
        return Cached(adapter)
    return adapter


def _guarding(context: StepContext, adapter: ComponentAdapter) -> ComponentAdapter:
    guard = context.flags.pop(GUARD_KEY, None)
    if guard is not None:
        return Guarded(adapter, guard)
    return adapter


SYNCHRONIZING = BehaviorStep("synchronizing", _synchronizing)
LOCKING = BehaviorStep("locking", _locking)
PROPERTY_APPLYING = BehaviorStep("property-applying", _property_applying)
AUTOMATING = BehaviorStep("automating", _automating)
IMPLEMENTATION_HIDING = BehaviorStep("implementation-hiding", _hiding)
CACHING = BehaviorStep("caching", _caching)
GUARDING = BehaviorStep("guarding", _guarding)

# Innermost first.
CREATE_STEPS: tuple[BehaviorStep, ...] = (
    SYNCHRONIZING,
    LOCKING,
    PROPERTY_APPLYING,
    AUTOMATING,
    IMPLEMENTATION_HIDING,
    CACHING,
    GUARDING,
)
ADD_STEPS: tuple[BehaviorStep, ...] = (
    SYNCHRONIZING,
    IMPLEMENTATION_HIDING,
    CACHING,
    GUARDING,
)


def build_adapter(
    base: ComponentAdapter,
    steps: Sequence[BehaviorStep],
    context: StepContext,
    monitor: ComponentMonitor,
) -> ComponentAdapter:
    """Wrap base with every step whose flags are present, innermost first.

    Each new decorator is offered to ``monitor.changed_behavior``, which may
    wrap it further.
    """
    adapter = base
    for step in steps:
        wrapped = step.apply(context, adapter)
        if wrapped is not adapter:
            logger.debug("Applied %s step to %r", step.name, base)
            wrapped = monitor.changed_behavior(wrapped)
        adapter = wrapped
    return adapter


class AdaptingBehavior:
    """Component factory composing the behavior pipeline around base producers.

    One instance is shared by a container and all of its children. It owns the
    thread-scoped store used by ``Characteristics.STORE`` registrations and the
    set of classes whose static members were injected.

    Args:
        injection: Factory of base producers. Defaults to ``ConstructorInjection``.

    """

    def __init__(self, injection: InjectionFactory | None = None) -> None:
        self._injection: InjectionFactory = injection if injection is not None else ConstructorInjection()
        self._store = ThreadScopedStore()
        self._statics = StaticsInitializedSet()

    @property
    def store(self) -> ThreadScopedStore:
        return self._store

    @property
    def statics(self) -> StaticsInitializedSet:
        return self._statics

    def create_component_adapter(
        self,
        monitor: ComponentMonitor,
        lifecycle: LifecycleStrategy,
        flags: dict[str, Any],
        key: Any,
        implementation: Any,
        parameters: Sequence[Parameter] | None,
    ) -> ComponentAdapter:
        """Build the adapter for a class registration.

        Consumed flags are removed from ``flags``; the caller checks what remains.

        Args:
            monitor: Monitor of the registering container.
            lifecycle: Lifecycle strategy of the registering container.
            flags: Mutable working configuration for this registration.
            key: Registration key.
            implementation: Class to construct.
            parameters: Optional explicit constructor parameters.

        """
        adapter = self._injection.create_component_adapter(monitor, lifecycle, flags, key, implementation, parameters)
        if consume(flags, ENABLE_CIRCULAR_KEY):
            adapter = HiddenImplementation(adapter, lazy=True)
        context = StepContext(flags=flags, store=self._store)
        adapter = build_adapter(adapter, CREATE_STEPS, context, monitor)
        return StaticInjected(adapter, self._statics)

    def add_component_adapter(
        self,
        monitor: ComponentMonitor,
        lifecycle: LifecycleStrategy,
        flags: dict[str, Any],
        adapter: ComponentAdapter,
    ) -> ComponentAdapter:
        """Wrap an externally built adapter with the subset of behaviors that apply to it."""
        context = StepContext(flags=flags, store=self._store)
        return build_adapter(adapter, ADD_STEPS, context, monitor)

    def dispose(self) -> None:
        self._store.dispose()


__all__ = [
    "ADD_STEPS",
    "CREATE_STEPS",
    "AdaptingBehavior",
    "BehaviorStep",
    "StepContext",
    "build_adapter",
]
