from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, overload

from nestwire._internal.adapters import (
    BoundAdapter,
    ComponentAdapter,
    ComponentLifecycle,
    InstanceAdapter,
    LateInstanceAdapter,
    MonitorCapable,
    describe_key,
)
from nestwire._internal.behaviors.pipeline import AdaptingBehavior
from nestwire._internal.characteristics import (
    NONE_KEY,
    STATIC_INJECTION_KEY,
    USE_NAMES_KEY,
    Characteristics,
    Flags,
    consume,
    is_present,
    merge_flags,
)
from nestwire._internal.container_interface import ContainerView, InjectInto
from nestwire._internal.converters import Converters
from nestwire._internal.dependencies import DependencyMetadata
from nestwire._internal.immutable_container import ImmutableContainer
from nestwire._internal.injectors import ProviderAdapter
from nestwire._internal.lifecycle import StartableLifecycleStrategy
from nestwire._internal.lifecycle_state import LifecycleState, LifecycleStateMachine
from nestwire._internal.monitor import NullComponentMonitor
from nestwire._internal.parameters import factory_object
from nestwire._internal.resolver import ComponentResolver, qualifies, satisfies
from nestwire._internal.type_checks import is_runtime_class
from nestwire.exceptions import (
    NestwireCompositionError,
    NestwireCyclicDependencyError,
    NestwireDuplicateKeyError,
    NestwireUnprocessedConfigurationError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from typing_extensions import Self

    from nestwire._internal.lifecycle import LifecycleStrategy
    from nestwire._internal.monitor import ComponentMonitor
    from nestwire._internal.parameters import Parameter

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()
_resolver = ComponentResolver()


def _run_phases(container_name: str, *phases: Callable[[], object]) -> None:
    """Run every teardown phase, then re-raise the first failure seen."""
    first_error: Exception | None = None
    for phase in phases:
        try:
            phase()
        except Exception as error:  # noqa: BLE001
            if first_error is None:
                first_error = error
            else:
                logger.warning("Further teardown failure in %r: %r", container_name, error)
    if first_error is not None:
        raise first_error


class Container(ContainerView):
    """Hierarchical container registering, wiring and managing components.

    Registrations pass through the component factory's behavior pipeline and
    are stored under a key unique within this container. Lookups by key or by
    type consult this container first and its parent chain next. The
    container records the order in which components are first produced, then
    stops and disposes them in exactly the reverse order.

    Args:
        parent: Optional parent; children see it through an ``ImmutableContainer``.
        component_factory: Pipeline used for registrations. Defaults to ``AdaptingBehavior``.
        lifecycle: Strategy deciding which components are started, stopped and disposed.
        monitor: Observer notified about instantiations and lifecycle invocations.
        flags: Default flags merged into every registration.
        name: Name used in logs, errors and ``repr``.

    Examples:
        .. code-block:: python

            container = Container()
            container.add_component(Database)
            container.add_component(UserRepository)

            with container:
                repository = container.get_component(UserRepository)

    """

    __slots__ = (
        "_adapters",
        "_by_key",
        "_children",
        "_component_factory",
        "_converters",
        "_flags",
        "_lifecycle",
        "_lock",
        "_monitor",
        "_name",
        "_ordered",
        "_parent",
        "_started_children",
        "_state",
    )

    def __init__(
        self,
        parent: ContainerView | None = None,
        *,
        component_factory: AdaptingBehavior | None = None,
        lifecycle: LifecycleStrategy | None = None,
        monitor: ComponentMonitor | None = None,
        flags: Flags | None = Characteristics.CACHE,
        name: str | None = None,
    ) -> None:
        self._monitor: ComponentMonitor = monitor if monitor is not None else NullComponentMonitor()
        self._lifecycle: LifecycleStrategy = (
            lifecycle if lifecycle is not None else StartableLifecycleStrategy(self._monitor)
        )
        self._component_factory = component_factory if component_factory is not None else AdaptingBehavior()
        self._parent: ImmutableContainer | None = ImmutableContainer(parent) if parent is not None else None
        self._flags = merge_flags(flags)
        self._name = name if name is not None else f"Container@{id(self):x}"
        self._converters = parent.converters if parent is not None else Converters()

        self._lock = threading.RLock()
        self._state = LifecycleStateMachine()
        self._adapters: list[ComponentAdapter] = []
        self._by_key: dict[Any, ComponentAdapter] = {}
        # Order of first successful production, used reversed for teardown.
        self._ordered: list[ComponentAdapter] = []
        self._children: list[Container] = []
        self._started_children: set[int] = set()

    # region Registration

    def add_component(
        self,
        key: Any,
        implementation_or_instance: Any = _MISSING,
        *parameters: Parameter,
        flags: Flags | None = None,
    ) -> Self:
        """Register a class or an instance.

        Args:
            key: Registration key. A class given alone is registered under
                itself; any other object given alone is registered as an
                instance under its own type.
            implementation_or_instance: Class to construct, or an instance to
                return as is.
            *parameters: Explicit constructor parameters, matched positionally.
            flags: Extra flags merged over the container defaults.

        Returns:
            This container, for chaining.

        Raises:
            NestwireDuplicateKeyError: If key is already registered here.
            NestwireUnprocessedConfigurationError: If some flags were not consumed.
            NestwireNotConcreteTypeError: If the class cannot be instantiated.

        """
        self._add_component(merge_flags(self._flags, flags), key, implementation_or_instance, parameters)
        return self

    def add_adapter(self, adapter: ComponentAdapter, flags: Flags | None = None) -> Self:
        """Register an adapter built outside the container.

        ``Characteristics.NONE`` stores the adapter as is; otherwise it passes
        through the behaviors that apply to prebuilt adapters.
        """
        self._add_adapter(merge_flags(self._flags, flags), adapter)
        return self

    def add_provider(self, provider: Any, key: Any = _MISSING, *, flags: Flags | None = None) -> Self:
        """Register a lazy factory.

        The provider is an object with a ``provide`` method or a plain callable.
        Its annotated return type is the default key, and its own parameters are
        injected like constructor parameters.
        """
        working = merge_flags(self._flags, flags)
        options: dict[str, Any] = {
            "monitor": self._monitor,
            "lifecycle": self._lifecycle,
            "use_names": is_present(working, USE_NAMES_KEY),
        }
        if key is _MISSING:
            adapter = ProviderAdapter(provider, **options)
        else:
            adapter = ProviderAdapter(provider, key, **options)
        self._add_adapter(working, adapter)
        return self

    def add_config(self, name: str, value: Any) -> Self:
        """Register a configuration value under name, bypassing every behavior.

        Values are found by constructor parameters of the same name when
        ``Characteristics.USE_NAMES`` is set. String values are converted to
        the parameter's annotated type.
        """
        self._check_key_free(name)
        self._insert(InstanceAdapter(name, value, self._lifecycle, self._monitor))
        return self

    def with_flags(self, *flags: Flags) -> FlaggedRegistration:
        """Return a one-shot registration view applying flags on top of the defaults.

        Examples:
            .. code-block:: python

                container.with_flags(Characteristics.NO_CACHE).add_component(RequestHandler)

        """
        return FlaggedRegistration(self, merge_flags(self._flags, *flags))

    def change(self, *flags: Flags) -> Self:
        """Merge flags into the defaults used by later registrations."""
        self._flags.update(merge_flags(*flags))
        return self

    def _add_component(
        self,
        working: dict[str, Any],
        key: Any,
        value: Any,
        parameters: Sequence[Parameter],
    ) -> None:
        if value is _MISSING:
            if is_runtime_class(key):
                self._register_class(working, key, key, parameters)
            else:
                self._add_adapter(working, InstanceAdapter(type(key), key, self._lifecycle, self._monitor))
            return
        if is_runtime_class(value):
            self._register_class(working, key, value, parameters)
            return
        if parameters:
            msg = f"Parameters were given for {describe_key(key)} but it is registered as an instance."
            raise NestwireCompositionError(msg)
        self._add_adapter(working, InstanceAdapter(key, value, self._lifecycle, self._monitor))

    def _register_class(
        self,
        working: dict[str, Any],
        key: Any,
        implementation: type[Any],
        parameters: Sequence[Parameter],
    ) -> None:
        self._check_key_free(key)
        adapter = self._component_factory.create_component_adapter(
            self._monitor,
            self._lifecycle,
            working,
            key,
            implementation,
            parameters or None,
        )
        self._strip_generic_flags(working)
        self._throw_if_flags_left(working)
        self._insert(adapter)

    def _add_adapter(self, working: dict[str, Any], adapter: ComponentAdapter) -> None:
        self._check_key_free(adapter.key)
        if not consume(working, NONE_KEY):
            adapter = self._component_factory.add_component_adapter(self._monitor, self._lifecycle, working, adapter)
            self._strip_generic_flags(working)
            self._throw_if_flags_left(working)
        self._insert(adapter)

    @staticmethod
    def _strip_generic_flags(working: dict[str, Any]) -> None:
        working.pop(USE_NAMES_KEY, None)
        working.pop(STATIC_INJECTION_KEY, None)

    @staticmethod
    def _throw_if_flags_left(working: dict[str, Any]) -> None:
        if working:
            raise NestwireUnprocessedConfigurationError(working)

    def _check_key_free(self, key: Any) -> None:
        if key in self._by_key:
            raise NestwireDuplicateKeyError(key)

    def _insert(self, adapter: ComponentAdapter) -> None:
        with self._lock:
            self._check_key_free(adapter.key)
            self._by_key[adapter.key] = adapter
            self._adapters.append(adapter)
            logger.debug("Registered %r in %r", adapter, self._name)
            if self._state.is_started():
                self._add_adapter_if_startable(adapter)
                if self._potentially_start_adapter(adapter):
                    self._add_ordered(adapter)

    # endregion Registration

    # region Removal

    def remove_component(self, key: Any) -> ComponentAdapter | None:
        """Unregister the component under key and return its adapter.

        Raises:
            NestwireIllegalLifecycleTransitionError: If the container is started or disposed.

        """
        self._state.removing_component(self._name)
        adapter = self._by_key.pop(key, None)
        if adapter is None:
            return None
        self._adapters = [item for item in self._adapters if item is not adapter]
        self._ordered = [item for item in self._ordered if item is not adapter]
        logger.debug("Removed %r from %r", adapter, self._name)
        return adapter

    def remove_component_by_instance(self, instance: Any) -> ComponentAdapter | None:
        """Unregister the component that produces instance, comparing by identity."""
        self._state.removing_component(self._name)
        for adapter in list(self._adapters):
            if self._get_instance(adapter, adapter.key, None) is instance:
                return self.remove_component(adapter.key)
        return None

    # endregion Removal

    # region Lookup

    @overload
    def get_component(self, key: type[T], *, qualifier: Any | None = None) -> T | None: ...

    @overload
    def get_component(self, key: Any, *, qualifier: Any | None = None) -> Any | None: ...

    def get_component(self, key: Any, *, qualifier: Any | None = None) -> Any | None:
        """Return the component registered under key, or resolved by type.

        Classes are resolved by assignability: the class used as a key wins,
        then the single assignable registration, then the parent chain. Any
        other key is looked up as is.

        Args:
            key: Registration key or type.
            qualifier: Narrows a type lookup to registrations under a ``BindKey``
                with this qualifier, or without any qualifier.

        Returns:
            The component, or ``None`` when nothing matches.

        Raises:
            NestwireAmbiguousResolutionError: If several registrations match a type.
            NestwireCyclicDependencyError: If the component transitively needs itself.
            NestwireUnsatisfiedDependencyError: If a constructor dependency is missing.

        """
        return self._resolve(key, None, qualifier)

    def get_component_into(self, key: Any, into: InjectInto | None) -> Any | None:
        return self._resolve(key, into, None)

    def get_components(self, component_type: type[T] = object) -> list[T]:  # type: ignore[assignment]
        """Return every local component assignable to component_type, in production order."""
        with self._lock:
            produced: dict[int, Any] = {}
            for adapter in list(self._adapters):
                if satisfies(component_type, adapter):
                    instance = self._get_instance(adapter, adapter.key, None)
                    produced[id(adapter)] = self._decorate_component(instance, adapter)
            return [produced[id(adapter)] for adapter in self._ordered if id(adapter) in produced]

    def find_adapter(self, key: Any) -> ComponentAdapter | None:
        adapter = self._by_key.get(key)
        if adapter is not None or self._parent is None:
            return adapter
        return self._bind(self._parent.find_adapter(key))

    def get_adapter(self, key: Any) -> ComponentAdapter | None:
        adapter = self.find_adapter(key)
        if adapter is None:
            adapter = self.late_adapter(key)
        return adapter

    def late_adapter(self, key: Any) -> ComponentAdapter | None:
        instance = self._monitor.no_component_found(self, key)
        if instance is None:
            return None
        logger.debug("Monitor supplied a late instance for %s in %r", describe_key(key), self._name)
        return LateInstanceAdapter(key, instance)

    def get_adapter_by_type(
        self,
        component_type: Any,
        *,
        name: str | None = None,
        qualifier: Any | None = None,
    ) -> ComponentAdapter | None:
        dependency = DependencyMetadata(name=name or "", declared_type=component_type, qualifier=qualifier)
        return self._bind(_resolver.adapter_for(self, None, dependency, use_names=name is not None))

    def get_adapters_by_type(
        self,
        component_type: Any,
        *,
        qualifier: Any | None = None,
    ) -> list[ComponentAdapter]:
        return [
            adapter
            for adapter in self._adapters
            if satisfies(component_type, adapter) and qualifies(adapter, qualifier)
        ]

    def _bind(self, adapter: ComponentAdapter | None) -> ComponentAdapter | None:
        # Parent-owned adapters keep the parent as their resolution context.
        if adapter is None or self._parent is None or isinstance(adapter, (BoundAdapter, LateInstanceAdapter)):
            return adapter
        if self._is_local(adapter):
            return adapter
        return BoundAdapter(adapter, self._parent)

    def _resolve(self, key: Any, into: InjectInto | None, qualifier: Any | None) -> Any | None:
        if qualifier is not None or is_runtime_class(key):
            adapter = self.get_adapter_by_type(key, qualifier=qualifier)
        else:
            adapter = self.get_adapter(key)
        if adapter is None:
            return None
        provider = factory_object(adapter, key) if is_runtime_class(key) else None
        if provider is not None:
            return provider
        instance = self._get_instance(adapter, key, into)
        return self._decorate_component(instance, adapter)

    def _is_local(self, adapter: ComponentAdapter) -> bool:
        return any(item is adapter for item in self._adapters)

    def _get_instance(self, adapter: ComponentAdapter, key: Any, into: InjectInto | None) -> Any | None:
        is_local = self._is_local(adapter)
        if is_local or isinstance(adapter, LateInstanceAdapter):
            try:
                instance = adapter.get_instance(self, into)
            except NestwireCyclicDependencyError:
                if self._parent is not None:
                    rescued = self._parent.get_component_into(adapter.key, into)
                    if rescued is not None:
                        logger.debug("Parent of %r rescued cyclic %r", self._name, adapter)
                        return rescued
                raise
            if is_local:
                self._add_ordered(adapter)
            return instance
        if self._parent is not None:
            return self._parent.get_component_into(key, into)
        return None

    def _add_ordered(self, adapter: ComponentAdapter) -> None:
        if not any(item is adapter for item in self._ordered):
            self._ordered.append(adapter)

    def _decorate_component(self, instance: Any, adapter: ComponentAdapter) -> Any:
        if (
            isinstance(adapter, ComponentLifecycle)
            and self._is_local(adapter)
            and self._lifecycle.called_after_construction(adapter)
            and not adapter.is_started()
        ):
            adapter.start(self)
        return instance

    @property
    def adapters(self) -> tuple[ComponentAdapter, ...]:
        return tuple(self._adapters)

    @property
    def ordered_adapters(self) -> tuple[ComponentAdapter, ...]:
        """Adapters in the order their components were first produced."""
        return tuple(self._ordered)

    @property
    def converters(self) -> Converters:
        return self._converters

    # endregion Lookup

    # region Tree

    @property
    def parent(self) -> ImmutableContainer | None:
        return self._parent

    @property
    def children(self) -> tuple[Container, ...]:
        return tuple(self._children)

    def make_child_container(self) -> Container:
        """Create a child sharing this container's pipeline, lifecycle strategy, monitor and defaults."""
        child = Container(
            self,
            component_factory=self._component_factory,
            lifecycle=self._lifecycle,
            monitor=self._monitor,
            flags=self._flags,
        )
        self.add_child_container(child)
        return child

    def add_child_container(self, child: Container) -> Self:
        """Track child so it is started, stopped and disposed with this container.

        Raises:
            NestwireCompositionError: If child is this container or one of its ancestors.

        """
        if child is self or self._has_ancestor(child):
            msg = f"Cannot add {child.name!r} as a child of {self._name!r}: it would close a cycle."
            raise NestwireCompositionError(msg)
        with self._lock:
            if any(item is child for item in self._children):
                return self
            self._children.append(child)
            if self._state.is_started() and child.lifecycle_state is LifecycleState.STARTED:
                self._started_children.add(id(child))
        logger.debug("Added child %r to %r", child.name, self._name)
        return self

    def remove_child_container(self, child: Container) -> bool:
        """Stop tracking child. Return whether it was tracked."""
        with self._lock:
            for index, item in enumerate(self._children):
                if item is child:
                    del self._children[index]
                    self._started_children.discard(id(child))
                    logger.debug("Removed child %r from %r", child.name, self._name)
                    return True
        return False

    def _has_ancestor(self, candidate: Container) -> bool:
        view: ContainerView | None = self._parent
        while view is not None:
            if view == candidate:
                return True
            view = view.parent
        return False

    # endregion Tree

    # region Lifecycle

    @property
    def lifecycle_state(self) -> LifecycleState:
        return self._state.state

    def start(self) -> None:
        """Start eager components, then every child.

        Raises:
            NestwireIllegalLifecycleTransitionError: If already started or disposed.

        """
        with self._lock:
            self._state.starting(self._name)
            self._start_adapters()
            self._started_children.clear()
            for child in list(self._children):
                self._started_children.add(id(child))
                child.start()

    def stop(self) -> None:
        """Stop started children, then local components in reverse production order.

        Every phase runs even when an earlier one failed; the first failure is re-raised.

        Raises:
            NestwireIllegalLifecycleTransitionError: If the container is not started.

        """
        with self._lock:
            self._state.stopping(self._name)
            _run_phases(self._name, self._stop_children, self._stop_adapters, self._state.stopped)
            logger.debug("Container %r stopped", self._name)

    def dispose(self) -> None:
        """Stop if started, then dispose children and local components.

        Raises:
            NestwireIllegalLifecycleTransitionError: If already disposed.

        """
        with self._lock:
            phases: list[Callable[[], object]] = []
            if self._state.is_started():
                phases.append(self.stop)
            else:
                self._state.disposing(self._name)
            phases.extend(
                (
                    self._dispose_children,
                    self._dispose_adapters,
                    self._component_factory.dispose,
                    self._state.disposed,
                ),
            )
            _run_phases(self._name, *phases)
            logger.debug("Container %r disposed", self._name)

    def _start_adapters(self) -> None:
        for adapter in list(self._adapters):
            self._add_adapter_if_startable(adapter)
        for adapter in list(self._ordered):
            self._potentially_start_adapter(adapter)

    def _add_adapter_if_startable(self, adapter: ComponentAdapter) -> None:
        if (
            isinstance(adapter, ComponentLifecycle)
            and adapter.component_has_lifecycle()
            and self._lifecycle.called_after_context_start(adapter)
        ):
            self._get_instance(adapter, adapter.key, None)

    def _potentially_start_adapter(self, adapter: ComponentAdapter) -> bool:
        if (
            isinstance(adapter, ComponentLifecycle)
            and self._lifecycle.called_after_context_start(adapter)
            and not adapter.is_started()
        ):
            adapter.start(self)
            return True
        return False

    def _stop_children(self) -> None:
        for child in list(self._children):
            if id(child) in self._started_children:
                child.stop()

    def _stop_adapters(self) -> None:
        for adapter in reversed(self._ordered):
            if isinstance(adapter, ComponentLifecycle) and adapter.component_has_lifecycle() and adapter.is_started():
                adapter.stop(self)

    def _dispose_children(self) -> None:
        for child in list(self._children):
            if child.lifecycle_state is not LifecycleState.DISPOSED:
                child.dispose()

    def _dispose_adapters(self) -> None:
        for adapter in reversed(self._ordered):
            if isinstance(adapter, ComponentLifecycle):
                adapter.dispose(self)

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    # endregion Lifecycle

    # region Monitoring

    def change_monitor(self, monitor: ComponentMonitor) -> ComponentMonitor:
        """Swap the monitor on this container, its adapters, its lifecycle strategy and its children.

        Returns:
            The previous monitor.

        """
        previous = self._monitor
        self._monitor = monitor
        for adapter in self._adapters:
            if isinstance(adapter, MonitorCapable):
                adapter.change_monitor(monitor)
        if isinstance(self._lifecycle, MonitorCapable):
            self._lifecycle.change_monitor(monitor)
        for child in self._children:
            child.change_monitor(monitor)
        return previous

    def current_monitor(self) -> ComponentMonitor:
        return self._monitor

    def verify(self) -> None:
        """Check every registration's dependencies without producing any component.

        Raises:
            NestwireUnsatisfiedDependencyError: For the first registration with a missing dependency.
            NestwireAmbiguousResolutionError: If a dependency matches several registrations.

        """
        for adapter in list(self._adapters):
            adapter.verify(self)

    @property
    def name(self) -> str:
        with self._lock:
            return self._name

    @name.setter
    def name(self, value: str) -> None:
        with self._lock:
            self._name = value

    def __repr__(self) -> str:
        parent = repr(self._parent) if self._parent is not None else "|"
        return f"{self._name}:{len(self._adapters)}<{parent}"

    # endregion Monitoring


class FlaggedRegistration:
    """One-shot registration view returned by ``Container.with_flags``.

    The first registration made through the view uses its flags; any later
    use raises, so flags never leak into unrelated registrations.
    """

    __slots__ = ("_container", "_flags", "_used")

    def __init__(self, container: Container, flags: dict[str, Any]) -> None:
        self._container = container
        self._flags = flags
        self._used = False

    def add_component(
        self,
        key: Any,
        implementation_or_instance: Any = _MISSING,
        *parameters: Parameter,
    ) -> Container:
        self._container._add_component(self._take(), key, implementation_or_instance, parameters)  # noqa: SLF001
        return self._container

    def add_adapter(self, adapter: ComponentAdapter) -> Container:
        self._container._add_adapter(self._take(), adapter)  # noqa: SLF001
        return self._container

    def add_provider(self, provider: Any, key: Any = _MISSING) -> Container:
        return self._container.add_provider(provider, key, flags=self._take())

    def with_flags(self, *flags: Flags) -> FlaggedRegistration:
        msg = "with_flags() views cannot be nested; pass every flag to a single with_flags() call."
        raise NestwireCompositionError(msg)

    def _take(self) -> dict[str, Any]:
        if self._used:
            msg = "A with_flags() view registers exactly one component."
            raise NestwireCompositionError(msg)
        self._used = True
        return dict(self._flags)


__all__ = ["Container", "FlaggedRegistration"]
