from nestwire._internal.adapters import (
    BoundAdapter,
    ComponentAdapter,
    ComponentLifecycle,
    InstanceAdapter,
    LateInstanceAdapter,
)
from nestwire._internal.behaviors.automating import Automated
from nestwire._internal.behaviors.base import Behavior
from nestwire._internal.behaviors.caching import Cached
from nestwire._internal.behaviors.guarding import Guarded
from nestwire._internal.behaviors.hiding import HiddenImplementation
from nestwire._internal.behaviors.intercepting import Intercepted, InvocationController
from nestwire._internal.behaviors.locking import Locked, Synchronized
from nestwire._internal.behaviors.pipeline import AdaptingBehavior
from nestwire._internal.behaviors.property_applying import PropertyApplicator
from nestwire._internal.behaviors.static_injection import StaticInjected
from nestwire._internal.behaviors.storing import Stored, StoreSnapshot, ThreadScopedStore
from nestwire._internal.characteristics import Characteristics
from nestwire._internal.container import Container, FlaggedRegistration
from nestwire._internal.container_interface import ContainerView, InjectInto
from nestwire._internal.immutable_container import ImmutableContainer
from nestwire._internal.injectors import ConstructorInjection, ConstructorInjector, ProviderAdapter
from nestwire._internal.lifecycle import (
    Disposable,
    LazyStartableLifecycleStrategy,
    LifecycleStrategy,
    NullLifecycleStrategy,
    Startable,
    StartableLifecycleStrategy,
)
from nestwire._internal.lifecycle_state import LifecycleState
from nestwire._internal.markers import BindKey, Qualifier, StaticMember
from nestwire._internal.monitor import (
    ComponentMonitor,
    ForwardingComponentMonitor,
    LoggingComponentMonitor,
    NullComponentMonitor,
)
from nestwire._internal.parameters import ComponentParameter, ConstantParameter
from nestwire.exceptions import (
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

__all__ = [
    "AdaptingBehavior",
    "Automated",
    "Behavior",
    "BindKey",
    "BoundAdapter",
    "Cached",
    "Characteristics",
    "ComponentAdapter",
    "ComponentLifecycle",
    "ComponentMonitor",
    "ComponentParameter",
    "ConstantParameter",
    "ConstructorInjection",
    "ConstructorInjector",
    "Container",
    "ContainerView",
    "Disposable",
    "FlaggedRegistration",
    "ForwardingComponentMonitor",
    "Guarded",
    "HiddenImplementation",
    "ImmutableContainer",
    "InjectInto",
    "InstanceAdapter",
    "Intercepted",
    "InvocationController",
    "LateInstanceAdapter",
    "LazyStartableLifecycleStrategy",
    "LifecycleState",
    "LifecycleStrategy",
    "Locked",
    "LoggingComponentMonitor",
    "NestwireAmbiguousResolutionError",
    "NestwireCompositionError",
    "NestwireConfigurationError",
    "NestwireCyclicDependencyError",
    "NestwireDuplicateKeyError",
    "NestwireError",
    "NestwireGuardError",
    "NestwireIllegalLifecycleTransitionError",
    "NestwireLifecycleError",
    "NestwireNotConcreteTypeError",
    "NestwireThreadCacheInvalidatedError",
    "NestwireUnprocessedConfigurationError",
    "NestwireUnsatisfiedDependencyError",
    "NullComponentMonitor",
    "NullLifecycleStrategy",
    "PropertyApplicator",
    "ProviderAdapter",
    "Qualifier",
    "Startable",
    "StartableLifecycleStrategy",
    "StaticInjected",
    "StaticMember",
    "StoreSnapshot",
    "Stored",
    "Synchronized",
    "ThreadScopedStore",
]
