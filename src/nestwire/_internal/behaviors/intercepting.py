from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nestwire._internal.adapters import describe_key
from nestwire._internal.behaviors.hiding import HiddenImplementation
from nestwire._internal.thread_map import PerThreadMap
from nestwire.exceptions import NestwireConfigurationError

if TYPE_CHECKING:
    from nestwire._internal.adapters import ComponentAdapter


@dataclass(slots=True)
class _InvocationState:
    vetoed: bool = False
    overridden: bool = False
    instance: Any = None
    original_return_value: Any = None


class InvocationController:
    """Per-thread control channel between interceptors and the intercepted call.

    The state is cleared at the start of every intercepted call. A pre-invocation
    hook calls ``veto`` to skip the real call and return its own result; a
    post-invocation hook calls ``override`` to replace the real result with its own.
    """

    def __init__(self) -> None:
        self._states: PerThreadMap[_InvocationState] = PerThreadMap(_InvocationState)

    def clear(self) -> None:
        self._states.set(_InvocationState())

    def veto(self) -> None:
        self._states.get().vetoed = True

    def override(self) -> None:
        self._states.get().overridden = True

    @property
    def is_vetoed(self) -> bool:
        return self._states.get().vetoed

    @property
    def is_overridden(self) -> bool:
        return self._states.get().overridden

    @property
    def instance(self) -> Any:
        """Return the real instance behind the current call."""
        return self._states.get().instance

    @property
    def original_return_value(self) -> Any:
        """Return what the real call returned, for post-invocation hooks."""
        return self._states.get().original_return_value

    def record_instance(self, instance: Any) -> None:
        self._states.get().instance = instance

    def record_return_value(self, value: Any) -> None:
        self._states.get().original_return_value = value


class Intercepted(HiddenImplementation):
    """Hidden implementation running pre- and post-invocation hooks per capability.

    A hook is any object implementing the intercepted methods it cares about;
    it is called with the same arguments as the real call. Methods it does not
    implement pass straight through.

    Examples:
        .. code-block:: python

            class AuditHook:
                def __init__(self, controller: InvocationController) -> None:
                    self.controller = controller

                def withdraw(self, amount: int) -> int:
                    if amount > 100:
                        self.controller.veto()
                    return 0


            intercepted = container.get_adapter(Account).find_adapter_of_type(Intercepted)
            intercepted.add_pre_invocation(Account, AuditHook(intercepted.controller))

    """

    descriptor = "Intercepted"

    def __init__(self, delegate: ComponentAdapter) -> None:
        super().__init__(delegate)
        self._pre: dict[type[Any], Any] = {}
        self._post: dict[type[Any], Any] = {}
        self._controller = InvocationController()

    @property
    def controller(self) -> InvocationController:
        return self._controller

    def add_pre_invocation(self, capability: type[Any], interceptor: Any) -> None:
        self._check_capability(capability)
        self._pre[capability] = interceptor

    def add_post_invocation(self, capability: type[Any], interceptor: Any) -> None:
        self._check_capability(capability)
        self._post[capability] = interceptor

    def invoke_method(
        self,
        instance: Any,
        capability: type[Any],
        name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        controller = self._controller
        controller.clear()
        controller.record_instance(instance)

        pre_hook = getattr(self._pre.get(capability), name, None)
        if pre_hook is not None:
            pre_result = pre_hook(*args, **kwargs)
            if controller.is_vetoed:
                return pre_result

        result = super().invoke_method(instance, capability, name, args, kwargs)
        controller.record_return_value(result)

        post_hook = getattr(self._post.get(capability), name, None)
        if post_hook is not None:
            post_result = post_hook(*args, **kwargs)
            if controller.is_overridden:
                return post_result
        return result

    def _check_capability(self, capability: type[Any]) -> None:
        if capability not in self.capabilities:
            msg = f"{capability!r} is not a capability of {describe_key(self.key)}."
            raise NestwireConfigurationError(msg)


__all__ = ["Intercepted", "InvocationController"]
