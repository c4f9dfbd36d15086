from __future__ import annotations

import logging
from enum import Enum

from nestwire.exceptions import NestwireIllegalLifecycleTransitionError

logger = logging.getLogger(__name__)


def _subject(container_name: str) -> str:
    return f"container {container_name!r}"


class LifecycleState(Enum):
    """Lifecycle phase of a container."""

    CONSTRUCTED = "constructed"
    STARTED = "started"
    STOPPED = "stopped"
    DISPOSED = "disposed"

    def __str__(self) -> str:
        return self.name


class LifecycleStateMachine:
    """Guard the legal lifecycle path of one container.

    The only legal path is ``CONSTRUCTED -> STARTED -> STOPPED -> STARTED ...``
    ending in ``DISPOSED``, which is absorbing. Each ``*ing`` method checks the
    transition and raises without changing state when it is illegal; the
    matching past-tense method records the new state once the work is done.
    """

    __slots__ = ("_state",)

    def __init__(self) -> None:
        self._state = LifecycleState.CONSTRUCTED

    @property
    def state(self) -> LifecycleState:
        return self._state

    def is_started(self) -> bool:
        return self._state is LifecycleState.STARTED

    def is_stopped(self) -> bool:
        return self._state is LifecycleState.STOPPED

    def is_disposed(self) -> bool:
        return self._state is LifecycleState.DISPOSED

    def starting(self, container_name: str) -> None:
        if self._state in (LifecycleState.CONSTRUCTED, LifecycleState.STOPPED):
            self._state = LifecycleState.STARTED
            logger.debug("Container %r started", container_name)
            return
        raise NestwireIllegalLifecycleTransitionError(_subject(container_name), self._state, "start")

    def stopping(self, container_name: str) -> None:
        if self._state is not LifecycleState.STARTED:
            raise NestwireIllegalLifecycleTransitionError(_subject(container_name), self._state, "stop")

    def stopped(self) -> None:
        self._state = LifecycleState.STOPPED

    def disposing(self, container_name: str) -> None:
        if self._state not in (LifecycleState.STOPPED, LifecycleState.CONSTRUCTED):
            raise NestwireIllegalLifecycleTransitionError(_subject(container_name), self._state, "dispose")

    def disposed(self) -> None:
        self._state = LifecycleState.DISPOSED

    def removing_component(self, container_name: str) -> None:
        if self._state in (LifecycleState.STARTED, LifecycleState.DISPOSED):
            raise NestwireIllegalLifecycleTransitionError(
                _subject(container_name),
                self._state,
                "remove a component from",
            )


__all__ = ["LifecycleState", "LifecycleStateMachine"]
