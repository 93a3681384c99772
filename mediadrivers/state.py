"""Lifecycle state of a driver and the rules for moving between states."""

from __future__ import annotations

from enum import Enum
from typing import Callable, TypeVar

T = TypeVar("T")


class State(str, Enum):
    """Driver lifecycle state."""

    CLOSED = "closed"
    OPENED = "opened"
    RUNNING = "running"

    def __str__(self) -> str:
        return self.value


class StateError(RuntimeError):
    """A transition that the current state does not allow."""


class StateTracker:
    """Holds a driver state and applies guarded transitions."""

    def __init__(self, state: State = State.CLOSED) -> None:
        self.state = state

    def _check(self, next_state: State) -> None:
        if next_state is State.OPENED:
            if self.state is not State.CLOSED:
                raise StateError("invalid state: driver is already opened")
        elif next_state is State.RUNNING:
            if self.state is State.CLOSED:
                raise StateError("invalid state: driver is closed")
            if self.state is State.RUNNING:
                raise StateError("invalid state: driver is already running")
        elif next_state is not State.CLOSED:
            raise StateError(f"invalid state: unknown state {next_state!r}")

    def update(self, next_state: State, action: Callable[[], T]) -> T:
        """Run *action* and move to *next_state* if it succeeds.

        The transition is checked first; if it is not allowed, or the action
        raises, the state stays unchanged. Returns what the action returned.
        """
        self._check(next_state)
        result = action()
        self.state = next_state
        return result