"""Canonical state transition helpers for queue items."""

from __future__ import annotations

import enum


class InvalidTransitionError(ValueError):
    """Raised when a disallowed state transition is attempted."""


def _key(state: str | enum.Enum) -> str:
    return state.value if isinstance(state, enum.Enum) else state


class StateMachine:
    """Simple in-memory state machine keyed by state value."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = {_key(state): {_key(target) for target in targets} for state, targets in transitions.items()}

    def can_transition(self, current: str | enum.Enum, target: str | enum.Enum) -> bool:
        return _key(target) in self._transitions.get(_key(current), set())

    def assert_transition(self, current: str | enum.Enum, target: str | enum.Enum) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {_key(current)} -> {_key(target)}")

    def is_terminal(self, state: str | enum.Enum) -> bool:
        return not self._transitions.get(_key(state))

