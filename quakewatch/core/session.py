"""Ingestion session state machine - Pure functions.

A session walks IDLE -> FETCHING -> RECONCILING -> BROADCASTING -> WAITING
and back to FETCHING on every timer tick. STOPPED is terminal and can be
entered from any state.
"""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle states of one subscriber session."""
    IDLE = "idle"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    BROADCASTING = "broadcasting"
    WAITING = "waiting"
    STOPPED = "stopped"


class InvalidTransition(Exception):
    """Raised when a session is moved to a state it cannot reach."""


ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.FETCHING}),
    SessionState.FETCHING: frozenset({SessionState.RECONCILING}),
    SessionState.RECONCILING: frozenset({SessionState.BROADCASTING, SessionState.WAITING}),
    SessionState.BROADCASTING: frozenset({SessionState.WAITING}),
    SessionState.WAITING: frozenset({SessionState.FETCHING}),
    SessionState.STOPPED: frozenset(),
}


def can_transition(current: SessionState, target: SessionState) -> bool:
    """Check whether ``current`` may move to ``target``.

    Pure function.
    """
    if current is SessionState.STOPPED:
        return False
    if target is SessionState.STOPPED:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def transition(current: SessionState, target: SessionState) -> SessionState:
    """Validate a transition and return the new state.

    Pure function.

    Raises:
        InvalidTransition: If the move is not allowed
    """
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot move session from {current.value} to {target.value}")
    return target
