"""Unit tests for the session state machine."""

import pytest

from quakewatch.core.session import (
    InvalidTransition,
    SessionState,
    can_transition,
    transition,
)


class TestTransitions:
    """Tests for can_transition() and transition()."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionState.IDLE, SessionState.FETCHING),
            (SessionState.FETCHING, SessionState.RECONCILING),
            (SessionState.RECONCILING, SessionState.BROADCASTING),
            (SessionState.RECONCILING, SessionState.WAITING),
            (SessionState.BROADCASTING, SessionState.WAITING),
            (SessionState.WAITING, SessionState.FETCHING),
        ],
    )
    def test_cycle_transitions_allowed(self, current, target):
        assert can_transition(current, target) is True
        assert transition(current, target) is target

    @pytest.mark.parametrize("state", [s for s in SessionState if s is not SessionState.STOPPED])
    def test_any_live_state_can_stop(self, state):
        assert transition(state, SessionState.STOPPED) is SessionState.STOPPED

    @pytest.mark.parametrize("target", list(SessionState))
    def test_stopped_is_terminal(self, target):
        assert can_transition(SessionState.STOPPED, target) is False
        with pytest.raises(InvalidTransition):
            transition(SessionState.STOPPED, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionState.IDLE, SessionState.BROADCASTING),
            (SessionState.FETCHING, SessionState.WAITING),
            (SessionState.BROADCASTING, SessionState.FETCHING),
            (SessionState.WAITING, SessionState.IDLE),
        ],
    )
    def test_skipping_states_rejected(self, current, target):
        with pytest.raises(InvalidTransition, match="Cannot move session"):
            transition(current, target)

    def test_states_serialize_as_strings(self):
        assert SessionState.WAITING == "waiting"
