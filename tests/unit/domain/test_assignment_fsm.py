"""Tests for the assignment lifecycle transition table."""

import pytest

from caseflow.domain.errors import InvalidStateTransition
from caseflow.domain.policies.assignment_fsm import Action, next_status
from caseflow.domain.value_objects.enums import TERMINAL_STATUSES, AssignmentStatus as S


@pytest.mark.parametrize("current,action,expected", [
    (S.PENDING, Action.ACCEPT, S.ACCEPTED),
    (S.ACCEPTED, Action.START, S.ACTIVE),
    (S.PENDING, Action.REASSIGN, S.PENDING),
    (S.ACCEPTED, Action.REASSIGN, S.PENDING),
    (S.ACTIVE, Action.REASSIGN, S.PENDING),
    (S.PENDING, Action.COMPLETE, S.COMPLETED),
    (S.ACTIVE, Action.COMPLETE, S.COMPLETED),
    (S.ACCEPTED, Action.CANCEL, S.CANCELLED),
    (S.PENDING, Action.EXHAUST, S.REASSIGNED),
])
def test_allowed_transitions(current, action, expected):
    assert next_status(current, action) == expected


@pytest.mark.parametrize("current,action", [
    (S.ACCEPTED, Action.ACCEPT),
    (S.ACTIVE, Action.ACCEPT),
    (S.PENDING, Action.START),
    (S.ACTIVE, Action.EXHAUST),
])
def test_rejected_transitions(current, action):
    with pytest.raises(InvalidStateTransition):
        next_status(current, action)


@pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
@pytest.mark.parametrize("action", list(Action))
def test_nothing_leaves_a_terminal_status(terminal, action):
    with pytest.raises(InvalidStateTransition):
        next_status(terminal, action)


def test_error_message_lists_allowed_statuses():
    with pytest.raises(InvalidStateTransition) as exc:
        next_status(S.COMPLETED, Action.ACCEPT)
    assert "Action 'accept' not allowed from status 'completed'" in str(exc.value)
    assert "Allowed from: pending." in str(exc.value)
