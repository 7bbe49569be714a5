"""Assignment FSM: lifecycle of a client assignment.

  pending -> accepted -> active -> completed
  pending/accepted/active -> pending      (reassign to another caseworker)
  pending/accepted/active -> cancelled    (administrative)
  pending -> reassigned                   (sweeper gave up, needs attention)

completed, cancelled and reassigned are terminal.
"""

from __future__ import annotations

from enum import Enum

from caseflow.domain.errors import InvalidStateTransition
from caseflow.domain.value_objects.enums import OPEN_STATUSES, AssignmentStatus


class Action(str, Enum):
    ACCEPT = "accept"
    START = "start"
    REASSIGN = "reassign"
    COMPLETE = "complete"
    CANCEL = "cancel"
    EXHAUST = "exhaust"


# action -> allowed from statuses + to status
TRANSITIONS: dict[Action, tuple[frozenset[AssignmentStatus], AssignmentStatus]] = {
    Action.ACCEPT: (frozenset({AssignmentStatus.PENDING}), AssignmentStatus.ACCEPTED),
    Action.START: (frozenset({AssignmentStatus.ACCEPTED}), AssignmentStatus.ACTIVE),
    Action.REASSIGN: (OPEN_STATUSES, AssignmentStatus.PENDING),
    Action.COMPLETE: (OPEN_STATUSES, AssignmentStatus.COMPLETED),
    Action.CANCEL: (OPEN_STATUSES, AssignmentStatus.CANCELLED),
    Action.EXHAUST: (frozenset({AssignmentStatus.PENDING}), AssignmentStatus.REASSIGNED),
}


def next_status(current: AssignmentStatus, action: Action) -> AssignmentStatus:
    """Return the status *action* leads to from *current*.

    Raises:
        InvalidStateTransition: if *action* is not allowed from *current*.
    """
    allowed_from, to_status = TRANSITIONS[action]
    if current not in allowed_from:
        allowed_from_str = ", ".join(sorted(s.value for s in allowed_from))
        raise InvalidStateTransition(
            f"Action '{action.value}' not allowed from status '{current.value}'. "
            f"Allowed from: {allowed_from_str}."
        )
    return to_status
