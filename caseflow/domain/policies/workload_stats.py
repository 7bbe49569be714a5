"""Caseworker statistics — success rate and per-status assignment counts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from caseflow.domain.entities.assignment import Assignment
from caseflow.domain.value_objects.enums import AssignmentStatus


@dataclass(frozen=True)
class CaseworkerStats:
    total_assignments: int
    pending_assignments: int
    accepted_assignments: int
    completed_assignments: int
    average_acceptance_time_hours: float
    overdue_assignments: int


def success_rate(successful_cases: int, completed_cases: int) -> int | None:
    """Percentage of completed cases that were approved, rounded half up.

    Returns None before the first completed case.
    """
    if completed_cases <= 0:
        return None
    # integer round-half-up of successful / completed * 100
    return (successful_cases * 200 + completed_cases) // (2 * completed_cases)


def summarize_assignments(assignments: Iterable[Assignment], now: datetime) -> CaseworkerStats:
    items = list(assignments)

    pending = [a for a in items if a.status == AssignmentStatus.PENDING]
    accepted = [
        a for a in items
        if a.status in (AssignmentStatus.ACCEPTED, AssignmentStatus.ACTIVE)
    ]
    completed = [a for a in items if a.status == AssignmentStatus.COMPLETED]

    acceptance_hours = [
        (a.accepted_date - a.assigned_date).total_seconds() / 3600
        for a in items
        if a.accepted_date is not None
    ]
    average = sum(acceptance_hours) / len(acceptance_hours) if acceptance_hours else 0.0

    return CaseworkerStats(
        total_assignments=len(items),
        pending_assignments=len(pending),
        accepted_assignments=len(accepted),
        completed_assignments=len(completed),
        average_acceptance_time_hours=round(average, 1),
        overdue_assignments=sum(1 for a in pending if a.acceptance_deadline < now),
    )
