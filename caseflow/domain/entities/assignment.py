"""Assignment entity — binds one client to its currently responsible caseworker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from caseflow.domain.value_objects.enums import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    AssignmentStatus,
    Priority,
)

DEFAULT_MAX_AUTO_REASSIGNMENT_ATTEMPTS = 3


@dataclass
class HistoryEntry:
    """One holder of the assignment. assigned_by is None for sweeper reassignments."""

    caseworker_id: int
    assigned_date: datetime
    assigned_by: int | None
    accepted_date: datetime | None = None
    reassigned_date: datetime | None = None
    reassign_reason: str | None = None


@dataclass
class Assignment:
    id: int | None
    client_id: int
    tenant_id: int
    current_caseworker_id: int
    assigned_date: datetime
    acceptance_deadline: datetime
    onboarded_by: int
    onboarding_date: datetime
    status: AssignmentStatus = AssignmentStatus.PENDING
    accepted_date: datetime | None = None
    completed_date: datetime | None = None
    case_type: str | None = None
    case_status: str | None = None
    priority: Priority = Priority.MEDIUM
    history: list[HistoryEntry] = field(default_factory=list)
    auto_reassignment_enabled: bool = True
    auto_reassignment_attempts: int = 0
    max_auto_reassignment_attempts: int = DEFAULT_MAX_AUTO_REASSIGNMENT_ATTEMPTS
    is_auto_reassigned: bool = False
    requires_attention: bool = False
    notes: str | None = None

    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_held_by(self, caseworker_id: int) -> bool:
        return self.current_caseworker_id == caseworker_id

    def current_entry(self) -> HistoryEntry | None:
        return self.history[-1] if self.history else None

    def is_acceptance_overdue(self, now: datetime) -> bool:
        if self.status != AssignmentStatus.PENDING:
            return False
        return self.acceptance_deadline < now

    def attempts_exhausted(self) -> bool:
        return self.auto_reassignment_attempts >= self.max_auto_reassignment_attempts

    def append_notes(self, text: str | None) -> None:
        if not text:
            return
        self.notes = f"{self.notes}\n{text}" if self.notes else text
