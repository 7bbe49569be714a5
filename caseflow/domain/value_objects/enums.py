"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    ACTIVE = "active"
    COMPLETED = "completed"
    REASSIGNED = "reassigned"
    CANCELLED = "cancelled"


# Statuses that count towards a caseworker's workload and the
# one-assignment-per-client rule.
OPEN_STATUSES: frozenset[AssignmentStatus] = frozenset(
    {AssignmentStatus.PENDING, AssignmentStatus.ACCEPTED, AssignmentStatus.ACTIVE}
)

TERMINAL_STATUSES: frozenset[AssignmentStatus] = frozenset(
    {AssignmentStatus.COMPLETED, AssignmentStatus.REASSIGNED, AssignmentStatus.CANCELLED}
)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class FinalCaseStatus(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CASE_CLOSED = "Case Closed"


class EventKind(str, Enum):
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    STARTED = "started"
    REASSIGNED = "reassigned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FLAGGED = "flagged"
