"""AssignmentEvent — informational record of one assignment transition."""

from dataclasses import dataclass, field
from datetime import datetime

from caseflow.domain.value_objects.enums import EventKind


@dataclass(frozen=True)
class AssignmentEvent:
    kind: EventKind
    assignment_id: int
    tenant_id: int
    client_id: int
    caseworker_id: int
    occurred_at: datetime
    actor_id: int | None = None
    details: dict = field(default_factory=dict)
