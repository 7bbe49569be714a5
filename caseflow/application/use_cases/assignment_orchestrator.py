"""AssignmentOrchestrator — every state transition of a client assignment.

All mutation of assignments goes through this class so that history entries,
caseworker workload counters and the client's pointer fields stay consistent.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.ports.audit_port import AuditSink
from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.application.ports.client_repo import ClientRepository
from caseflow.application.use_cases.candidate_selector import CandidateSelector
from caseflow.domain.entities.assignment import (
    DEFAULT_MAX_AUTO_REASSIGNMENT_ATTEMPTS,
    Assignment,
    HistoryEntry,
)
from caseflow.domain.entities.assignment_event import AssignmentEvent
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.errors import (
    Conflict,
    NoAvailableCaseworker,
    NotFound,
    Unauthorized,
    ValidationError,
)
from caseflow.domain.policies.assignment_fsm import Action, next_status
from caseflow.domain.policies.business_hours import ACCEPTANCE_WINDOW_HOURS, compute_deadline
from caseflow.domain.value_objects.enums import EventKind, FinalCaseStatus, Priority

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentOrchestrator:
    """Create, accept, start, reassign, complete, cancel and flag assignments."""

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        caseworker_repo: CaseworkerRepository,
        client_repo: ClientRepository,
        selector: CandidateSelector,
        audit: AuditSink,
        clock: Clock = utc_now,
        acceptance_window_hours: int = ACCEPTANCE_WINDOW_HOURS,
        max_auto_reassignment_attempts: int = DEFAULT_MAX_AUTO_REASSIGNMENT_ATTEMPTS,
    ):
        self._assignments = assignment_repo
        self._caseworkers = caseworker_repo
        self._clients = client_repo
        self._selector = selector
        self._audit = audit
        self._clock = clock
        self._window_hours = acceptance_window_hours
        self._max_attempts = max_auto_reassignment_attempts

    # ─── Creation ────────────────────────────────────────────────────

    async def assign_client(
        self,
        *,
        client_id: int,
        tenant_id: int,
        caseworker_id: int,
        assigned_by: int,
        case_type: str | None = None,
        priority: Priority = Priority.MEDIUM,
        notes: str | None = None,
    ) -> Assignment:
        client = await self._clients.get_by_id(client_id)
        if client is None or not client.is_client():
            raise NotFound(f"Client {client_id} not found")

        caseworker = await self._require_caseworker(caseworker_id, tenant_id)
        if caseworker.is_at_capacity():
            logger.warning(
                "Caseworker %s is at capacity (%d/%s) but receives client %s",
                caseworker.id, caseworker.current_workload,
                caseworker.max_client_capacity, client_id,
            )

        existing = await self._assignments.find_open_for_client(client_id, tenant_id)
        if existing is not None:
            raise Conflict(
                f"Client {client_id} already has an active assignment ({existing.id})"
            )

        now = self._clock()
        assignment = Assignment(
            id=None,
            client_id=client_id,
            tenant_id=tenant_id,
            current_caseworker_id=caseworker_id,
            assigned_date=now,
            acceptance_deadline=compute_deadline(now, self._window_hours),
            onboarded_by=caseworker_id,
            onboarding_date=now,
            case_type=case_type,
            priority=priority,
            notes=notes,
            max_auto_reassignment_attempts=self._max_attempts,
            history=[
                HistoryEntry(
                    caseworker_id=caseworker_id,
                    assigned_date=now,
                    assigned_by=assigned_by,
                )
            ],
        )
        assignment = await self._assignments.add(assignment)
        await self._caseworkers.increment_workload(caseworker_id)

        client.assigned_to = caseworker_id
        client.onboarded_by = caseworker_id
        client.onboarding_date = now
        if case_type:
            client.case_type = case_type
        await self._clients.update(client)

        logger.info(
            "Client %s assigned to caseworker %s (assignment %s, deadline %s)",
            client_id, caseworker_id, assignment.id,
            assignment.acceptance_deadline.isoformat(),
        )
        await self._emit(EventKind.ASSIGNED, assignment, actor_id=assigned_by)
        return assignment

    async def auto_assign_client(
        self,
        *,
        client_id: int,
        tenant_id: int,
        assigned_by: int,
        case_type: str | None = None,
        priority: Priority = Priority.MEDIUM,
        notes: str | None = None,
    ) -> Assignment:
        """Assign to whoever the candidate selector picks."""
        candidate = await self._selector.select(tenant_id, case_type)
        if candidate is None:
            raise NoAvailableCaseworker(f"No caseworker available in tenant {tenant_id}")

        return await self.assign_client(
            client_id=client_id,
            tenant_id=tenant_id,
            caseworker_id=candidate.id,
            assigned_by=assigned_by,
            case_type=case_type,
            priority=priority,
            notes=notes,
        )

    # ─── Holder transitions ─────────────────────────────────────────

    async def accept_assignment(self, assignment_id: int, caseworker_id: int) -> Assignment:
        assignment = await self._load_for_update(assignment_id)
        if not assignment.is_held_by(caseworker_id):
            raise Unauthorized(
                f"Caseworker {caseworker_id} is not assigned to assignment {assignment_id}"
            )

        assignment.status = next_status(assignment.status, Action.ACCEPT)
        now = self._clock()
        assignment.accepted_date = now
        entry = assignment.current_entry()
        if entry is not None:
            entry.accepted_date = now
        await self._assignments.update(assignment)

        logger.info("Assignment %s accepted by caseworker %s", assignment_id, caseworker_id)
        await self._emit(EventKind.ACCEPTED, assignment, actor_id=caseworker_id)
        return assignment

    async def start_assignment(self, assignment_id: int, caseworker_id: int) -> Assignment:
        assignment = await self._load_for_update(assignment_id)
        if not assignment.is_held_by(caseworker_id):
            raise Unauthorized(
                f"Caseworker {caseworker_id} is not assigned to assignment {assignment_id}"
            )

        assignment.status = next_status(assignment.status, Action.START)
        await self._assignments.update(assignment)

        logger.info("Assignment %s is now active", assignment_id)
        await self._emit(EventKind.STARTED, assignment, actor_id=caseworker_id)
        return assignment

    # ─── Reassignment ───────────────────────────────────────────────

    async def reassign_client(
        self,
        *,
        assignment_id: int,
        new_caseworker_id: int,
        reassigned_by: int | None,
        reason: str,
        is_auto_reassignment: bool = False,
    ) -> Assignment:
        """Hand the assignment to another caseworker and restart the acceptance window.

        reassigned_by is None when the escalation sweep made the decision.
        """
        assignment = await self._load_for_update(assignment_id)
        new_caseworker = await self._require_caseworker(new_caseworker_id, assignment.tenant_id)

        old_caseworker_id = assignment.current_caseworker_id
        if old_caseworker_id == new_caseworker_id:
            raise ValidationError(
                f"Caseworker {new_caseworker_id} already holds assignment {assignment_id}"
            )

        assignment.status = next_status(assignment.status, Action.REASSIGN)

        now = self._clock()
        outgoing = assignment.current_entry()
        if outgoing is not None:
            outgoing.reassigned_date = now

        assignment.current_caseworker_id = new_caseworker.id
        assignment.assigned_date = now
        assignment.acceptance_deadline = compute_deadline(now, self._window_hours)
        assignment.accepted_date = None
        assignment.is_auto_reassigned = is_auto_reassignment
        assignment.auto_reassignment_attempts += 1
        assignment.history.append(
            HistoryEntry(
                caseworker_id=new_caseworker.id,
                assigned_date=now,
                assigned_by=reassigned_by,
                reassign_reason=reason,
            )
        )
        await self._assignments.update(assignment)

        await self._caseworkers.decrement_workload(old_caseworker_id)
        await self._caseworkers.increment_workload(new_caseworker.id)

        client = await self._clients.get_by_id(assignment.client_id)
        if client is not None:
            client.assigned_to = new_caseworker.id
            await self._clients.update(client)

        logger.info(
            "Assignment %s reassigned %s → %s (reason=%r, auto=%s, attempts=%d)",
            assignment_id, old_caseworker_id, new_caseworker.id, reason,
            is_auto_reassignment, assignment.auto_reassignment_attempts,
        )
        await self._emit(
            EventKind.REASSIGNED,
            assignment,
            actor_id=reassigned_by,
            details={
                "from_caseworker_id": old_caseworker_id,
                "reason": reason,
                "auto": is_auto_reassignment,
            },
        )
        return assignment

    async def manual_reassignment(
        self,
        *,
        assignment_id: int,
        new_caseworker_id: int,
        reassigned_by: int,
        reason: str,
    ) -> Assignment:
        return await self.reassign_client(
            assignment_id=assignment_id,
            new_caseworker_id=new_caseworker_id,
            reassigned_by=reassigned_by,
            reason=reason,
            is_auto_reassignment=False,
        )

    # ─── Closing transitions ────────────────────────────────────────

    async def complete_assignment(
        self,
        assignment_id: int,
        final_status: FinalCaseStatus,
        notes: str | None = None,
    ) -> Assignment:
        assignment = await self._load_for_update(assignment_id)
        assignment.status = next_status(assignment.status, Action.COMPLETE)
        assignment.completed_date = self._clock()
        assignment.case_status = final_status.value
        assignment.append_notes(notes)
        await self._assignments.update(assignment)

        await self._caseworkers.record_completion(assignment.current_caseworker_id, final_status)

        client = await self._clients.get_by_id(assignment.client_id)
        if client is not None:
            client.case_status = final_status.value
            await self._clients.update(client)

        logger.info(
            "Assignment %s completed by caseworker %s with status %s",
            assignment_id, assignment.current_caseworker_id, final_status.value,
        )
        await self._emit(
            EventKind.COMPLETED,
            assignment,
            details={"final_status": final_status.value},
        )
        return assignment

    async def cancel_assignment(
        self,
        assignment_id: int,
        cancelled_by: int,
        reason: str | None = None,
    ) -> Assignment:
        assignment = await self._load_for_update(assignment_id)
        assignment.status = next_status(assignment.status, Action.CANCEL)
        assignment.append_notes(f"Cancelled: {reason}" if reason else None)
        await self._assignments.update(assignment)

        await self._caseworkers.decrement_workload(assignment.current_caseworker_id)

        client = await self._clients.get_by_id(assignment.client_id)
        if client is not None and client.assigned_to == assignment.current_caseworker_id:
            client.assigned_to = None
            await self._clients.update(client)

        logger.info("Assignment %s cancelled by %s", assignment_id, cancelled_by)
        await self._emit(
            EventKind.CANCELLED,
            assignment,
            actor_id=cancelled_by,
            details={"reason": reason},
        )
        return assignment

    async def flag_for_attention(self, assignment_id: int, *, close: bool) -> Assignment:
        """Mark an overdue assignment for manual review.

        With close=True the assignment also leaves the pending queue for good
        (status reassigned) and stops counting towards the holder's workload.
        """
        assignment = await self._load_for_update(assignment_id)
        if close:
            assignment.status = next_status(assignment.status, Action.EXHAUST)
        assignment.requires_attention = True
        await self._assignments.update(assignment)

        if close:
            await self._caseworkers.decrement_workload(assignment.current_caseworker_id)

        logger.warning(
            "Assignment %s flagged for manual review (client=%s, attempts=%d, closed=%s)",
            assignment_id, assignment.client_id,
            assignment.auto_reassignment_attempts, close,
        )
        await self._emit(EventKind.FLAGGED, assignment, details={"closed": close})
        return assignment

    # ─── Helpers ────────────────────────────────────────────────────

    async def _load_for_update(self, assignment_id: int) -> Assignment:
        assignment = await self._assignments.get_for_update(assignment_id)
        if assignment is None:
            raise NotFound(f"Assignment {assignment_id} not found")
        return assignment

    async def _require_caseworker(self, caseworker_id: int, tenant_id: int) -> Caseworker:
        caseworker = await self._caseworkers.get_by_id(caseworker_id)
        if caseworker is None:
            raise NotFound(f"Caseworker {caseworker_id} not found")
        if not caseworker.is_active:
            raise ValidationError(f"Caseworker {caseworker_id} is inactive")
        if caseworker.tenant_id != tenant_id:
            raise ValidationError(
                f"Caseworker {caseworker_id} does not belong to tenant {tenant_id}"
            )
        return caseworker

    async def _emit(
        self,
        kind: EventKind,
        assignment: Assignment,
        actor_id: int | None = None,
        details: dict | None = None,
    ) -> None:
        event = AssignmentEvent(
            kind=kind,
            assignment_id=assignment.id,
            tenant_id=assignment.tenant_id,
            client_id=assignment.client_id,
            caseworker_id=assignment.current_caseworker_id,
            occurred_at=self._clock(),
            actor_id=actor_id,
            details=details or {},
        )
        try:
            await self._audit.publish(event)
        except Exception:
            logger.warning(
                "Audit sink failed for %s on assignment %s",
                kind.value, assignment.id, exc_info=True,
            )
