"""Assignment endpoints — create, transition, inspect."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.adapters.persistence.database import get_session
from caseflow.application.use_cases.assignment_orchestrator import AssignmentOrchestrator
from caseflow.application.use_cases.assignment_queries import AssignmentQueries
from caseflow.application.use_cases.bulk_reassign import BulkReassignUseCase
from caseflow.domain.entities.assignment import Assignment
from caseflow.domain.value_objects.enums import FinalCaseStatus, Priority
from caseflow.infrastructure.api.dependencies import (
    get_actor_id,
    get_bulk_reassign_uc,
    get_caseworker_id,
    get_orchestrator,
    get_queries,
)

router = APIRouter(prefix="/assignments", tags=["assignments"])


class CreateAssignmentRequest(BaseModel):
    client_id: int
    tenant_id: int
    caseworker_id: int | None = Field(
        default=None, description="Omit to let the candidate selector choose"
    )
    case_type: str | None = None
    priority: Priority = Priority.MEDIUM
    notes: str | None = None


class ReassignRequest(BaseModel):
    new_caseworker_id: int
    reason: str = Field(min_length=1)


class CompleteRequest(BaseModel):
    final_status: FinalCaseStatus
    notes: str | None = None


class CancelRequest(BaseModel):
    reason: str | None = None


class BulkReassignRequest(BaseModel):
    old_caseworker_id: int
    new_caseworker_id: int
    reason: str = Field(min_length=1)


@router.post("", status_code=201)
async def create_assignment(
    body: CreateAssignmentRequest,
    actor_id: int = Depends(get_actor_id),
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    """Assign a client to a caseworker, or to the best available one."""
    if body.caseworker_id is not None:
        assignment = await orchestrator.assign_client(
            client_id=body.client_id,
            tenant_id=body.tenant_id,
            caseworker_id=body.caseworker_id,
            assigned_by=actor_id,
            case_type=body.case_type,
            priority=body.priority,
            notes=body.notes,
        )
    else:
        assignment = await orchestrator.auto_assign_client(
            client_id=body.client_id,
            tenant_id=body.tenant_id,
            assigned_by=actor_id,
            case_type=body.case_type,
            priority=body.priority,
            notes=body.notes,
        )
    await session.commit()
    return serialize_assignment(assignment)


@router.get("/attention")
async def list_requiring_attention(
    tenant_id: int,
    queries: AssignmentQueries = Depends(get_queries),
):
    """Assignments the escalation sweep could not place."""
    assignments = await queries.list_requiring_attention(tenant_id)
    return {
        "total": len(assignments),
        "assignments": [serialize_assignment(a) for a in assignments],
    }


@router.post("/bulk-reassign")
async def bulk_reassign(
    body: BulkReassignRequest,
    actor_id: int = Depends(get_actor_id),
    uc: BulkReassignUseCase = Depends(get_bulk_reassign_uc),
    session: AsyncSession = Depends(get_session),
):
    """Move every open assignment of one caseworker to another."""
    result = await uc.execute(
        old_caseworker_id=body.old_caseworker_id,
        new_caseworker_id=body.new_caseworker_id,
        reassigned_by=actor_id,
        reason=body.reason,
    )
    await session.commit()
    return {
        "reassigned_count": result.reassigned_count,
        "failed_count": result.failed_count,
        "failures": [
            {"assignment_id": f.assignment_id, "error": f.error} for f in result.failures
        ],
    }


@router.get("/{assignment_id}")
async def get_assignment(
    assignment_id: int,
    queries: AssignmentQueries = Depends(get_queries),
):
    return serialize_assignment(await queries.get_assignment(assignment_id))


@router.post("/{assignment_id}/accept")
async def accept_assignment(
    assignment_id: int,
    caseworker_id: int = Depends(get_caseworker_id),
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    assignment = await orchestrator.accept_assignment(assignment_id, caseworker_id)
    await session.commit()
    return serialize_assignment(assignment)


@router.post("/{assignment_id}/start")
async def start_assignment(
    assignment_id: int,
    caseworker_id: int = Depends(get_caseworker_id),
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    assignment = await orchestrator.start_assignment(assignment_id, caseworker_id)
    await session.commit()
    return serialize_assignment(assignment)


@router.post("/{assignment_id}/reassign")
async def reassign_assignment(
    assignment_id: int,
    body: ReassignRequest,
    actor_id: int = Depends(get_actor_id),
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    assignment = await orchestrator.manual_reassignment(
        assignment_id=assignment_id,
        new_caseworker_id=body.new_caseworker_id,
        reassigned_by=actor_id,
        reason=body.reason,
    )
    await session.commit()
    return serialize_assignment(assignment)


@router.post("/{assignment_id}/complete")
async def complete_assignment(
    assignment_id: int,
    body: CompleteRequest,
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    assignment = await orchestrator.complete_assignment(
        assignment_id, body.final_status, body.notes
    )
    await session.commit()
    return serialize_assignment(assignment)


@router.post("/{assignment_id}/cancel")
async def cancel_assignment(
    assignment_id: int,
    body: CancelRequest,
    actor_id: int = Depends(get_actor_id),
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
    session: AsyncSession = Depends(get_session),
):
    assignment = await orchestrator.cancel_assignment(assignment_id, actor_id, body.reason)
    await session.commit()
    return serialize_assignment(assignment)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def serialize_assignment(a: Assignment) -> dict:
    """Convert an Assignment (with history) to an API response dict."""
    return {
        "id": a.id,
        "client_id": a.client_id,
        "tenant_id": a.tenant_id,
        "current_caseworker_id": a.current_caseworker_id,
        "status": a.status.value,
        "assigned_date": _iso(a.assigned_date),
        "accepted_date": _iso(a.accepted_date),
        "acceptance_deadline": _iso(a.acceptance_deadline),
        "completed_date": _iso(a.completed_date),
        "onboarded_by": a.onboarded_by,
        "onboarding_date": _iso(a.onboarding_date),
        "case_type": a.case_type,
        "case_status": a.case_status,
        "priority": a.priority.value,
        "auto_reassignment_enabled": a.auto_reassignment_enabled,
        "auto_reassignment_attempts": a.auto_reassignment_attempts,
        "max_auto_reassignment_attempts": a.max_auto_reassignment_attempts,
        "is_auto_reassigned": a.is_auto_reassigned,
        "requires_attention": a.requires_attention,
        "notes": a.notes,
        "history": [
            {
                "caseworker_id": h.caseworker_id,
                "assigned_date": _iso(h.assigned_date),
                "assigned_by": h.assigned_by,
                "accepted_date": _iso(h.accepted_date),
                "reassigned_date": _iso(h.reassigned_date),
                "reassign_reason": h.reassign_reason,
            }
            for h in a.history
        ],
    }
