"""Caseworker endpoints — assignment lists and workload statistics."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from caseflow.application.use_cases.assignment_queries import AssignmentQueries
from caseflow.domain.value_objects.enums import AssignmentStatus
from caseflow.infrastructure.api.dependencies import get_queries
from caseflow.infrastructure.api.routes_assignments import serialize_assignment

router = APIRouter(tags=["caseworkers"])


@router.get("/caseworkers/{caseworker_id}/assignments")
async def list_caseworker_assignments(
    caseworker_id: int,
    status: AssignmentStatus | None = None,
    queries: AssignmentQueries = Depends(get_queries),
):
    """Assignments currently held by a caseworker, newest first."""
    assignments = await queries.list_by_caseworker(caseworker_id, status)
    return {
        "total": len(assignments),
        "assignments": [serialize_assignment(a) for a in assignments],
    }


@router.get("/caseworkers/{caseworker_id}/stats")
async def caseworker_stats(
    caseworker_id: int,
    queries: AssignmentQueries = Depends(get_queries),
):
    stats = await queries.caseworker_stats(caseworker_id)
    return {"caseworker_id": caseworker_id, **asdict(stats)}


@router.get("/tenants/{tenant_id}/caseworkers")
async def tenant_overview(
    tenant_id: int,
    queries: AssignmentQueries = Depends(get_queries),
):
    """Every caseworker of a tenant with workload counters and assignment stats."""
    overview = await queries.tenant_overview(tenant_id)
    return {
        "total": len(overview),
        "caseworkers": [
            {
                "id": o.caseworker.id,
                "display_name": o.caseworker.display_name,
                "is_active": o.caseworker.is_active,
                "is_available_for_new_clients": o.caseworker.is_available_for_new_clients,
                "max_client_capacity": o.caseworker.max_client_capacity,
                "current_workload": o.caseworker.current_workload,
                "specialization": sorted(o.caseworker.specialization),
                "completed_cases": o.caseworker.completed_cases,
                "successful_cases": o.caseworker.successful_cases,
                "rejected_cases": o.caseworker.rejected_cases,
                "case_success_rate": o.caseworker.case_success_rate,
                "stats": asdict(o.stats),
            }
            for o in overview
        ],
    }
