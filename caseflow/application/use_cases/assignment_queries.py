"""Read-side queries: assignments per caseworker and caseworker statistics."""

from __future__ import annotations

from dataclasses import dataclass

from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.application.use_cases.assignment_orchestrator import Clock, utc_now
from caseflow.domain.entities.assignment import Assignment
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.errors import NotFound
from caseflow.domain.policies.workload_stats import CaseworkerStats, summarize_assignments
from caseflow.domain.value_objects.enums import AssignmentStatus


@dataclass
class CaseworkerOverview:
    caseworker: Caseworker
    stats: CaseworkerStats


class AssignmentQueries:
    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        caseworker_repo: CaseworkerRepository,
        clock: Clock = utc_now,
    ):
        self._assignments = assignment_repo
        self._caseworkers = caseworker_repo
        self._clock = clock

    async def get_assignment(self, assignment_id: int) -> Assignment:
        assignment = await self._assignments.get_by_id(assignment_id)
        if assignment is None:
            raise NotFound(f"Assignment {assignment_id} not found")
        return assignment

    async def list_by_caseworker(
        self,
        caseworker_id: int,
        status: AssignmentStatus | None = None,
    ) -> list[Assignment]:
        statuses = frozenset({status}) if status is not None else None
        return await self._assignments.list_by_caseworker(caseworker_id, statuses)

    async def list_requiring_attention(self, tenant_id: int) -> list[Assignment]:
        return await self._assignments.list_requiring_attention(tenant_id)

    async def caseworker_stats(self, caseworker_id: int) -> CaseworkerStats:
        if await self._caseworkers.get_by_id(caseworker_id) is None:
            raise NotFound(f"Caseworker {caseworker_id} not found")
        assignments = await self._assignments.list_by_caseworker(caseworker_id)
        return summarize_assignments(assignments, self._clock())

    async def tenant_overview(self, tenant_id: int) -> list[CaseworkerOverview]:
        now = self._clock()
        overview = []
        for caseworker in await self._caseworkers.get_by_tenant(tenant_id):
            assignments = await self._assignments.list_by_caseworker(caseworker.id)
            overview.append(
                CaseworkerOverview(
                    caseworker=caseworker,
                    stats=summarize_assignments(assignments, now),
                )
            )
        return overview
