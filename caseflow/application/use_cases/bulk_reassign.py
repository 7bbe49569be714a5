"""BulkReassignUseCase — move every open assignment of one caseworker to another."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.use_cases.assignment_orchestrator import AssignmentOrchestrator
from caseflow.domain.value_objects.enums import OPEN_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class ItemFailure:
    assignment_id: int
    error: str


@dataclass
class BulkReassignResult:
    reassigned_count: int = 0
    failed_count: int = 0
    failures: list[ItemFailure] = field(default_factory=list)


class BulkReassignUseCase:
    """Typically used when a caseworker leaves the team."""

    def __init__(
        self,
        orchestrator: AssignmentOrchestrator,
        assignment_repo: AssignmentRepository,
    ):
        self._orchestrator = orchestrator
        self._assignments = assignment_repo

    async def execute(
        self,
        *,
        old_caseworker_id: int,
        new_caseworker_id: int,
        reassigned_by: int,
        reason: str,
    ) -> BulkReassignResult:
        assignments = await self._assignments.list_by_caseworker(old_caseworker_id, OPEN_STATUSES)
        logger.info(
            "Bulk reassignment of %d assignments: caseworker %s → %s",
            len(assignments), old_caseworker_id, new_caseworker_id,
        )

        result = BulkReassignResult()
        for assignment in assignments:
            try:
                async with self._assignments.savepoint():
                    await self._orchestrator.reassign_client(
                        assignment_id=assignment.id,
                        new_caseworker_id=new_caseworker_id,
                        reassigned_by=reassigned_by,
                        reason=reason,
                        is_auto_reassignment=False,
                    )
                result.reassigned_count += 1
            except Exception as e:
                logger.exception("Error in bulk reassignment of assignment %s", assignment.id)
                result.failed_count += 1
                result.failures.append(ItemFailure(assignment_id=assignment.id, error=str(e)))

        logger.info(
            "Bulk reassignment complete: %d reassigned, %d failed",
            result.reassigned_count, result.failed_count,
        )
        return result
