"""EscalationSweepUseCase — reassign or flag assignments nobody accepted in time."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.use_cases.assignment_orchestrator import (
    AssignmentOrchestrator,
    Clock,
    utc_now,
)
from caseflow.application.use_cases.candidate_selector import CandidateSelector

logger = logging.getLogger(__name__)

AUTO_REASSIGN_REASON = "deadline exceeded"


class _Outcome(str, Enum):
    REASSIGNED = "reassigned"
    FLAGGED = "flagged"
    SKIPPED = "skipped"


@dataclass
class SweepResult:
    """Summary of one sweep run. skipped=True means another sweep was already running."""

    processed: int = 0
    reassigned: int = 0
    flagged: int = 0
    failed: int = 0
    skipped_items: int = 0
    skipped: bool = False


class EscalationSweepUseCase:
    """Periodic job. At most one run is in flight per process and per database."""

    def __init__(
        self,
        orchestrator: AssignmentOrchestrator,
        assignment_repo: AssignmentRepository,
        selector: CandidateSelector,
        lock: asyncio.Lock,
        clock: Clock = utc_now,
    ):
        self._orchestrator = orchestrator
        self._assignments = assignment_repo
        self._selector = selector
        self._lock = lock
        self._clock = clock

    async def execute(self) -> SweepResult:
        if self._lock.locked():
            logger.warning("Escalation sweep already running in this process, skipping")
            return SweepResult(skipped=True)

        async with self._lock:
            if not await self._assignments.try_acquire_sweep_lock():
                logger.warning("Escalation sweep already running elsewhere, skipping")
                return SweepResult(skipped=True)
            return await self._sweep()

    async def _sweep(self) -> SweepResult:
        now = self._clock()
        overdue = await self._assignments.list_overdue(now)
        logger.info("Found %d overdue assignments to process", len(overdue))

        result = SweepResult()
        for assignment in overdue:
            result.processed += 1
            try:
                async with self._assignments.savepoint():
                    outcome = await self._escalate(assignment.id)
            except Exception:
                logger.exception("Error escalating assignment %s", assignment.id)
                result.failed += 1
                continue

            if outcome is _Outcome.REASSIGNED:
                result.reassigned += 1
            elif outcome is _Outcome.FLAGGED:
                result.flagged += 1
            else:
                result.skipped_items += 1

        logger.info(
            "Overdue assignments processed: processed=%d reassigned=%d flagged=%d failed=%d",
            result.processed, result.reassigned, result.flagged, result.failed,
        )
        return result

    async def _escalate(self, assignment_id: int) -> _Outcome:
        # Re-read under lock: the holder may have accepted since the scan.
        assignment = await self._assignments.get_for_update(assignment_id)
        if (
            assignment is None
            or not assignment.auto_reassignment_enabled
            or not assignment.is_acceptance_overdue(self._clock())
        ):
            return _Outcome.SKIPPED

        if assignment.attempts_exhausted():
            await self._orchestrator.flag_for_attention(assignment.id, close=True)
            return _Outcome.FLAGGED

        candidate = await self._selector.select(
            assignment.tenant_id,
            assignment.case_type,
            exclude={assignment.current_caseworker_id},
        )
        if candidate is None:
            await self._orchestrator.flag_for_attention(assignment.id, close=False)
            return _Outcome.FLAGGED

        await self._orchestrator.reassign_client(
            assignment_id=assignment.id,
            new_caseworker_id=candidate.id,
            reassigned_by=None,
            reason=AUTO_REASSIGN_REASON,
            is_auto_reassignment=True,
        )
        return _Outcome.REASSIGNED
