"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import asyncio

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.adapters.audit.logging_sink import LoggingAuditSink
from caseflow.adapters.persistence.database import get_session
from caseflow.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlCaseworkerRepository,
    SqlClientRepository,
)
from caseflow.application.use_cases.assignment_orchestrator import AssignmentOrchestrator
from caseflow.application.use_cases.assignment_queries import AssignmentQueries
from caseflow.application.use_cases.bulk_reassign import BulkReassignUseCase
from caseflow.application.use_cases.candidate_selector import CandidateSelector
from caseflow.application.use_cases.escalation_sweep import EscalationSweepUseCase
from caseflow.config import settings


# Process-wide singletons
_audit_sink = LoggingAuditSink()
_sweep_lock = asyncio.Lock()


def sweep_in_progress() -> bool:
    return _sweep_lock.locked()


def build_orchestrator(session: AsyncSession) -> AssignmentOrchestrator:
    caseworker_repo = SqlCaseworkerRepository(session)
    return AssignmentOrchestrator(
        assignment_repo=SqlAssignmentRepository(session),
        caseworker_repo=caseworker_repo,
        client_repo=SqlClientRepository(session),
        selector=CandidateSelector(caseworker_repo),
        audit=_audit_sink,
        acceptance_window_hours=settings.acceptance_window_hours,
        max_auto_reassignment_attempts=settings.max_auto_reassignment_attempts,
    )


def build_sweep(session: AsyncSession, lock: asyncio.Lock) -> EscalationSweepUseCase:
    orchestrator = build_orchestrator(session)
    return EscalationSweepUseCase(
        orchestrator=orchestrator,
        assignment_repo=SqlAssignmentRepository(session),
        selector=CandidateSelector(SqlCaseworkerRepository(session)),
        lock=lock,
    )


def get_orchestrator(session: AsyncSession = Depends(get_session)) -> AssignmentOrchestrator:
    return build_orchestrator(session)


def get_queries(session: AsyncSession = Depends(get_session)) -> AssignmentQueries:
    return AssignmentQueries(
        assignment_repo=SqlAssignmentRepository(session),
        caseworker_repo=SqlCaseworkerRepository(session),
    )


def get_bulk_reassign_uc(session: AsyncSession = Depends(get_session)) -> BulkReassignUseCase:
    return BulkReassignUseCase(
        orchestrator=build_orchestrator(session),
        assignment_repo=SqlAssignmentRepository(session),
    )


def get_sweep_uc(session: AsyncSession = Depends(get_session)) -> EscalationSweepUseCase:
    return build_sweep(session, _sweep_lock)


# Caller identity is resolved upstream and forwarded in headers.

def get_actor_id(x_actor_id: int = Header(...)) -> int:
    return x_actor_id


def get_caseworker_id(x_caseworker_id: int = Header(...)) -> int:
    return x_caseworker_id
