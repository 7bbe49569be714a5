"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caseflow.adapters.persistence.models import (
    AssignmentHistoryModel,
    AssignmentModel,
    CaseworkerModel,
    ClientModel,
)
from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.application.ports.client_repo import ClientRepository
from caseflow.config import settings
from caseflow.domain.entities.assignment import Assignment, HistoryEntry
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.entities.client import Client
from caseflow.domain.errors import Conflict
from caseflow.domain.value_objects.enums import (
    OPEN_STATUSES,
    AssignmentStatus,
    FinalCaseStatus,
    Priority,
)

OPEN_ASSIGNMENT_INDEX = "uq_assignments_open_per_client"

# ─── Mappers ─────────────────────────────────────────────────────────


def _client_to_domain(m: ClientModel) -> Client:
    return Client(
        id=m.id,
        tenant_id=m.tenant_id,
        role=m.role,
        assigned_to=m.assigned_to,
        onboarded_by=m.onboarded_by,
        onboarding_date=m.onboarding_date,
        case_type=m.case_type,
        case_status=m.case_status,
    )


def _caseworker_to_domain(m: CaseworkerModel) -> Caseworker:
    return Caseworker(
        id=m.id,
        tenant_id=m.tenant_id,
        display_name=m.display_name,
        is_active=m.is_active,
        is_available_for_new_clients=m.is_available_for_new_clients,
        max_client_capacity=m.max_client_capacity,
        current_workload=m.current_workload,
        specialization=set(m.specialization) if m.specialization else set(),
        completed_cases=m.completed_cases,
        successful_cases=m.successful_cases,
        rejected_cases=m.rejected_cases,
        case_success_rate=m.case_success_rate,
    )


def _history_to_domain(m: AssignmentHistoryModel) -> HistoryEntry:
    return HistoryEntry(
        caseworker_id=m.caseworker_id,
        assigned_date=m.assigned_date,
        assigned_by=m.assigned_by,
        accepted_date=m.accepted_date,
        reassigned_date=m.reassigned_date,
        reassign_reason=m.reassign_reason,
    )


def _history_to_model(entry: HistoryEntry, sequence: int) -> AssignmentHistoryModel:
    return AssignmentHistoryModel(
        sequence=sequence,
        caseworker_id=entry.caseworker_id,
        assigned_date=entry.assigned_date,
        assigned_by=entry.assigned_by,
        accepted_date=entry.accepted_date,
        reassigned_date=entry.reassigned_date,
        reassign_reason=entry.reassign_reason,
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        client_id=m.client_id,
        tenant_id=m.tenant_id,
        current_caseworker_id=m.current_caseworker_id,
        status=AssignmentStatus(m.status),
        assigned_date=m.assigned_date,
        accepted_date=m.accepted_date,
        acceptance_deadline=m.acceptance_deadline,
        completed_date=m.completed_date,
        onboarded_by=m.onboarded_by,
        onboarding_date=m.onboarding_date,
        case_type=m.case_type,
        case_status=m.case_status,
        priority=Priority(m.priority),
        history=[_history_to_domain(h) for h in sorted(m.history, key=lambda h: h.sequence)],
        auto_reassignment_enabled=m.auto_reassignment_enabled,
        auto_reassignment_attempts=m.auto_reassignment_attempts,
        max_auto_reassignment_attempts=m.max_auto_reassignment_attempts,
        is_auto_reassigned=m.is_auto_reassigned,
        requires_attention=m.requires_attention,
        notes=m.notes,
    )


def _copy_scalars(a: Assignment, m: AssignmentModel) -> None:
    m.current_caseworker_id = a.current_caseworker_id
    m.status = a.status.value
    m.assigned_date = a.assigned_date
    m.accepted_date = a.accepted_date
    m.acceptance_deadline = a.acceptance_deadline
    m.completed_date = a.completed_date
    m.case_type = a.case_type
    m.case_status = a.case_status
    m.priority = a.priority.value
    m.auto_reassignment_enabled = a.auto_reassignment_enabled
    m.auto_reassignment_attempts = a.auto_reassignment_attempts
    m.max_auto_reassignment_attempts = a.max_auto_reassignment_attempts
    m.is_auto_reassigned = a.is_auto_reassigned
    m.requires_attention = a.requires_attention
    m.notes = a.notes


def _with_history():
    return select(AssignmentModel).options(selectinload(AssignmentModel.history))


def success_rate_expr(successful, completed):
    """SQL twin of the domain success rate: integer round-half-up of successful / completed * 100.

    Both operands must be integer expressions so the division stays integral.
    """
    return (successful * 200 + completed) // (completed * 2)


# ─── Repositories ────────────────────────────────────────────────────


class SqlClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, client: Client) -> Client:
        m = ClientModel(
            tenant_id=client.tenant_id,
            role=client.role,
            assigned_to=client.assigned_to,
            onboarded_by=client.onboarded_by,
            onboarding_date=client.onboarding_date,
            case_type=client.case_type,
            case_status=client.case_status,
        )
        self._s.add(m)
        await self._s.flush()
        client.id = m.id
        return client

    async def get_by_id(self, client_id: int) -> Client | None:
        m = await self._s.get(ClientModel, client_id)
        return _client_to_domain(m) if m else None

    async def update(self, client: Client) -> Client:
        await self._s.execute(
            update(ClientModel)
            .where(ClientModel.id == client.id)
            .values(
                assigned_to=client.assigned_to,
                onboarded_by=client.onboarded_by,
                onboarding_date=client.onboarding_date,
                case_type=client.case_type,
                case_status=client.case_status,
            )
        )
        await self._s.flush()
        return client


class SqlCaseworkerRepository(CaseworkerRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, caseworker: Caseworker) -> Caseworker:
        m = CaseworkerModel(
            tenant_id=caseworker.tenant_id,
            display_name=caseworker.display_name,
            is_active=caseworker.is_active,
            is_available_for_new_clients=caseworker.is_available_for_new_clients,
            max_client_capacity=caseworker.max_client_capacity,
            current_workload=caseworker.current_workload,
            specialization=sorted(caseworker.specialization),
        )
        self._s.add(m)
        await self._s.flush()
        caseworker.id = m.id
        return caseworker

    async def get_by_id(self, caseworker_id: int) -> Caseworker | None:
        m = await self._s.get(CaseworkerModel, caseworker_id, populate_existing=True)
        return _caseworker_to_domain(m) if m else None

    async def get_by_tenant(self, tenant_id: int) -> list[Caseworker]:
        result = await self._s.execute(
            select(CaseworkerModel)
            .where(CaseworkerModel.tenant_id == tenant_id)
            .order_by(CaseworkerModel.id)
            .execution_options(populate_existing=True)
        )
        return [_caseworker_to_domain(m) for m in result.scalars()]

    async def list_available(
        self,
        tenant_id: int,
        exclude: Collection[int] = (),
    ) -> list[Caseworker]:
        query = select(CaseworkerModel).where(
            CaseworkerModel.tenant_id == tenant_id,
            CaseworkerModel.is_active.is_(True),
            CaseworkerModel.is_available_for_new_clients.is_(True),
        )
        if exclude:
            query = query.where(CaseworkerModel.id.notin_(list(exclude)))
        result = await self._s.execute(
            query.order_by(CaseworkerModel.current_workload, CaseworkerModel.id)
            .execution_options(populate_existing=True)
        )
        return [_caseworker_to_domain(m) for m in result.scalars()]

    async def increment_workload(self, caseworker_id: int) -> None:
        await self._s.execute(
            update(CaseworkerModel)
            .where(CaseworkerModel.id == caseworker_id)
            .values(current_workload=CaseworkerModel.current_workload + 1)
        )
        await self._s.flush()

    async def decrement_workload(self, caseworker_id: int) -> None:
        await self._s.execute(
            update(CaseworkerModel)
            .where(CaseworkerModel.id == caseworker_id)
            .values(current_workload=func.greatest(CaseworkerModel.current_workload - 1, 0))
        )
        await self._s.flush()

    async def record_completion(self, caseworker_id: int, final_status: FinalCaseStatus) -> None:
        approved = 1 if final_status == FinalCaseStatus.APPROVED else 0
        rejected = 1 if final_status == FinalCaseStatus.REJECTED else 0
        completed = CaseworkerModel.completed_cases + 1
        successful = CaseworkerModel.successful_cases + approved

        # Right-hand sides see the pre-update row, so one statement is atomic.
        await self._s.execute(
            update(CaseworkerModel)
            .where(CaseworkerModel.id == caseworker_id)
            .values(
                current_workload=func.greatest(CaseworkerModel.current_workload - 1, 0),
                completed_cases=completed,
                successful_cases=successful,
                rejected_cases=CaseworkerModel.rejected_cases + rejected,
                case_success_rate=success_rate_expr(successful, completed),
            )
        )
        await self._s.flush()


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession, sweep_lock_key: int = settings.sweep_lock_key):
        self._s = session
        self._sweep_lock_key = sweep_lock_key

    async def add(self, assignment: Assignment) -> Assignment:
        m = AssignmentModel(
            client_id=assignment.client_id,
            tenant_id=assignment.tenant_id,
            onboarded_by=assignment.onboarded_by,
            onboarding_date=assignment.onboarding_date,
            history=[_history_to_model(h, i) for i, h in enumerate(assignment.history)],
        )
        _copy_scalars(assignment, m)
        try:
            async with self._s.begin_nested():
                self._s.add(m)
                await self._s.flush()
        except IntegrityError as e:
            if OPEN_ASSIGNMENT_INDEX in str(e.orig):
                raise Conflict(
                    f"Client {assignment.client_id} already has an active assignment"
                ) from e
            raise
        assignment.id = m.id
        return assignment

    async def update(self, assignment: Assignment) -> Assignment:
        result = await self._s.execute(
            _with_history()
            .where(AssignmentModel.id == assignment.id)
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one()
        _copy_scalars(assignment, m)

        # History is append-only; only the dates of existing rows may be back-filled.
        existing = sorted(m.history, key=lambda h: h.sequence)
        for i, entry in enumerate(assignment.history):
            if i < len(existing):
                existing[i].accepted_date = entry.accepted_date
                existing[i].reassigned_date = entry.reassigned_date
            else:
                m.history.append(_history_to_model(entry, i))

        await self._s.flush()
        return assignment

    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        result = await self._s.execute(
            _with_history()
            .where(AssignmentModel.id == assignment_id)
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def get_for_update(self, assignment_id: int) -> Assignment | None:
        result = await self._s.execute(
            _with_history()
            .where(AssignmentModel.id == assignment_id)
            .with_for_update(of=AssignmentModel)
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def find_open_for_client(self, client_id: int, tenant_id: int) -> Assignment | None:
        result = await self._s.execute(
            _with_history().where(
                AssignmentModel.client_id == client_id,
                AssignmentModel.tenant_id == tenant_id,
                AssignmentModel.status.in_(sorted(s.value for s in OPEN_STATUSES)),
            )
        )
        m = result.scalars().first()
        return _assignment_to_domain(m) if m else None

    async def list_by_caseworker(
        self,
        caseworker_id: int,
        statuses: frozenset[AssignmentStatus] | None = None,
    ) -> list[Assignment]:
        query = _with_history().where(AssignmentModel.current_caseworker_id == caseworker_id)
        if statuses:
            query = query.where(AssignmentModel.status.in_(sorted(s.value for s in statuses)))
        result = await self._s.execute(
            query.order_by(AssignmentModel.assigned_date.desc(), AssignmentModel.id.desc())
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def list_overdue(self, now: datetime) -> list[Assignment]:
        result = await self._s.execute(
            _with_history()
            .where(
                AssignmentModel.status == AssignmentStatus.PENDING.value,
                AssignmentModel.auto_reassignment_enabled.is_(True),
                AssignmentModel.acceptance_deadline < now,
            )
            .order_by(AssignmentModel.acceptance_deadline, AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def list_requiring_attention(self, tenant_id: int) -> list[Assignment]:
        result = await self._s.execute(
            _with_history()
            .where(
                AssignmentModel.tenant_id == tenant_id,
                AssignmentModel.requires_attention.is_(True),
            )
            .order_by(AssignmentModel.assigned_date)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    def savepoint(self):
        return self._s.begin_nested()

    async def try_acquire_sweep_lock(self) -> bool:
        result = await self._s.execute(
            select(func.pg_try_advisory_xact_lock(self._sweep_lock_key))
        )
        return bool(result.scalar())
