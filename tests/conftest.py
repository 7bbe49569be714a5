"""Pytest configuration, in-memory port fakes and shared fixtures."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from copy import deepcopy
from datetime import datetime, timedelta, timezone

import pytest

from caseflow.application.ports.assignment_repo import AssignmentRepository
from caseflow.application.ports.audit_port import AuditSink
from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.application.ports.client_repo import ClientRepository
from caseflow.application.use_cases.assignment_orchestrator import AssignmentOrchestrator
from caseflow.application.use_cases.assignment_queries import AssignmentQueries
from caseflow.application.use_cases.bulk_reassign import BulkReassignUseCase
from caseflow.application.use_cases.candidate_selector import CandidateSelector
from caseflow.application.use_cases.escalation_sweep import EscalationSweepUseCase
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.entities.client import Client
from caseflow.domain.errors import Conflict
from caseflow.domain.policies.workload_stats import success_rate
from caseflow.domain.value_objects.enums import OPEN_STATUSES, AssignmentStatus, FinalCaseStatus

# Monday
MONDAY_9AM = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = MONDAY_9AM):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ─── In-memory fakes ────────────────────────────────────────────────


class InMemoryDb:
    """Shared state behind the fake repositories. Repos hand out copies, like a real store."""

    def __init__(self):
        self.clients: dict[int, Client] = {}
        self.caseworkers: dict[int, Caseworker] = {}
        self.assignments: dict = {}
        self.sweep_lock_free = True

    def add_caseworker(self, tenant_id: int = 1, **kwargs) -> Caseworker:
        cw = Caseworker(
            id=len(self.caseworkers) + 1,
            tenant_id=tenant_id,
            display_name=kwargs.pop("display_name", f"CW{len(self.caseworkers) + 1}"),
            **kwargs,
        )
        self.caseworkers[cw.id] = cw
        return cw

    def add_client(self, tenant_id: int = 1, **kwargs) -> Client:
        client = Client(id=len(self.clients) + 1, tenant_id=tenant_id, **kwargs)
        self.clients[client.id] = client
        return client

    def snapshot(self):
        return deepcopy((self.clients, self.caseworkers, self.assignments))

    def restore(self, snap) -> None:
        self.clients, self.caseworkers, self.assignments = snap


class FakeClientRepo(ClientRepository):
    def __init__(self, db: InMemoryDb):
        self._db = db

    async def save(self, client):
        client.id = len(self._db.clients) + 1
        self._db.clients[client.id] = deepcopy(client)
        return client

    async def get_by_id(self, client_id):
        return deepcopy(self._db.clients.get(client_id))

    async def update(self, client):
        self._db.clients[client.id] = deepcopy(client)
        return client


class FakeCaseworkerRepo(CaseworkerRepository):
    def __init__(self, db: InMemoryDb):
        self._db = db

    async def save(self, caseworker):
        caseworker.id = len(self._db.caseworkers) + 1
        self._db.caseworkers[caseworker.id] = deepcopy(caseworker)
        return caseworker

    async def get_by_id(self, caseworker_id):
        return deepcopy(self._db.caseworkers.get(caseworker_id))

    async def get_by_tenant(self, tenant_id):
        return [
            deepcopy(c) for c in sorted(self._db.caseworkers.values(), key=lambda c: c.id)
            if c.tenant_id == tenant_id
        ]

    async def list_available(self, tenant_id, exclude=()):
        found = [
            c for c in self._db.caseworkers.values()
            if c.tenant_id == tenant_id and c.is_available_for_assignment() and c.id not in exclude
        ]
        return [deepcopy(c) for c in sorted(found, key=lambda c: (c.current_workload, c.id))]

    async def increment_workload(self, caseworker_id):
        self._db.caseworkers[caseworker_id].current_workload += 1

    async def decrement_workload(self, caseworker_id):
        cw = self._db.caseworkers[caseworker_id]
        cw.current_workload = max(cw.current_workload - 1, 0)

    async def record_completion(self, caseworker_id, final_status):
        cw = self._db.caseworkers[caseworker_id]
        cw.current_workload = max(cw.current_workload - 1, 0)
        cw.completed_cases += 1
        if final_status == FinalCaseStatus.APPROVED:
            cw.successful_cases += 1
        elif final_status == FinalCaseStatus.REJECTED:
            cw.rejected_cases += 1
        cw.case_success_rate = success_rate(cw.successful_cases, cw.completed_cases)


class FakeAssignmentRepo(AssignmentRepository):
    def __init__(self, db: InMemoryDb):
        self._db = db

    async def add(self, assignment):
        for a in self._db.assignments.values():
            if (
                a.client_id == assignment.client_id
                and a.tenant_id == assignment.tenant_id
                and a.status in OPEN_STATUSES
            ):
                raise Conflict(f"Client {assignment.client_id} already has an active assignment")
        assignment.id = len(self._db.assignments) + 1
        self._db.assignments[assignment.id] = deepcopy(assignment)
        return assignment

    async def update(self, assignment):
        self._db.assignments[assignment.id] = deepcopy(assignment)
        return assignment

    async def get_by_id(self, assignment_id):
        return deepcopy(self._db.assignments.get(assignment_id))

    async def get_for_update(self, assignment_id):
        return deepcopy(self._db.assignments.get(assignment_id))

    async def find_open_for_client(self, client_id, tenant_id):
        for a in self._db.assignments.values():
            if a.client_id == client_id and a.tenant_id == tenant_id and a.is_open():
                return deepcopy(a)
        return None

    async def list_by_caseworker(self, caseworker_id, statuses=None):
        found = [
            a for a in self._db.assignments.values()
            if a.current_caseworker_id == caseworker_id
            and (statuses is None or a.status in statuses)
        ]
        found.sort(key=lambda a: (a.assigned_date, a.id), reverse=True)
        return deepcopy(found)

    async def list_overdue(self, now):
        found = [
            a for a in self._db.assignments.values()
            if a.status == AssignmentStatus.PENDING
            and a.auto_reassignment_enabled
            and a.acceptance_deadline < now
        ]
        found.sort(key=lambda a: (a.acceptance_deadline, a.id))
        return deepcopy(found)

    async def list_requiring_attention(self, tenant_id):
        return [
            deepcopy(a) for a in self._db.assignments.values()
            if a.tenant_id == tenant_id and a.requires_attention
        ]

    @asynccontextmanager
    async def _savepoint(self):
        snap = self._db.snapshot()
        try:
            yield
        except Exception:
            self._db.restore(snap)
            raise

    def savepoint(self):
        return self._savepoint()

    async def try_acquire_sweep_lock(self):
        return self._db.sweep_lock_free


class RecordingAuditSink(AuditSink):
    def __init__(self):
        self.events = []
        self.fail = False

    async def publish(self, event):
        if self.fail:
            raise RuntimeError("audit backend unavailable")
        self.events.append(event)


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db():
    return InMemoryDb()


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def assignment_repo(db):
    return FakeAssignmentRepo(db)


@pytest.fixture
def caseworker_repo(db):
    return FakeCaseworkerRepo(db)


@pytest.fixture
def client_repo(db):
    return FakeClientRepo(db)


@pytest.fixture
def selector(caseworker_repo):
    return CandidateSelector(caseworker_repo)


@pytest.fixture
def orchestrator(assignment_repo, caseworker_repo, client_repo, selector, audit, clock):
    return AssignmentOrchestrator(
        assignment_repo=assignment_repo,
        caseworker_repo=caseworker_repo,
        client_repo=client_repo,
        selector=selector,
        audit=audit,
        clock=clock,
    )


@pytest.fixture
def sweep_lock():
    return asyncio.Lock()


@pytest.fixture
def sweep(orchestrator, assignment_repo, selector, sweep_lock, clock):
    return EscalationSweepUseCase(
        orchestrator=orchestrator,
        assignment_repo=assignment_repo,
        selector=selector,
        lock=sweep_lock,
        clock=clock,
    )


@pytest.fixture
def bulk_reassign(orchestrator, assignment_repo):
    return BulkReassignUseCase(orchestrator=orchestrator, assignment_repo=assignment_repo)


@pytest.fixture
def queries(assignment_repo, caseworker_repo, clock):
    return AssignmentQueries(
        assignment_repo=assignment_repo,
        caseworker_repo=caseworker_repo,
        clock=clock,
    )
