"""Tests for EscalationSweepUseCase with in-memory fakes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from caseflow.application.use_cases.escalation_sweep import AUTO_REASSIGN_REASON
from caseflow.domain.value_objects.enums import AssignmentStatus, EventKind

ADMIN = 900


async def _assign(orchestrator, client, caseworker):
    return await orchestrator.assign_client(
        client_id=client.id,
        tenant_id=client.tenant_id,
        caseworker_id=caseworker.id,
        assigned_by=ADMIN,
    )


def _pass_deadline(clock, db, assignment_id):
    clock.now = db.assignments[assignment_id].acceptance_deadline + timedelta(hours=1)


@pytest.mark.asyncio
async def test_overdue_assignment_is_reassigned(orchestrator, sweep, db, clock, audit):
    a_cw, b_cw = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), a_cw)

    # Monday 09:00 + 24 business hours = Tuesday 09:00; sweep at 10:00
    clock.now = datetime(2026, 10, 20, 10, 0, tzinfo=timezone.utc)
    result = await sweep.execute()

    assert result.processed == 1
    assert result.reassigned == 1
    assert result.flagged == 0
    assert result.failed == 0
    assert not result.skipped

    stored = db.assignments[a.id]
    assert stored.status == AssignmentStatus.PENDING
    assert stored.current_caseworker_id == b_cw.id
    assert stored.auto_reassignment_attempts == 1
    assert stored.is_auto_reassigned
    assert stored.acceptance_deadline == datetime(2026, 10, 21, 10, 0, tzinfo=timezone.utc)
    assert len(stored.history) == 2
    assert stored.history[0].reassigned_date == clock.now
    assert stored.history[1].assigned_by is None
    assert stored.history[1].reassign_reason == AUTO_REASSIGN_REASON

    assert db.caseworkers[a_cw.id].current_workload == 0
    assert db.caseworkers[b_cw.id].current_workload == 1
    assert audit.events[-1].kind == EventKind.REASSIGNED
    assert audit.events[-1].actor_id is None


@pytest.mark.asyncio
async def test_assignment_not_yet_due_is_left_alone(orchestrator, sweep, db, clock):
    cw = db.add_caseworker()
    db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    clock.advance(hours=23)

    result = await sweep.execute()

    assert result.processed == 0
    assert db.assignments[a.id].current_caseworker_id == cw.id


@pytest.mark.asyncio
async def test_accepted_assignment_is_never_escalated(orchestrator, sweep, db, clock):
    cw, _ = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    await orchestrator.accept_assignment(a.id, cw.id)
    clock.advance(days=5)

    result = await sweep.execute()

    assert result.processed == 0
    assert db.assignments[a.id].status == AssignmentStatus.ACCEPTED


@pytest.mark.asyncio
async def test_auto_reassignment_disabled_is_skipped(orchestrator, sweep, db, clock):
    cw, _ = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    db.assignments[a.id].auto_reassignment_enabled = False
    clock.advance(days=5)

    result = await sweep.execute()

    assert result.processed == 0
    assert db.assignments[a.id].current_caseworker_id == cw.id


@pytest.mark.asyncio
async def test_escalation_stops_after_three_attempts(orchestrator, sweep, db, clock):
    a_cw, b_cw = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), a_cw)

    holders = []
    for _ in range(3):
        _pass_deadline(clock, db, a.id)
        result = await sweep.execute()
        assert result.reassigned == 1
        holders.append(db.assignments[a.id].current_caseworker_id)

    assert holders == [b_cw.id, a_cw.id, b_cw.id]
    assert db.assignments[a.id].auto_reassignment_attempts == 3

    _pass_deadline(clock, db, a.id)
    result = await sweep.execute()

    assert result.reassigned == 0
    assert result.flagged == 1
    stored = db.assignments[a.id]
    assert stored.status == AssignmentStatus.REASSIGNED
    assert stored.requires_attention
    assert stored.auto_reassignment_attempts == 3
    assert len(stored.history) == 4
    assert db.caseworkers[a_cw.id].current_workload == 0
    assert db.caseworkers[b_cw.id].current_workload == 0

    # Closed assignments drop out of later sweeps
    clock.advance(days=3)
    assert (await sweep.execute()).processed == 0


@pytest.mark.asyncio
async def test_no_candidate_flags_but_keeps_pending(orchestrator, sweep, db, clock):
    only = db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), only)
    _pass_deadline(clock, db, a.id)

    result = await sweep.execute()

    assert result.flagged == 1
    stored = db.assignments[a.id]
    assert stored.status == AssignmentStatus.PENDING
    assert stored.requires_attention
    assert stored.current_caseworker_id == only.id
    assert stored.auto_reassignment_attempts == 0
    assert db.caseworkers[only.id].current_workload == 1


@pytest.mark.asyncio
async def test_candidate_must_share_the_tenant(orchestrator, sweep, db, clock):
    cw = db.add_caseworker(tenant_id=1)
    db.add_caseworker(tenant_id=2)
    a = await _assign(orchestrator, db.add_client(tenant_id=1), cw)
    _pass_deadline(clock, db, a.id)

    result = await sweep.execute()

    assert result.flagged == 1
    assert db.assignments[a.id].current_caseworker_id == cw.id


@pytest.mark.asyncio
async def test_failed_item_is_rolled_back_and_counted(
    orchestrator, sweep, db, clock, monkeypatch,
):
    a_cw, b_cw = db.add_caseworker(), db.add_caseworker()
    first = await _assign(orchestrator, db.add_client(), a_cw)
    second = await _assign(orchestrator, db.add_client(), a_cw)
    _pass_deadline(clock, db, second.id)

    real_reassign = orchestrator.reassign_client

    async def flaky_reassign(**kwargs):
        result = await real_reassign(**kwargs)
        if kwargs["assignment_id"] == first.id:
            raise RuntimeError("connection reset")
        return result

    monkeypatch.setattr(orchestrator, "reassign_client", flaky_reassign)

    result = await sweep.execute()

    assert result.processed == 2
    assert result.reassigned == 1
    assert result.failed == 1
    assert db.assignments[first.id].current_caseworker_id == a_cw.id
    assert db.assignments[second.id].current_caseworker_id == b_cw.id
    assert db.caseworkers[a_cw.id].current_workload == 1
    assert db.caseworkers[b_cw.id].current_workload == 1


@pytest.mark.asyncio
async def test_overlapping_sweep_in_process_is_skipped(orchestrator, sweep, sweep_lock, db, clock):
    cw, _ = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    _pass_deadline(clock, db, a.id)

    async with sweep_lock:
        result = await sweep.execute()

    assert result.skipped
    assert result.processed == 0
    assert db.assignments[a.id].current_caseworker_id == cw.id


@pytest.mark.asyncio
async def test_sweep_running_elsewhere_is_skipped(orchestrator, sweep, db, clock):
    cw, _ = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    _pass_deadline(clock, db, a.id)
    db.sweep_lock_free = False

    result = await sweep.execute()

    assert result.skipped
    assert db.assignments[a.id].current_caseworker_id == cw.id


@pytest.mark.asyncio
async def test_accept_racing_the_scan_makes_item_a_noop(
    orchestrator, sweep, assignment_repo, db, clock, monkeypatch,
):
    cw, _ = db.add_caseworker(), db.add_caseworker()
    a = await _assign(orchestrator, db.add_client(), cw)
    _pass_deadline(clock, db, a.id)

    real_list_overdue = assignment_repo.list_overdue

    async def list_then_accept(now):
        found = await real_list_overdue(now)
        await orchestrator.accept_assignment(a.id, cw.id)
        return found

    monkeypatch.setattr(assignment_repo, "list_overdue", list_then_accept)

    result = await sweep.execute()

    assert result.processed == 1
    assert result.skipped_items == 1
    assert result.reassigned == 0
    assert db.assignments[a.id].status == AssignmentStatus.ACCEPTED
