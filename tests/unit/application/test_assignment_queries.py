"""Tests for AssignmentQueries with in-memory fakes."""

from __future__ import annotations

import pytest

from caseflow.domain.errors import NotFound
from caseflow.domain.value_objects.enums import AssignmentStatus, FinalCaseStatus

ADMIN = 900


async def _assign(orchestrator, db, caseworker):
    client = db.add_client(tenant_id=caseworker.tenant_id)
    return await orchestrator.assign_client(
        client_id=client.id,
        tenant_id=client.tenant_id,
        caseworker_id=caseworker.id,
        assigned_by=ADMIN,
    )


@pytest.mark.asyncio
async def test_get_assignment(orchestrator, queries, db):
    a = await _assign(orchestrator, db, db.add_caseworker())
    assert (await queries.get_assignment(a.id)).client_id == a.client_id

    with pytest.raises(NotFound):
        await queries.get_assignment(404)


@pytest.mark.asyncio
async def test_list_by_caseworker_newest_first_with_status_filter(orchestrator, queries, db, clock):
    cw = db.add_caseworker()
    older = await _assign(orchestrator, db, cw)
    clock.advance(hours=1)
    newer = await _assign(orchestrator, db, cw)
    await orchestrator.accept_assignment(older.id, cw.id)

    everything = await queries.list_by_caseworker(cw.id)
    assert [a.id for a in everything] == [newer.id, older.id]

    accepted = await queries.list_by_caseworker(cw.id, AssignmentStatus.ACCEPTED)
    assert [a.id for a in accepted] == [older.id]


@pytest.mark.asyncio
async def test_caseworker_stats(orchestrator, queries, db, clock):
    cw = db.add_caseworker()
    overdue = await _assign(orchestrator, db, cw)
    to_accept = await _assign(orchestrator, db, cw)
    to_complete = await _assign(orchestrator, db, cw)

    clock.advance(hours=2)
    await orchestrator.accept_assignment(to_accept.id, cw.id)
    clock.advance(hours=2)
    await orchestrator.accept_assignment(to_complete.id, cw.id)
    await orchestrator.complete_assignment(to_complete.id, FinalCaseStatus.APPROVED)
    clock.advance(days=2)

    stats = await queries.caseworker_stats(cw.id)

    assert stats.total_assignments == 3
    assert stats.pending_assignments == 1
    assert stats.accepted_assignments == 1
    assert stats.completed_assignments == 1
    assert stats.average_acceptance_time_hours == 3.0
    assert stats.overdue_assignments == 1
    assert overdue.id in {a.id for a in await queries.list_by_caseworker(cw.id, AssignmentStatus.PENDING)}


@pytest.mark.asyncio
async def test_caseworker_stats_unknown_caseworker(queries):
    with pytest.raises(NotFound):
        await queries.caseworker_stats(404)


@pytest.mark.asyncio
async def test_tenant_overview(orchestrator, queries, db):
    busy, idle = db.add_caseworker(), db.add_caseworker()
    db.add_caseworker(tenant_id=2)
    await _assign(orchestrator, db, busy)
    await _assign(orchestrator, db, busy)

    overview = await queries.tenant_overview(1)

    assert [o.caseworker.id for o in overview] == [busy.id, idle.id]
    assert overview[0].caseworker.current_workload == 2
    assert overview[0].stats.pending_assignments == 2
    assert overview[1].stats.total_assignments == 0


@pytest.mark.asyncio
async def test_attention_queue(orchestrator, queries, db):
    cw = db.add_caseworker()
    quiet = await _assign(orchestrator, db, cw)
    flagged = await _assign(orchestrator, db, cw)
    await orchestrator.flag_for_attention(flagged.id, close=False)

    queue = await queries.list_requiring_attention(1)

    assert [a.id for a in queue] == [flagged.id]
    assert quiet.id not in {a.id for a in queue}
