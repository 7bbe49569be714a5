"""CandidateSelectionPolicy — least-loaded caseworker, specialists first."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from caseflow.domain.entities.caseworker import Caseworker


def eligible_caseworkers(
    caseworkers: Iterable[Caseworker],
    tenant_id: int,
    exclude: Collection[int] = (),
) -> list[Caseworker]:
    """Active, available caseworkers of *tenant_id* that are not excluded."""
    return [
        c for c in caseworkers
        if c.tenant_id == tenant_id
        and c.is_available_for_assignment()
        and c.id not in exclude
    ]


def pick_least_loaded(candidates: list[Caseworker]) -> Caseworker | None:
    """Lowest current_workload wins; ties go to the lowest id."""
    if not candidates:
        return None
    return min(candidates, key=lambda c: (c.current_workload, c.id))


def select_caseworker(
    caseworkers: Iterable[Caseworker],
    tenant_id: int,
    case_type: str | None = None,
    exclude: Collection[int] = (),
) -> Caseworker | None:
    """Pure function: choose who should take a client.

    1. Population = active caseworkers of the tenant that accept new clients,
       minus *exclude*.
    2. With *case_type*, prefer the least-loaded specialist for it.
    3. Otherwise (or with no specialist) the least-loaded of the population.

    Returns None when the population is empty.
    """
    population = eligible_caseworkers(caseworkers, tenant_id, exclude)

    if case_type:
        specialists = [c for c in population if c.has_specialization(case_type)]
        chosen = pick_least_loaded(specialists)
        if chosen is not None:
            return chosen

    return pick_least_loaded(population)
