"""CandidateSelector — finds the best available caseworker for a client."""

from __future__ import annotations

import logging
from collections.abc import Collection

from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.policies.candidate_selection import select_caseworker

logger = logging.getLogger(__name__)


class CandidateSelector:
    def __init__(self, caseworker_repo: CaseworkerRepository):
        self._caseworkers = caseworker_repo

    async def select(
        self,
        tenant_id: int,
        case_type: str | None = None,
        exclude: Collection[int] = (),
    ) -> Caseworker | None:
        population = await self._caseworkers.list_available(tenant_id, exclude)
        chosen = select_caseworker(population, tenant_id, case_type, exclude)

        if chosen is None:
            logger.info(
                "Tenant %s: no available caseworker (case_type=%s, excluded=%s)",
                tenant_id, case_type, sorted(exclude),
            )
        else:
            logger.debug(
                "Tenant %s: selected caseworker %s (workload=%d, case_type=%s)",
                tenant_id, chosen.id, chosen.current_workload, case_type,
            )
        return chosen
