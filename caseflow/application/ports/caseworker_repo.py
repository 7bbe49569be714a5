"""Port interface for the caseworker registry."""

from abc import ABC, abstractmethod
from collections.abc import Collection

from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.value_objects.enums import FinalCaseStatus


class CaseworkerRepository(ABC):
    @abstractmethod
    async def save(self, caseworker: Caseworker) -> Caseworker:
        ...

    @abstractmethod
    async def get_by_id(self, caseworker_id: int) -> Caseworker | None:
        ...

    @abstractmethod
    async def get_by_tenant(self, tenant_id: int) -> list[Caseworker]:
        ...

    @abstractmethod
    async def list_available(
        self,
        tenant_id: int,
        exclude: Collection[int] = (),
    ) -> list[Caseworker]:
        """Active caseworkers of the tenant accepting new clients, minus *exclude*."""
        ...

    @abstractmethod
    async def increment_workload(self, caseworker_id: int) -> None:
        """Atomic +1 on current_workload."""
        ...

    @abstractmethod
    async def decrement_workload(self, caseworker_id: int) -> None:
        """Atomic -1 on current_workload, never below zero."""
        ...

    @abstractmethod
    async def record_completion(self, caseworker_id: int, final_status: FinalCaseStatus) -> None:
        """Atomically release one workload slot and update the outcome counters.

        completed_cases += 1, successful/rejected += 1 for Approved/Rejected,
        case_success_rate recomputed from the new counters.
        """
        ...
