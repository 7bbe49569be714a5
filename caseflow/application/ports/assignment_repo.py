"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from caseflow.domain.entities.assignment import Assignment
from caseflow.domain.value_objects.enums import AssignmentStatus


class AssignmentRepository(ABC):
    @abstractmethod
    async def add(self, assignment: Assignment) -> Assignment:
        """Insert a new assignment with its history.

        Raises Conflict if the client already has an open assignment in the tenant.
        """
        ...

    @abstractmethod
    async def update(self, assignment: Assignment) -> Assignment:
        """Persist scalar changes and any appended/back-filled history entries."""
        ...

    @abstractmethod
    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def get_for_update(self, assignment_id: int) -> Assignment | None:
        """Load the assignment and hold it exclusively until the transaction ends."""
        ...

    @abstractmethod
    async def find_open_for_client(self, client_id: int, tenant_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def list_by_caseworker(
        self,
        caseworker_id: int,
        statuses: frozenset[AssignmentStatus] | None = None,
    ) -> list[Assignment]:
        """Assignments currently held by the caseworker, newest assigned_date first."""
        ...

    @abstractmethod
    async def list_overdue(self, now: datetime) -> list[Assignment]:
        """Pending, auto-reassignment-enabled assignments with a deadline before *now*."""
        ...

    @abstractmethod
    async def list_requiring_attention(self, tenant_id: int) -> list[Assignment]:
        ...

    @abstractmethod
    def savepoint(self) -> AbstractAsyncContextManager:
        """Nested transaction: a failure inside rolls back only the enclosed work."""
        ...

    @abstractmethod
    async def try_acquire_sweep_lock(self) -> bool:
        """Non-blocking, transaction-scoped lock that keeps sweeps from overlapping."""
        ...
