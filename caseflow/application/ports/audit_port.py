"""Port interface for the audit/event sink."""

from abc import ABC, abstractmethod

from caseflow.domain.entities.assignment_event import AssignmentEvent


class AuditSink(ABC):
    @abstractmethod
    async def publish(self, event: AssignmentEvent) -> None:
        """Fire-and-forget. Callers log and ignore failures."""
        ...
