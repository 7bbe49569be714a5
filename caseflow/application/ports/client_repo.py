"""Port interface for the client directory."""

from abc import ABC, abstractmethod

from caseflow.domain.entities.client import Client


class ClientRepository(ABC):
    @abstractmethod
    async def save(self, client: Client) -> Client:
        ...

    @abstractmethod
    async def get_by_id(self, client_id: int) -> Client | None:
        ...

    @abstractmethod
    async def update(self, client: Client) -> Client:
        """Write back the assignment pointer and case mirror fields."""
        ...
