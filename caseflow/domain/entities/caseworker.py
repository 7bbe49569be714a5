"""Caseworker entity — a tenant staff member who can hold client assignments."""

from dataclasses import dataclass, field


@dataclass
class Caseworker:
    id: int | None
    tenant_id: int
    display_name: str
    is_active: bool = True
    is_available_for_new_clients: bool = True
    max_client_capacity: int | None = None
    current_workload: int = 0
    specialization: set[str] = field(default_factory=set)
    completed_cases: int = 0
    successful_cases: int = 0
    rejected_cases: int = 0
    case_success_rate: int | None = None

    def has_specialization(self, case_type: str) -> bool:
        return case_type in self.specialization

    def is_available_for_assignment(self) -> bool:
        return self.is_active and self.is_available_for_new_clients

    def is_at_capacity(self) -> bool:
        if self.max_client_capacity is None:
            return False
        return self.current_workload >= self.max_client_capacity
