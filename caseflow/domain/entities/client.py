"""Client entity — the person whose case is being handled."""

from dataclasses import dataclass
from datetime import datetime

CLIENT_ROLE = "client"


@dataclass
class Client:
    id: int | None
    tenant_id: int
    role: str = CLIENT_ROLE
    assigned_to: int | None = None
    onboarded_by: int | None = None
    onboarding_date: datetime | None = None
    case_type: str | None = None
    case_status: str | None = None

    def is_client(self) -> bool:
        return self.role == CLIENT_ROLE
