"""Role entity for RBAC."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class Role:
    """Role - named bundle of permissions. System roles cannot be deleted."""

    id: UUID
    name: str
    normalized_name: str
    is_system: bool = False
    is_active: bool = True
    deleted_at: datetime | None = None

    @classmethod
    def normalize(cls, name: str) -> str:
        return name.strip().upper()
