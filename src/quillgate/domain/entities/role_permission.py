"""RolePermission entity - static grant of a permission to a role."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class RolePermission:
    """Role-permission join. Deactivated or expired rows are kept for audit."""

    role_id: UUID
    permission_id: UUID
    granted_at: datetime
    granted_by: str | None = None
    expires_at: datetime | None = None
    is_active: bool = True
    row_version: int = 1

    @property
    def is_temporary(self) -> bool:
        return self.expires_at is not None

    def is_effective(self, as_of: datetime) -> bool:
        if not self.is_active:
            return False
        return self.expires_at is None or as_of <= self.expires_at
