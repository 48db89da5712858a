"""DataPermissionRule entity - conditional row-level restriction."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from quillgate.domain.value_objects import PermissionAction, ValidityWindow


@dataclass
class DataPermissionRule:
    """Restricts which records of a resource type the owner may operate on.

    Owner is a user or a role; a rule with neither is inert.
    """

    id: UUID
    resource_type: str
    operation: PermissionAction
    conditions: str
    granted_by: str
    effective_from: datetime
    created_at: datetime
    updated_at: datetime
    user_id: str | None = None
    role_id: UUID | None = None
    effective_to: datetime | None = None
    is_active: bool = True
    remarks: str | None = None
    row_version: int = 1

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(self.effective_from, self.effective_to)

    @property
    def is_inert(self) -> bool:
        return self.user_id is None and self.role_id is None

    def is_effective(self, as_of: datetime) -> bool:
        return self.is_active and self.window.contains(as_of)

    def applies_to(self, user_id: str, role_ids: list[UUID]) -> bool:
        if self.user_id is not None and self.user_id == user_id:
            return True
        return self.role_id is not None and self.role_id in role_ids
