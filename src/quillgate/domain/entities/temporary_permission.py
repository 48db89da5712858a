"""TemporaryPermission entity - direct, time-bounded grant to a user."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from quillgate.domain.value_objects import GrantState, PermissionAction, ValidityWindow


@dataclass
class TemporaryPermission:
    """Temporary grant of an operation on a resource type (or one resource).

    Expiry is time-relative and never stored; revocation is the only mutation
    and it is one-way.
    """

    id: UUID
    user_id: str
    resource_type: str
    operation: PermissionAction
    granted_by: str
    reason: str
    effective_from: datetime
    expires_at: datetime
    created_at: datetime
    resource_id: str | None = None
    delegated_from: UUID | None = None
    allow_delegation: bool = True
    is_revoked: bool = False
    revoked_by: str | None = None
    revoke_reason: str | None = None
    revoked_at: datetime | None = None
    row_version: int = 1

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(self.effective_from, self.expires_at)

    def state(self, as_of: datetime) -> GrantState:
        if self.is_revoked:
            return GrantState.REVOKED
        window = self.window
        if window.is_pending(as_of):
            return GrantState.PENDING
        if window.is_expired(as_of):
            return GrantState.EXPIRED
        return GrantState.ACTIVE

    def is_active(self, as_of: datetime) -> bool:
        return self.state(as_of) is GrantState.ACTIVE

    def covers(self, resource_type: str, resource_id: str | None, operation: PermissionAction) -> bool:
        """Scope match, ignoring time. A grant without resource_id covers the whole type."""
        if self.resource_type != resource_type:
            return False
        if self.operation != operation and self.operation != PermissionAction.ADMIN:
            return False
        return self.resource_id is None or self.resource_id == resource_id

    def revoke(self, revoked_by: str, reason: str, at: datetime) -> None:
        self.is_revoked = True
        self.revoked_by = revoked_by
        self.revoke_reason = reason
        self.revoked_at = at
