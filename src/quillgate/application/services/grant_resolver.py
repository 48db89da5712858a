"""Grant resolution - merges role grants and temporary grants."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from quillgate.domain.entities import TemporaryPermission, User
from quillgate.domain.value_objects import GrantState, PermissionAction

# Most informative reason first when a covering temporary grant is not active.
_INACTIVE_REASONS = (
    (GrantState.EXPIRED, "expired"),
    (GrantState.PENDING, "not yet effective"),
    (GrantState.REVOKED, "revoked"),
)


@dataclass
class GrantResolution:
    """Outcome of grant collection for one (user, resource, operation)."""

    granted: bool
    reason: str
    is_override: bool = False
    role_ids: list[UUID] = field(default_factory=list)


class GrantResolver:
    """Decides whether a user holds a permission through a role or a temporary grant."""

    def __init__(self, super_admin_permission: str) -> None:
        self._super_admin_permission = super_admin_permission

    async def active_role_ids(self, uow, user: User) -> list[UUID]:
        """Role ids of the user, skipping deleted or inactive roles."""
        if not user.role_ids:
            return []
        roles = await uow.roles.list_by_ids(user.role_ids)
        return [r.id for r in roles if r.is_active]

    async def resolve(
        self,
        uow,
        user: User,
        resource_type: str,
        resource_id: str | None,
        operation: PermissionAction,
        as_of: datetime,
    ) -> GrantResolution:
        role_ids = await self.active_role_ids(uow, user)
        permissions = await uow.role_permissions.list_effective_permissions(role_ids, as_of)

        if any(p.name == self._super_admin_permission for p in permissions):
            return GrantResolution(True, "super admin", is_override=True, role_ids=role_ids)

        if any(p.satisfies(resource_type, operation) for p in permissions):
            return GrantResolution(True, "role grant", role_ids=role_ids)

        grants = await uow.temporary_permissions.list_for_resource_type(user.id, resource_type)
        covering = [g for g in grants if g.covers(resource_type, resource_id, operation)]
        states = {await self._effective_state(uow, g, as_of) for g in covering}
        if GrantState.ACTIVE in states:
            return GrantResolution(True, "temporary grant", role_ids=role_ids)

        for state, reason in _INACTIVE_REASONS:
            if state in states:
                return GrantResolution(False, reason, role_ids=role_ids)
        return GrantResolution(False, "no grant", role_ids=role_ids)

    async def _effective_state(self, uow, grant: TemporaryPermission, as_of: datetime) -> GrantState:
        """State of grant, REVOKED when any grant it was delegated from is revoked."""
        state = grant.state(as_of)
        seen = {grant.id}
        parent_id = grant.delegated_from
        while state is GrantState.ACTIVE and parent_id is not None and parent_id not in seen:
            parent = await uow.temporary_permissions.get_by_id(parent_id)
            if parent is None or parent.is_revoked:
                return GrantState.REVOKED
            seen.add(parent.id)
            parent_id = parent.delegated_from
        return state
