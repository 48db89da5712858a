"""Role permission repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import Permission, RolePermission


class RolePermissionRepository(Protocol):
    """Port for static role grants."""

    async def get(self, role_id: UUID, permission_id: UUID) -> RolePermission | None: ...

    async def list_by_role(
        self, role_id: UUID, include_inactive: bool = False
    ) -> list[RolePermission]: ...

    async def list_effective_permissions(
        self, role_ids: list[UUID], as_of: datetime
    ) -> list[Permission]: ...

    async def create(self, role_permission: RolePermission) -> RolePermission: ...

    async def update(self, role_permission: RolePermission) -> None: ...
