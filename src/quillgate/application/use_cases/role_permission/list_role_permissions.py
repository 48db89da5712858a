"""List role permissions use case."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.domain.entities import RolePermission
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction


class ListRolePermissionsUseCase:
    """List the permission rows of a role."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(
        self, actor_id: str, role_id: UUID, include_inactive: bool = False
    ) -> list[RolePermission]:
        has_read = await self._permission_checker.check(actor_id, "roles", PermissionAction.READ)
        if not has_read:
            raise PermissionDenied("User does not have read access to roles")

        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            return await uow.role_permissions.list_by_role(role_id, include_inactive=include_inactive)
