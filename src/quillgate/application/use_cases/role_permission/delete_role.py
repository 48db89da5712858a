"""Delete role use case."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.application.services import AuditRecorder
from quillgate.domain.entities import AuditLog
from quillgate.domain.exceptions import NotFound, PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction, RiskLevel


class DeleteRoleUseCase:
    """Soft-delete a role. System roles cannot be deleted."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        audit_recorder: AuditRecorder,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._audit = audit_recorder

    async def execute(self, actor_id: str, role_id: UUID) -> None:
        has_admin = await self._permission_checker.check(
            actor_id, "roles", PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied("User does not have admin access to roles")

        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            if role.is_system:
                raise ValidationError(f"System role {role.name} cannot be deleted")

            await uow.roles.soft_delete(role_id)
            await self._audit.record(
                uow,
                AuditLog(
                    action="RoleDeleted",
                    category="RoleManagement",
                    resource_type="role",
                    resource_id=str(role_id),
                    resource_name=role.name,
                    user_id=actor_id,
                    risk_level=RiskLevel.HIGH,
                    description=f"Soft-deleted role {role.name}",
                ),
            )
