"""Revoke role permission use case."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction, RiskLevel


class RevokeRolePermissionUseCase:
    """Deactivate a role permission. The row is kept for audit."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        audit_recorder: AuditRecorder,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._audit = audit_recorder

    async def execute(
        self,
        actor_id: str,
        role_id: UUID,
        permission_id: UUID,
    ) -> None:
        """Revoke permission from role. Actor must have admin on roles."""
        has_admin = await self._permission_checker.check(
            actor_id, "roles", PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied("User does not have admin access to roles")

        async with self._uow_factory() as uow:
            role_permission = await uow.role_permissions.get(role_id, permission_id)
            if not role_permission:
                raise NotFound("RolePermission", f"{role_id}/{permission_id}")
            if not role_permission.is_active:
                return

            role_permission.is_active = False
            await uow.role_permissions.update(role_permission)

            permission = await uow.permissions.get_by_id(permission_id)
            await self._audit.record(
                uow,
                AuditLog(
                    action="RolePermissionRevoked",
                    category="RoleManagement",
                    resource_type="role",
                    resource_id=str(role_id),
                    user_id=actor_id,
                    risk_level=RiskLevel.HIGH,
                    old_values=to_snapshot({"is_active": True}),
                    new_values=to_snapshot({"is_active": False}),
                    description=(
                        f"Revoked {permission.name if permission else permission_id} "
                        f"from role {role_id}"
                    ),
                ),
            )
