"""Assign role permission use case."""

from datetime import datetime
from uuid import UUID

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog, RolePermission
from quillgate.domain.exceptions import NotFound, PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction, RiskLevel


class AssignRolePermissionUseCase:
    """Grant a permission to a role, optionally until an expiry."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        audit_recorder: AuditRecorder,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._audit = audit_recorder
        self._clock = clock

    async def execute(
        self,
        actor_id: str,
        role_id: UUID,
        permission_name: str,
        expires_at: datetime | None = None,
    ) -> RolePermission:
        """Assign permission to role. Actor must have admin on roles."""
        has_admin = await self._permission_checker.check(
            actor_id, "roles", PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied("User does not have admin access to roles")

        now = self._clock()
        if expires_at is not None and expires_at <= now:
            raise ValidationError("expires_at must be in the future")

        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            permission = await uow.permissions.get_by_name(permission_name)
            if not permission:
                raise NotFound("Permission", permission_name)

            existing = await uow.role_permissions.get(role_id, permission.id)
            before = None
            if existing:
                before = {"is_active": existing.is_active, "expires_at": existing.expires_at}
                existing.is_active = True
                existing.expires_at = expires_at
                existing.granted_at = now
                existing.granted_by = actor_id
                await uow.role_permissions.update(existing)
                role_permission = existing
            else:
                role_permission = RolePermission(
                    role_id=role_id,
                    permission_id=permission.id,
                    granted_at=now,
                    granted_by=actor_id,
                    expires_at=expires_at,
                )
                await uow.role_permissions.create(role_permission)

            await self._audit.record(
                uow,
                AuditLog(
                    action="RolePermissionAssigned",
                    category="RoleManagement",
                    resource_type="role",
                    resource_id=str(role_id),
                    resource_name=role.name,
                    user_id=actor_id,
                    risk_level=RiskLevel.MEDIUM,
                    old_values=to_snapshot(before),
                    new_values=to_snapshot(
                        {"permission": permission.name, "is_active": True, "expires_at": expires_at}
                    ),
                    description=f"Assigned {permission.name} to role {role.name}",
                ),
            )
            return role_permission
