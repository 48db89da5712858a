"""Revoke temporary permission use case."""

from uuid import UUID

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog, TemporaryPermission
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction, RiskLevel


class RevokeTemporaryPermissionUseCase:
    """Revoke a temporary grant and every grant delegated from it."""

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

    async def execute(self, revoker_id: str, grant_id: UUID, reason: str) -> list[UUID]:
        """Revoke grant_id and its delegates. Returns ids revoked by this call.

        Revoking an already revoked grant is a no-op.
        """
        async with self._uow_factory() as uow:
            grant = await uow.temporary_permissions.get_by_id(grant_id)
            if not grant:
                raise NotFound("TemporaryPermission", str(grant_id))
        if grant.is_revoked:
            return []

        if revoker_id != grant.granted_by:
            has_admin = await self._permission_checker.check(
                revoker_id, grant.resource_type, PermissionAction.ADMIN
            )
            if not has_admin:
                raise PermissionDenied(
                    "Only the grantor or an admin of the resource type can revoke"
                )

        now = self._clock()
        revoked: list[UUID] = []
        async with self._uow_factory() as uow:
            root = await uow.temporary_permissions.get_by_id(grant_id)
            queue: list[TemporaryPermission] = [root]
            seen: set[UUID] = set()
            while queue:
                current = queue.pop(0)
                if current.id in seen:
                    continue
                seen.add(current.id)

                if not current.is_revoked:
                    current_reason = (
                        reason if current.id == grant_id else f"Cascade from {grant_id}: {reason}"
                    )
                    current.revoke(revoker_id, current_reason, now)
                    await uow.temporary_permissions.update(current)
                    revoked.append(current.id)
                    await self._audit.record(
                        uow,
                        AuditLog(
                            action="TemporaryPermissionRevoked",
                            category="PermissionManagement",
                            resource_type="temporary_permission",
                            resource_id=str(current.id),
                            resource_name=f"{current.resource_type}.{current.operation.value}",
                            user_id=revoker_id,
                            risk_level=RiskLevel.MEDIUM,
                            old_values=to_snapshot({"is_revoked": False}),
                            new_values=to_snapshot({"is_revoked": True, "revoked_at": now}),
                            description=current_reason,
                        ),
                    )

                queue.extend(await uow.temporary_permissions.list_delegated_from(current.id))
        return revoked
