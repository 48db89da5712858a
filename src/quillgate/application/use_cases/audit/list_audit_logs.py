"""List audit logs use case."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.domain.entities import AuditLog
from quillgate.domain.exceptions import PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction

MAX_PAGE_SIZE = 200


class ListAuditLogsUseCase:
    """Page through audit entries, newest first."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(
        self,
        actor_id: str,
        *,
        user_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        correlation_id: UUID | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None]:
        """List entries matching the filters. Returns (items, next_cursor)."""
        has_read = await self._permission_checker.check(
            actor_id, "audit_log", PermissionAction.READ
        )
        if not has_read:
            raise PermissionDenied("User does not have read access to audit logs")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        async with self._uow_factory() as uow:
            return await uow.audit_logs.list(
                user_id=user_id,
                resource_type=resource_type,
                resource_id=resource_id,
                correlation_id=correlation_id,
                cursor=cursor,
                limit=limit,
            )
