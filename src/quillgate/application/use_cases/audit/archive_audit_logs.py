"""Archive audit logs use case."""

import logging
from datetime import datetime

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog
from quillgate.domain.exceptions import PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction, RiskLevel

logger = logging.getLogger(__name__)


class ArchiveAuditLogsUseCase:
    """Mark entries older than a cutoff as archived. Entries are never deleted."""

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

    async def execute(self, actor_id: str, before: datetime) -> int:
        has_admin = await self._permission_checker.check(
            actor_id, "audit_log", PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied("User does not have admin access to audit logs")

        now = self._clock()
        if before > now:
            raise ValidationError("Cannot archive entries from the future")

        async with self._uow_factory() as uow:
            archived = await uow.audit_logs.archive_before(before, now)
            await self._audit.record(
                uow,
                AuditLog(
                    action="AuditLogsArchived",
                    category="Audit",
                    resource_type="audit_log",
                    user_id=actor_id,
                    risk_level=RiskLevel.MEDIUM,
                    new_values=to_snapshot({"before": before, "archived": archived}),
                ),
            )
        logger.info("Archived %d audit entries created before %s", archived, before.isoformat())
        return archived
