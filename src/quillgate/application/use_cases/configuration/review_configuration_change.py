"""Approve or reject a pending configuration version."""

from uuid import UUID

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.application.use_cases.configuration.activation import (
    CONFIG_RESOURCE,
    make_current,
    require_config_admin,
    risk_of,
)
from quillgate.domain.entities import AuditLog, ConfigurationVersion
from quillgate.domain.exceptions import GovernanceError, NotFound
from quillgate.domain.value_objects import ApprovalStatus


class ReviewConfigurationChangeUseCase:
    """Decide a pending version. Approval applies its value."""

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

    async def approve(
        self, actor_id: str, version_id: UUID, notes: str | None = None
    ) -> ConfigurationVersion:
        return await self._review(actor_id, version_id, notes, approve=True)

    async def reject(
        self, actor_id: str, version_id: UUID, notes: str | None = None
    ) -> ConfigurationVersion:
        return await self._review(actor_id, version_id, notes, approve=False)

    async def _review(
        self, actor_id: str, version_id: UUID, notes: str | None, *, approve: bool
    ) -> ConfigurationVersion:
        await require_config_admin(self._permission_checker, actor_id)

        now = self._clock()
        async with self._uow_factory() as uow:
            version = await uow.configuration_versions.get_by_id(version_id)
            if not version:
                raise NotFound("ConfigurationVersion", str(version_id))
            if version.approval_status is not ApprovalStatus.PENDING:
                raise GovernanceError(
                    f"Version {version.version} is {version.approval_status.value}, not pending"
                )
            configuration = await uow.configurations.get_by_id(version.configuration_id)
            if not configuration:
                raise NotFound("SystemConfiguration", str(version.configuration_id))
            if approve and version.version < configuration.current_version:
                raise GovernanceError(
                    f"Version {version.version} is superseded by current version "
                    f"{configuration.current_version}"
                )

            old_value = configuration.value
            version.approved_by = actor_id
            version.approved_at = now
            version.approval_notes = notes
            if approve:
                version.approval_status = ApprovalStatus.APPROVED
                await make_current(uow, configuration, version, now)
            else:
                version.approval_status = ApprovalStatus.REJECTED
                version.can_rollback = False
            await uow.configuration_versions.update(version)

            await self._audit.record(
                uow,
                AuditLog(
                    action=(
                        "ConfigurationChangeApproved" if approve else "ConfigurationChangeRejected"
                    ),
                    category="Configuration",
                    resource_type=CONFIG_RESOURCE,
                    resource_id=str(configuration.id),
                    resource_name=f"{configuration.section}.{configuration.key}",
                    user_id=actor_id,
                    risk_level=risk_of(configuration),
                    old_values=to_snapshot({"value": old_value}),
                    new_values=to_snapshot(
                        {
                            "value": configuration.value,
                            "version": version.version,
                            "checksum": version.checksum,
                            "approval_status": version.approval_status.value,
                        }
                    ),
                    description=notes,
                ),
            )
        return version
