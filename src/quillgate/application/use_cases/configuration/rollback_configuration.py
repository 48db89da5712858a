"""Rollback configuration use case."""

from uuid import UUID, uuid4

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
from quillgate.domain.value_objects import ApprovalStatus, ChangeType, ValueChecksum


class RollbackConfigurationUseCase:
    """Restore an earlier approved value as a new version. History is never rewritten."""

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
        configuration_id: UUID,
        target_version: int,
        reason: str | None = None,
    ) -> ConfigurationVersion:
        await require_config_admin(self._permission_checker, actor_id)

        now = self._clock()
        async with self._uow_factory() as uow:
            configuration = await uow.configurations.get_by_id(configuration_id)
            if not configuration:
                raise NotFound("SystemConfiguration", str(configuration_id))
            if configuration.is_read_only:
                raise GovernanceError(
                    f"Configuration {configuration.section}.{configuration.key} is read-only"
                )
            target = await uow.configuration_versions.get_by_number(
                configuration_id, target_version
            )
            if not target:
                raise NotFound("ConfigurationVersion", f"{configuration_id}/{target_version}")
            if target.approval_status is not ApprovalStatus.APPROVED or not target.can_rollback:
                raise GovernanceError(f"Version {target_version} cannot be rolled back to")
            if not target.is_intact:
                raise GovernanceError(f"Version {target_version} failed checksum verification")

            old_value = configuration.value
            version = ConfigurationVersion(
                id=uuid4(),
                configuration_id=configuration.id,
                version=await uow.configuration_versions.next_version_number(configuration.id),
                value=target.value,
                change_type=ChangeType.ROLLBACK,
                approval_status=ApprovalStatus.APPROVED,
                created_by=actor_id,
                created_at=now,
                checksum=ValueChecksum.of(target.value).value,
                change_reason=reason or f"Rollback to version {target_version}",
                approved_by=actor_id,
                approved_at=now,
            )
            await make_current(uow, configuration, version, now)
            await uow.configuration_versions.create(version)

            await self._audit.record(
                uow,
                AuditLog(
                    action="ConfigurationRolledBack",
                    category="Configuration",
                    resource_type=CONFIG_RESOURCE,
                    resource_id=str(configuration.id),
                    resource_name=f"{configuration.section}.{configuration.key}",
                    user_id=actor_id,
                    risk_level=risk_of(configuration),
                    old_values=to_snapshot({"value": old_value}),
                    new_values=to_snapshot(
                        {
                            "value": version.value,
                            "version": version.version,
                            "rolled_back_to": target_version,
                            "checksum": version.checksum,
                        }
                    ),
                    description=version.change_reason,
                ),
            )
        return version
