"""Propose configuration change use case."""

import logging
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
from quillgate.domain.exceptions import GovernanceError, NotFound, ValidationError
from quillgate.domain.value_objects import ApprovalStatus, ChangeType, ValueChecksum

logger = logging.getLogger(__name__)


class ProposeConfigurationChangeUseCase:
    """Record a new value as the next version.

    The version waits for review when the configuration needs approval;
    otherwise it is approved and applied at once.
    """

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
        new_value: str | None,
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
            error = configuration.validate_value(new_value)
            if error:
                logger.info("Rejected value for configuration %s: %s", configuration_id, error)
                raise ValidationError(error)

            pending = configuration.needs_approval
            old_value = configuration.value
            version = ConfigurationVersion(
                id=uuid4(),
                configuration_id=configuration.id,
                version=await uow.configuration_versions.next_version_number(configuration.id),
                value=new_value,
                change_type=ChangeType.UPDATE,
                approval_status=ApprovalStatus.PENDING if pending else ApprovalStatus.APPROVED,
                created_by=actor_id,
                created_at=now,
                checksum=ValueChecksum.of(new_value).value,
                change_reason=reason,
            )
            if not pending:
                version.approved_by = actor_id
                version.approved_at = now
                await make_current(uow, configuration, version, now)
            await uow.configuration_versions.create(version)

            await self._audit.record(
                uow,
                AuditLog(
                    action="ConfigurationChangeProposed" if pending else "ConfigurationChanged",
                    category="Configuration",
                    resource_type=CONFIG_RESOURCE,
                    resource_id=str(configuration.id),
                    resource_name=f"{configuration.section}.{configuration.key}",
                    user_id=actor_id,
                    risk_level=risk_of(configuration),
                    old_values=to_snapshot({"value": old_value}),
                    new_values=to_snapshot(
                        {
                            "value": new_value,
                            "version": version.version,
                            "checksum": version.checksum,
                            "approval_status": version.approval_status.value,
                        }
                    ),
                    description=reason,
                ),
            )
        return version
