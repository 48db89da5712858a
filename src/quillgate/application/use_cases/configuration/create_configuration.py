"""Create configuration use case."""

import logging
from uuid import uuid4

from quillgate.application.dto.configuration_dto import CreateConfigurationInput
from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.application.use_cases.configuration.activation import (
    CONFIG_RESOURCE,
    require_config_admin,
    risk_of,
)
from quillgate.domain.entities import AuditLog, ConfigurationVersion, SystemConfiguration
from quillgate.domain.exceptions import ValidationError
from quillgate.domain.value_objects import ApprovalStatus, ChangeType, ValueChecksum

logger = logging.getLogger(__name__)


class CreateConfigurationUseCase:
    """Create a configuration key with its approved first version."""

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
        self, actor_id: str, input_data: CreateConfigurationInput
    ) -> SystemConfiguration:
        await require_config_admin(self._permission_checker, actor_id)

        if not input_data.section.strip() or not input_data.key.strip():
            raise ValidationError("section and key are required")

        now = self._clock()
        configuration = SystemConfiguration(
            id=uuid4(),
            section=input_data.section,
            key=input_data.key,
            value=input_data.value,
            data_type=input_data.data_type,
            description=input_data.description,
            criticality=input_data.criticality,
            requires_approval=input_data.requires_approval,
            is_read_only=input_data.is_read_only,
            created_at=now,
            updated_at=now,
        )
        error = configuration.validate_value(input_data.value)
        if error:
            logger.info("Rejected configuration %s.%s: %s", input_data.section, input_data.key, error)
            raise ValidationError(error)

        checksum = ValueChecksum.of(input_data.value).value
        async with self._uow_factory() as uow:
            existing = await uow.configurations.get_by_key(input_data.section, input_data.key)
            if existing:
                raise ValidationError(
                    f"Configuration already exists: {input_data.section}.{input_data.key}"
                )

            await uow.configurations.create(configuration)
            await uow.configuration_versions.create(
                ConfigurationVersion(
                    id=uuid4(),
                    configuration_id=configuration.id,
                    version=1,
                    value=input_data.value,
                    change_type=ChangeType.CREATE,
                    approval_status=ApprovalStatus.APPROVED,
                    created_by=actor_id,
                    created_at=now,
                    checksum=checksum,
                    approved_by=actor_id,
                    approved_at=now,
                    is_current=True,
                )
            )
            await self._audit.record(
                uow,
                AuditLog(
                    action="ConfigurationCreated",
                    category="Configuration",
                    resource_type=CONFIG_RESOURCE,
                    resource_id=str(configuration.id),
                    resource_name=f"{configuration.section}.{configuration.key}",
                    user_id=actor_id,
                    risk_level=risk_of(configuration),
                    new_values=to_snapshot(
                        {"value": configuration.value, "version": 1, "checksum": checksum}
                    ),
                ),
            )
        return configuration
