"""Read a system configuration."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.application.use_cases.configuration.activation import CONFIG_RESOURCE
from quillgate.domain.entities import SystemConfiguration
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction


class GetConfigurationUseCase:
    """Current state of a configuration, by id or by section and key."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor_id: str, configuration_id: UUID) -> SystemConfiguration:
        await self._require_read(actor_id)
        async with self._uow_factory() as uow:
            configuration = await uow.configurations.get_by_id(configuration_id)
        if not configuration:
            raise NotFound("SystemConfiguration", str(configuration_id))
        return configuration

    async def by_key(self, actor_id: str, section: str, key: str) -> SystemConfiguration:
        await self._require_read(actor_id)
        async with self._uow_factory() as uow:
            configuration = await uow.configurations.get_by_key(section, key)
        if not configuration:
            raise NotFound("SystemConfiguration", f"{section}.{key}")
        return configuration

    async def _require_read(self, actor_id: str) -> None:
        has_read = await self._permission_checker.check(
            actor_id, CONFIG_RESOURCE, PermissionAction.READ
        )
        if not has_read:
            raise PermissionDenied("User does not have read access to system configuration")
