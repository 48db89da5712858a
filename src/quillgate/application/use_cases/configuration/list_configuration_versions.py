"""List configuration versions use case."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.application.use_cases.configuration.activation import CONFIG_RESOURCE
from quillgate.domain.entities import ConfigurationVersion
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction


class ListConfigurationVersionsUseCase:
    """Version history of a configuration, newest first."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor_id: str, configuration_id: UUID) -> list[ConfigurationVersion]:
        has_read = await self._permission_checker.check(
            actor_id, CONFIG_RESOURCE, PermissionAction.READ
        )
        if not has_read:
            raise PermissionDenied("User does not have read access to system configuration")

        async with self._uow_factory() as uow:
            configuration = await uow.configurations.get_by_id(configuration_id)
            if not configuration:
                raise NotFound("SystemConfiguration", str(configuration_id))
            versions = await uow.configuration_versions.list_by_configuration(configuration_id)
        return sorted(versions, key=lambda v: v.version, reverse=True)
