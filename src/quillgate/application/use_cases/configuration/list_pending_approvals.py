"""List configuration versions awaiting review."""

from uuid import UUID

from quillgate.application.ports import PermissionChecker
from quillgate.application.use_cases.configuration.activation import require_config_admin
from quillgate.domain.entities import ConfigurationVersion


class ListPendingApprovalsUseCase:
    """Pending versions, oldest first, for the reviewers of configuration changes."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(
        self, actor_id: str, configuration_id: UUID | None = None
    ) -> list[ConfigurationVersion]:
        await require_config_admin(self._permission_checker, actor_id)
        async with self._uow_factory() as uow:
            return await uow.configuration_versions.list_pending(configuration_id)
