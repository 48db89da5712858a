"""List data permission rules use case."""

from quillgate.application.ports import PermissionChecker
from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.exceptions import PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction


class ListDataRulesUseCase:
    """List rules of a resource type for one of its admins."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(
        self, actor_id: str, resource_type: str, include_inactive: bool = False
    ) -> list[DataPermissionRule]:
        if not resource_type:
            raise ValidationError("resource_type is required")
        has_admin = await self._permission_checker.check(
            actor_id, resource_type, PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied(f"User does not have admin access to {resource_type}")

        async with self._uow_factory() as uow:
            return await uow.data_rules.list(
                resource_type=resource_type, include_inactive=include_inactive
            )
