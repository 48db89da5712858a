"""List temporary permissions use case."""

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.domain.entities import TemporaryPermission
from quillgate.domain.exceptions import PermissionDenied
from quillgate.domain.value_objects import PermissionAction


class ListTemporaryPermissionsUseCase:
    """List a user's grants. Users see their own; others need temporary_permission admin."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._clock = clock

    async def execute(
        self, actor_id: str, user_id: str, include_inactive: bool = False
    ) -> list[TemporaryPermission]:
        if actor_id != user_id:
            has_admin = await self._permission_checker.check(
                actor_id, "temporary_permission", PermissionAction.ADMIN
            )
            if not has_admin:
                raise PermissionDenied("User may only list their own temporary permissions")

        async with self._uow_factory() as uow:
            grants = await uow.temporary_permissions.list_by_user(user_id)
        if include_inactive:
            return grants
        now = self._clock()
        return [g for g in grants if g.is_active(now)]
