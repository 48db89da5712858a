"""List the data permission rules in effect for one user."""

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import GrantResolver
from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction


class ListUserDataRulesUseCase:
    """Rules owned by the user or by one of the user's active roles, effective now."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        grant_resolver: GrantResolver,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._grants = grant_resolver
        self._clock = clock

    async def execute(
        self, actor_id: str, user_id: str, resource_type: str | None = None
    ) -> list[DataPermissionRule]:
        if actor_id != user_id:
            has_admin = await self._permission_checker.check(
                actor_id, "permissions", PermissionAction.ADMIN
            )
            if not has_admin:
                raise PermissionDenied("User may only list their own data permission rules")

        now = self._clock()
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise NotFound("User", user_id)
            role_ids = await self._grants.active_role_ids(uow, user)
            rules = await uow.data_rules.list(resource_type=resource_type)
        return [
            r
            for r in rules
            if not r.is_inert and r.is_effective(now) and r.applies_to(user.id, role_ids)
        ]
