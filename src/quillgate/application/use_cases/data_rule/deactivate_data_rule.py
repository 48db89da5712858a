"""Deactivate data permission rule use case."""

from uuid import UUID

from quillgate.application.ports import Clock, PermissionChecker, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog, DataPermissionRule
from quillgate.domain.exceptions import NotFound, PermissionDenied
from quillgate.domain.value_objects import PermissionAction, RiskLevel
from quillgate.infrastructure.rules import RuleCache


class DeactivateDataRuleUseCase:
    """Switch a rule off. Rules are never deleted."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        rule_cache: RuleCache,
        audit_recorder: AuditRecorder,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._rule_cache = rule_cache
        self._audit = audit_recorder
        self._clock = clock

    async def execute(self, actor_id: str, rule_id: UUID) -> DataPermissionRule:
        async with self._uow_factory() as uow:
            rule = await uow.data_rules.get_by_id(rule_id)
        if not rule:
            raise NotFound("DataPermissionRule", str(rule_id))

        has_admin = await self._permission_checker.check(
            actor_id, rule.resource_type, PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied(f"User does not have admin access to {rule.resource_type}")
        if not rule.is_active:
            return rule

        async with self._uow_factory() as uow:
            rule.is_active = False
            rule.updated_at = self._clock()
            await uow.data_rules.update(rule)
            await self._audit.record(
                uow,
                AuditLog(
                    action="DataRuleDeactivated",
                    category="PermissionManagement",
                    resource_type="data_permission_rule",
                    resource_id=str(rule.id),
                    resource_name=f"{rule.resource_type}.{rule.operation.value}",
                    user_id=actor_id,
                    risk_level=RiskLevel.HIGH,
                    old_values=to_snapshot({"is_active": True}),
                    new_values=to_snapshot({"is_active": False}),
                ),
            )

        self._rule_cache.invalidate(rule.resource_type, rule.operation)
        return rule
