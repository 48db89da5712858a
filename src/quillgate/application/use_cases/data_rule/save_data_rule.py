"""Save data permission rule use case."""

import logging
from uuid import uuid4

from quillgate.application.dto.data_rule_dto import SaveDataRuleInput
from quillgate.application.ports import Clock, PermissionChecker, RuleEngine, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.domain.entities import AuditLog, DataPermissionRule
from quillgate.domain.exceptions import (
    ConcurrentModification,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from quillgate.domain.value_objects import PermissionAction, RiskLevel, ValidityWindow
from quillgate.infrastructure.rules import RuleCache

logger = logging.getLogger(__name__)


def rule_snapshot(rule: DataPermissionRule) -> dict[str, object]:
    return {
        "resource_type": rule.resource_type,
        "operation": rule.operation.value,
        "conditions": rule.conditions,
        "user_id": rule.user_id,
        "role_id": rule.role_id,
        "effective_from": rule.effective_from,
        "effective_to": rule.effective_to,
        "is_active": rule.is_active,
    }


class SaveDataRuleUseCase:
    """Create or update a data permission rule and invalidate its cached bucket."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
        rule_engine: RuleEngine,
        rule_cache: RuleCache,
        audit_recorder: AuditRecorder,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker
        self._rule_engine = rule_engine
        self._rule_cache = rule_cache
        self._audit = audit_recorder
        self._clock = clock

    async def execute(self, actor_id: str, input_data: SaveDataRuleInput) -> DataPermissionRule:
        """Save rule. Actor must have admin on the rule's resource type."""
        has_admin = await self._permission_checker.check(
            actor_id, input_data.resource_type, PermissionAction.ADMIN
        )
        if not has_admin:
            raise PermissionDenied(
                f"User does not have admin access to {input_data.resource_type}"
            )

        now = self._clock()
        effective_from = input_data.effective_from or now
        try:
            if input_data.user_id is None and input_data.role_id is None:
                raise ValidationError("Rule needs a user or role owner")
            ValidityWindow(effective_from, input_data.effective_to)
            self._rule_engine.validate(input_data.conditions, input_data.resource_type)
        except ValidationError as e:
            logger.info("Rejected data rule from %s: %s", actor_id, e)
            raise

        async with self._uow_factory() as uow:
            if input_data.role_id is not None:
                role = await uow.roles.get_by_id(input_data.role_id)
                if not role:
                    raise NotFound("Role", str(input_data.role_id))

            if input_data.rule_id is None:
                rule = DataPermissionRule(
                    id=uuid4(),
                    resource_type=input_data.resource_type,
                    operation=input_data.operation,
                    conditions=input_data.conditions,
                    granted_by=actor_id,
                    effective_from=effective_from,
                    effective_to=input_data.effective_to,
                    user_id=input_data.user_id,
                    role_id=input_data.role_id,
                    remarks=input_data.remarks,
                    created_at=now,
                    updated_at=now,
                )
                await uow.data_rules.create(rule)
                before = None
                stale = None
            else:
                rule = await uow.data_rules.get_by_id(input_data.rule_id)
                if not rule:
                    raise NotFound("DataPermissionRule", str(input_data.rule_id))
                if (
                    input_data.expected_row_version is not None
                    and input_data.expected_row_version != rule.row_version
                ):
                    raise ConcurrentModification(
                        f"DataPermissionRule {rule.id} was modified concurrently"
                    )
                before = rule_snapshot(rule)
                stale = (rule.resource_type, rule.operation)
                rule.resource_type = input_data.resource_type
                rule.operation = input_data.operation
                rule.conditions = input_data.conditions
                rule.effective_from = effective_from
                rule.effective_to = input_data.effective_to
                rule.user_id = input_data.user_id
                rule.role_id = input_data.role_id
                rule.remarks = input_data.remarks
                rule.updated_at = now
                await uow.data_rules.update(rule)

            await self._audit.record(
                uow,
                AuditLog(
                    action="DataRuleCreated" if before is None else "DataRuleUpdated",
                    category="PermissionManagement",
                    resource_type="data_permission_rule",
                    resource_id=str(rule.id),
                    resource_name=f"{rule.resource_type}.{rule.operation.value}",
                    user_id=actor_id,
                    risk_level=RiskLevel.HIGH,
                    old_values=to_snapshot(before),
                    new_values=to_snapshot(rule_snapshot(rule)),
                    description=rule.remarks,
                ),
            )

        self._rule_cache.invalidate(rule.resource_type, rule.operation)
        if stale is not None and stale != (rule.resource_type, rule.operation):
            self._rule_cache.invalidate(*stale)
        return rule
