"""Permission checker implementation - merges grants and data rules into one decision."""

import logging
from typing import Any
from uuid import UUID, uuid4

from quillgate.application.dto.decision import DecisionOutput, DecisionRequest
from quillgate.application.ports import Clock, ResourceAttributeProvider, RuleEngine, utc_now
from quillgate.application.services import AuditRecorder, GrantResolver
from quillgate.domain.entities import AuditLog, DataPermissionRule, User
from quillgate.domain.exceptions import RuleEvaluationError
from quillgate.domain.value_objects import AuditResult, PermissionAction, RiskLevel
from quillgate.infrastructure.rules import RuleCache

logger = logging.getLogger(__name__)

DATA_RULE_RESTRICTION = "data-rule restriction"


class GovernedPermissionChecker:
    """Decides access from role grants, temporary grants and data permission rules.

    Every decision is audited in the same transaction that reads the grants;
    the decision is returned only after that transaction commits.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        rule_engine: RuleEngine,
        rule_cache: RuleCache,
        audit_recorder: AuditRecorder,
        grant_resolver: GrantResolver,
        resource_provider: ResourceAttributeProvider | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._rule_engine = rule_engine
        self._rule_cache = rule_cache
        self._audit = audit_recorder
        self._grants = grant_resolver
        self._resources = resource_provider
        self._clock = clock

    async def decide(self, request: DecisionRequest) -> DecisionOutput:
        """Allow or deny request; writes exactly one decision audit entry."""
        correlation_id = request.correlation_id or uuid4()

        async with self._uow_factory() as uow:
            allowed, reason = await self._evaluate(uow, request, correlation_id)
            audit_log_id = await self._audit.record(
                uow,
                AuditLog(
                    action="PermissionCheck",
                    category="Authorization",
                    resource_type=request.resource_type,
                    resource_id=request.resource_id,
                    user_id=request.user_id,
                    result=AuditResult.SUCCESS if allowed else AuditResult.FAILURE,
                    risk_level=request.operation.risk_level,
                    description=(
                        f"{request.operation.value} on {request.resource_type}: "
                        f"{'allow' if allowed else 'deny'} ({reason})"
                    ),
                    correlation_id=correlation_id,
                    session_id=request.session_id,
                ),
            )

        logger.info(
            "decision user=%s %s %s/%s allowed=%s reason=%s correlation=%s",
            request.user_id,
            request.operation.value,
            request.resource_type,
            request.resource_id,
            allowed,
            reason,
            correlation_id,
        )
        return DecisionOutput(
            allowed=allowed,
            reason=reason,
            correlation_id=correlation_id,
            audit_log_id=audit_log_id,
        )

    async def check(
        self,
        user_id: str,
        resource_type: str,
        operation: PermissionAction,
        resource_id: str | None = None,
    ) -> bool:
        """Check if user may perform operation."""
        decision = await self.decide(
            DecisionRequest(
                user_id=user_id,
                resource_type=resource_type,
                operation=operation,
                resource_id=resource_id,
            )
        )
        return decision.allowed

    async def decide_batch(
        self,
        user_id: str,
        resource_type: str,
        operation: PermissionAction,
        resource_ids: list[str],
        correlation_id: UUID | None = None,
        session_id: str | None = None,
    ) -> dict[str, DecisionOutput]:
        """Decide one operation for several records of a type.

        Each record gets its own decision and audit entry; all share one correlation id.
        """
        correlation_id = correlation_id or uuid4()
        decisions: dict[str, DecisionOutput] = {}
        for resource_id in dict.fromkeys(resource_ids):
            decisions[resource_id] = await self.decide(
                DecisionRequest(
                    user_id=user_id,
                    resource_type=resource_type,
                    operation=operation,
                    resource_id=resource_id,
                    correlation_id=correlation_id,
                    session_id=session_id,
                )
            )
        return decisions

    async def _evaluate(
        self, uow, request: DecisionRequest, correlation_id: UUID
    ) -> tuple[bool, str]:
        as_of = self._clock()

        user = await uow.users.get_by_id(request.user_id)
        if not user:
            return False, "unknown user"
        if not user.can_act:
            return False, "user inactive"

        resolution = await self._grants.resolve(
            uow,
            user,
            request.resource_type,
            request.resource_id,
            request.operation,
            as_of,
        )
        if resolution.is_override:
            return True, resolution.reason
        if not resolution.granted:
            return False, resolution.reason

        rules = await self._rule_cache.get_or_load(
            request.resource_type,
            request.operation,
            lambda: uow.data_rules.list_active(request.resource_type, request.operation),
        )
        applicable = [
            r
            for r in rules
            if not r.is_inert
            and r.is_effective(as_of)
            and r.applies_to(user.id, resolution.role_ids)
        ]
        if not applicable:
            return True, resolution.reason

        # Type-level operations (no specific record) are not narrowed by row rules.
        if request.resource_id is None and request.record is None:
            return True, resolution.reason

        try:
            record = await self._load_record(request)
        except Exception:
            logger.exception(
                "Loading %s/%s for a decision failed", request.resource_type, request.resource_id
            )
            return False, "record unavailable"
        if record is None:
            return False, "record not found"

        # Every rule is evaluated so each malformed one is reported to its owner.
        outcomes = [
            await self._satisfies(uow, rule, record, user, request, correlation_id)
            for rule in applicable
        ]
        if not all(outcomes):
            return False, DATA_RULE_RESTRICTION
        return True, resolution.reason

    async def _load_record(self, request: DecisionRequest) -> dict[str, Any] | None:
        if request.record is not None:
            return request.record
        if self._resources is None or request.resource_id is None:
            return None
        return await self._resources.get_attributes(request.resource_type, request.resource_id)

    async def _satisfies(
        self,
        uow,
        rule: DataPermissionRule,
        record: dict[str, Any],
        user: User,
        request: DecisionRequest,
        correlation_id: UUID,
    ) -> bool:
        """Evaluate one rule; an evaluation error denies and is reported to the rule owner."""
        try:
            return self._rule_engine.evaluate(rule, record, user)
        except RuleEvaluationError as e:
            logger.warning("Data permission rule %s failed closed: %s", rule.id, e)
            error = e
        except Exception as e:
            logger.exception("Data permission rule %s failed closed", rule.id)
            error = RuleEvaluationError(f"Rule {rule.id} could not be evaluated: {e!r}")

        await self._audit.record(
            uow,
            AuditLog(
                action="RuleEvaluationError",
                category="Authorization",
                resource_type="data_permission_rule",
                resource_id=str(rule.id),
                resource_name=f"{rule.resource_type}.{rule.operation.value}",
                user_id=rule.user_id or rule.granted_by,
                result=AuditResult.FAILURE,
                risk_level=RiskLevel.HIGH,
                description=(
                    f"Rule failed closed while checking {request.operation.value} on "
                    f"{request.resource_type}/{request.resource_id}"
                ),
                error_message=str(error),
                correlation_id=correlation_id,
                session_id=request.session_id,
            ),
        )
        return False
