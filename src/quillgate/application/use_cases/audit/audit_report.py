"""Audit report use case - summary counts over a time range."""

from collections import Counter
from datetime import datetime

from quillgate.application.dto.audit_report import AuditReport
from quillgate.application.ports import PermissionChecker
from quillgate.domain.exceptions import PermissionDenied, ValidationError
from quillgate.domain.value_objects import AuditResult, PermissionAction, RiskLevel


class AuditReportUseCase:
    """Counts audit entries of [start, end) by category, result and risk level."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor_id: str, start: datetime, end: datetime) -> AuditReport:
        has_read = await self._permission_checker.check(
            actor_id, "audit_log", PermissionAction.READ
        )
        if not has_read:
            raise PermissionDenied("User does not have read access to audit logs")
        if start >= end:
            raise ValidationError("start must be before end")

        async with self._uow_factory() as uow:
            groups = await uow.audit_logs.summarize(start, end)

        by_category: Counter[str] = Counter()
        by_result: Counter[str] = Counter()
        by_risk: Counter[str] = Counter()
        high_risk_failures = 0
        for category, result, risk_level, count in groups:
            by_category[category] += count
            by_result[result.value] += count
            by_risk[risk_level.value] += count
            if result is AuditResult.FAILURE and risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
                high_risk_failures += count
        return AuditReport(
            start=start,
            end=end,
            total=sum(by_category.values()),
            by_category=dict(by_category),
            by_result=dict(by_result),
            by_risk_level=dict(by_risk),
            high_risk_failures=high_risk_failures,
        )
