"""Rule engine port - evaluates data permission rule conditions."""

from typing import Any, Protocol

from quillgate.domain.entities import DataPermissionRule, User


class RuleEngine(Protocol):
    """Port for condition parsing and evaluation.

    evaluate raises RuleEvaluationError; validate raises ValidationError.
    """

    def evaluate(self, rule: DataPermissionRule, record: dict[str, Any], user: User) -> bool: ...

    def validate(self, conditions: str, resource_type: str) -> None: ...
