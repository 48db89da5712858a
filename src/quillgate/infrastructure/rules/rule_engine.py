"""Data permission rule engine - evaluates rule conditions against a record."""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any
from uuid import UUID

from quillgate.application.ports.clock import Clock, utc_now
from quillgate.config import ResourceSchema
from quillgate.domain.entities import DataPermissionRule, User
from quillgate.domain.exceptions import RuleEvaluationError, ValidationError
from quillgate.infrastructure.rules.conditions import (
    Comparison,
    Condition,
    ConditionSyntaxError,
    parse_conditions,
    referenced_fields,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class ConditionRuleEngine:
    """Evaluates the JSON condition language of data permission rules.

    Unknown record fields make a comparison false. A missing field that the
    resource schema declares required is a configuration error and raises
    RuleEvaluationError, as does a malformed condition.
    """

    def __init__(
        self,
        max_depth: int = 5,
        schemas: dict[str, ResourceSchema] | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._max_depth = max_depth
        self._schemas = schemas or {}
        self._clock = clock
        self._parse = lru_cache(maxsize=1024)(self._parse_uncached)

    def validate(self, conditions: str, resource_type: str) -> None:
        """Check syntax and declared fields before a rule is saved."""
        if not conditions.strip():
            return
        try:
            condition = self._parse(conditions)
        except ConditionSyntaxError as e:
            raise ValidationError(str(e)) from e

        schema = self._schemas.get(resource_type)
        if schema and schema.fields:
            declared = set(schema.fields) | set(schema.required)
            unknown = referenced_fields(condition) - declared
            if unknown:
                raise ValidationError(
                    f"Unknown fields for {resource_type}: {', '.join(sorted(unknown))}"
                )

    def evaluate(self, rule: DataPermissionRule, record: dict[str, Any], user: User) -> bool:
        """True when record satisfies the rule's condition."""
        if not rule.conditions.strip():
            return True
        try:
            condition = self._parse(rule.conditions)
        except ConditionSyntaxError as e:
            raise RuleEvaluationError(f"Rule {rule.id} has a malformed condition: {e}") from e

        schema = self._schemas.get(rule.resource_type)
        required = set(schema.required) if schema else set()
        variables = {"$user.id": user.id, "$now": self._clock()}
        return self._eval(condition, record, variables, required, rule)

    def _parse_uncached(self, text: str) -> Condition:
        return parse_conditions(text, self._max_depth)

    def _eval(
        self,
        condition: Condition,
        record: dict[str, Any],
        variables: dict[str, Any],
        required: set[str],
        rule: DataPermissionRule,
    ) -> bool:
        if isinstance(condition, Comparison):
            return self._compare(condition, record, variables, required, rule)
        outcomes = (self._eval(c, record, variables, required, rule) for c in condition.children)
        if condition.logic == "or":
            return any(outcomes)
        return all(outcomes)

    def _compare(
        self,
        comparison: Comparison,
        record: dict[str, Any],
        variables: dict[str, Any],
        required: set[str],
        rule: DataPermissionRule,
    ) -> bool:
        actual = _resolve(comparison.field, record)
        if actual is _MISSING:
            if comparison.field in required:
                raise RuleEvaluationError(
                    f"Rule {rule.id}: record of {rule.resource_type} is missing "
                    f"required field '{comparison.field}'"
                )
            logger.debug("Rule %s: field %s not on record", rule.id, comparison.field)
            return False
        expected = _substitute(comparison.value, variables)
        return _apply(comparison.operator, actual, expected)


def _resolve(field_path: str, record: dict[str, Any]) -> Any:
    """Resolve a dot-separated field path; _MISSING when absent."""
    current: Any = record
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _substitute(value: Any, variables: dict[str, Any]) -> Any:
    if isinstance(value, str) and value in variables:
        return variables[value]
    if isinstance(value, list):
        return [_substitute(v, variables) for v in value]
    return value


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


def _ordered_pair(actual: Any, expected: Any) -> tuple[Any, Any] | None:
    """Coerce two values to a comparable pair, or None."""
    if isinstance(actual, datetime) or isinstance(expected, datetime):
        try:
            if isinstance(actual, str):
                actual = datetime.fromisoformat(actual)
            if isinstance(expected, str):
                expected = datetime.fromisoformat(expected)
        except ValueError:
            return None
        if not (isinstance(actual, datetime) and isinstance(expected, datetime)):
            return None
        if (actual.tzinfo is None) != (expected.tzinfo is None):
            return None
        return actual, expected
    if isinstance(actual, bool) or isinstance(expected, bool):
        return None
    try:
        return float(actual), float(expected)
    except (TypeError, ValueError):
        return None


def _apply(operator: str, actual: Any, expected: Any) -> bool:
    actual = _normalize(actual)
    match operator:
        case "equals":
            return actual == _normalize(expected)
        case "not_equals":
            return actual != _normalize(expected)
        case "in":
            return actual in [_normalize(v) for v in expected]
        case "contains":
            expected = _normalize(expected)
            if isinstance(actual, str) and isinstance(expected, str):
                return expected in actual
            if isinstance(actual, (list, tuple, set)):
                return expected in [_normalize(v) for v in actual]
            return False
        case "greater_than":
            pair = _ordered_pair(actual, expected)
            return pair is not None and pair[0] > pair[1]
        case "less_than":
            pair = _ordered_pair(actual, expected)
            return pair is not None and pair[0] < pair[1]
        case _:
            return False
