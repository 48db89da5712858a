"""Condition language for data permission rules.

A condition is JSON. Leaves compare one record attribute with a value;
groups combine children with AND/OR::

    {"and": [
        {"field": "author_id", "operator": "equals", "value": "$user.id"},
        {"field": "status", "operator": "in", "value": ["draft", "review"]}
    ]}

Nesting depth is capped so evaluation cost stays bounded.
"""

import json
from dataclasses import dataclass
from typing import Any

OPERATORS = frozenset({"equals", "not_equals", "in", "greater_than", "less_than", "contains"})
LOGIC = frozenset({"and", "or"})
MAX_CONDITION_LENGTH = 16384


class ConditionSyntaxError(ValueError):
    """Condition text is not a valid expression."""


@dataclass(frozen=True)
class Comparison:
    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class Group:
    logic: str
    children: tuple["Comparison | Group", ...]


Condition = Comparison | Group


def parse_conditions(text: str, max_depth: int) -> Condition:
    """Parse condition JSON into a tree. Raises ConditionSyntaxError."""
    if len(text) > MAX_CONDITION_LENGTH:
        raise ConditionSyntaxError(f"Condition exceeds {MAX_CONDITION_LENGTH} characters")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConditionSyntaxError(f"Invalid condition JSON: {e.msg}") from e
    except RecursionError as e:
        raise ConditionSyntaxError(f"Condition nesting exceeds max depth {max_depth}") from e
    return _parse_node(raw, 1, max_depth)


def _parse_node(node: Any, depth: int, max_depth: int) -> Condition:
    if depth > max_depth:
        raise ConditionSyntaxError(f"Condition nesting exceeds max depth {max_depth}")
    if not isinstance(node, dict):
        raise ConditionSyntaxError("Condition must be a JSON object")

    logic_keys = LOGIC & node.keys()
    if logic_keys:
        if len(node) != 1:
            raise ConditionSyntaxError("Group must contain exactly one of 'and' / 'or'")
        logic = logic_keys.pop()
        children = node[logic]
        if not isinstance(children, list) or not children:
            raise ConditionSyntaxError(f"'{logic}' requires a non-empty list")
        return Group(
            logic=logic,
            children=tuple(_parse_node(c, depth + 1, max_depth) for c in children),
        )

    field = node.get("field")
    operator = node.get("operator")
    if not isinstance(field, str) or not field:
        raise ConditionSyntaxError("Comparison requires a non-empty 'field'")
    if operator not in OPERATORS:
        raise ConditionSyntaxError(f"Unknown operator: {operator!r}")
    if "value" not in node:
        raise ConditionSyntaxError(f"Comparison on '{field}' requires a 'value'")
    value = node["value"]
    if operator == "in" and not isinstance(value, list):
        raise ConditionSyntaxError("'in' requires a list value")
    return Comparison(field=field, operator=operator, value=value)


def referenced_fields(condition: Condition) -> set[str]:
    """All attribute names a condition reads."""
    if isinstance(condition, Comparison):
        return {condition.field}
    fields: set[str] = set()
    for child in condition.children:
        fields |= referenced_fields(child)
    return fields
