"""Unit tests for the data permission rule condition language."""

import json
from datetime import timedelta

import pytest

from quillgate.config import ResourceSchema
from quillgate.domain.entities import User
from quillgate.domain.exceptions import RuleEvaluationError, ValidationError
from quillgate.infrastructure.rules import ConditionRuleEngine
from quillgate.infrastructure.rules.conditions import (
    Comparison,
    ConditionSyntaxError,
    Group,
    parse_conditions,
    referenced_fields,
)

from tests.conftest import NOW, MutableClock, make_rule

AUTHOR = json.dumps({"field": "author_id", "operator": "equals", "value": "$user.id"})


def _engine(**kwargs) -> ConditionRuleEngine:
    return ConditionRuleEngine(max_depth=5, clock=MutableClock(), **kwargs)


# --- parsing ---


def test_parse_comparison_and_group() -> None:
    condition = parse_conditions(
        json.dumps(
            {
                "and": [
                    {"field": "author_id", "operator": "equals", "value": "$user.id"},
                    {"field": "status", "operator": "in", "value": ["draft", "review"]},
                ]
            }
        ),
        max_depth=5,
    )
    assert isinstance(condition, Group)
    assert condition.logic == "and"
    assert condition.children[0] == Comparison("author_id", "equals", "$user.id")
    assert referenced_fields(condition) == {"author_id", "status"}


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        '{"field": "a", "operator": "like", "value": 1}',
        '{"field": "", "operator": "equals", "value": 1}',
        '{"field": "a", "operator": "equals"}',
        '{"field": "a", "operator": "in", "value": "x"}',
        '{"and": []}',
        '{"and": [{"field": "a", "operator": "equals", "value": 1}], "or": []}',
    ],
)
def test_parse_rejects_malformed_conditions(text) -> None:
    with pytest.raises(ConditionSyntaxError):
        parse_conditions(text, max_depth=5)


def test_parse_enforces_max_depth() -> None:
    node = {"field": "a", "operator": "equals", "value": 1}
    for _ in range(3):
        node = {"or": [node]}
    text = json.dumps(node)
    parse_conditions(text, max_depth=4)
    with pytest.raises(ConditionSyntaxError, match="max depth"):
        parse_conditions(text, max_depth=3)


# --- evaluation ---


def test_author_rule_matches_own_record_only() -> None:
    engine = _engine()
    rule = make_rule(AUTHOR)
    user = User(id="u1")
    assert engine.evaluate(rule, {"author_id": "u1"}, user)
    assert not engine.evaluate(rule, {"author_id": "u2"}, user)


def test_blank_condition_matches_everything() -> None:
    assert _engine().evaluate(make_rule("  "), {}, User(id="u1"))


@pytest.mark.parametrize(
    ("condition", "record", "expected"),
    [
        ({"field": "status", "operator": "not_equals", "value": "published"}, {"status": "draft"}, True),
        ({"field": "status", "operator": "in", "value": ["draft", "review"]}, {"status": "published"}, False),
        ({"field": "title", "operator": "contains", "value": "Python"}, {"title": "Python tips"}, True),
        ({"field": "tags", "operator": "contains", "value": "news"}, {"tags": ["news", "tech"]}, True),
        ({"field": "views", "operator": "greater_than", "value": 100}, {"views": 150}, True),
        ({"field": "views", "operator": "less_than", "value": 100}, {"views": "150"}, False),
        ({"field": "views", "operator": "greater_than", "value": 100}, {"views": "many"}, False),
        ({"field": "meta.lang", "operator": "equals", "value": "en"}, {"meta": {"lang": "en"}}, True),
        ({"field": "missing", "operator": "equals", "value": "x"}, {"status": "draft"}, False),
    ],
)
def test_operators(condition, record, expected) -> None:
    rule = make_rule(json.dumps(condition))
    assert _engine().evaluate(rule, record, User(id="u1")) is expected


def test_or_group() -> None:
    rule = make_rule(
        json.dumps(
            {
                "or": [
                    {"field": "author_id", "operator": "equals", "value": "$user.id"},
                    {"field": "status", "operator": "equals", "value": "published"},
                ]
            }
        )
    )
    engine = _engine()
    user = User(id="u1")
    assert engine.evaluate(rule, {"author_id": "u2", "status": "published"}, user)
    assert not engine.evaluate(rule, {"author_id": "u2", "status": "draft"}, user)


def test_now_placeholder_compares_datetimes() -> None:
    rule = make_rule(json.dumps({"field": "publish_at", "operator": "less_than", "value": "$now"}))
    engine = _engine()
    user = User(id="u1")
    assert engine.evaluate(rule, {"publish_at": (NOW - timedelta(days=1)).isoformat()}, user)
    assert not engine.evaluate(rule, {"publish_at": NOW + timedelta(days=1)}, user)


def test_malformed_rule_raises_evaluation_error() -> None:
    rule = make_rule('{"field": "author_id"')
    with pytest.raises(RuleEvaluationError, match="malformed"):
        _engine().evaluate(rule, {"author_id": "u1"}, User(id="u1"))


def test_missing_required_field_raises_evaluation_error() -> None:
    engine = _engine(schemas={"posts": ResourceSchema(fields=["status"], required=["author_id"])})
    with pytest.raises(RuleEvaluationError, match="author_id"):
        engine.evaluate(make_rule(AUTHOR), {"status": "draft"}, User(id="u1"))


# --- validation ---


def test_validate_rejects_syntax_errors() -> None:
    with pytest.raises(ValidationError):
        _engine().validate('{"field": "a", "operator": "between", "value": 1}', "posts")


def test_validate_rejects_undeclared_fields() -> None:
    engine = _engine(schemas={"posts": ResourceSchema(fields=["status"], required=["author_id"])})
    engine.validate(AUTHOR, "posts")
    with pytest.raises(ValidationError, match="secret"):
        engine.validate(json.dumps({"field": "secret", "operator": "equals", "value": 1}), "posts")


def test_validate_without_schema_accepts_any_field() -> None:
    _engine().validate(json.dumps({"field": "anything", "operator": "equals", "value": 1}), "posts")


def test_parse_rejects_nesting_too_deep_for_the_decoder() -> None:
    leaf = '{"field": "a", "operator": "equals", "value": 1}'
    text = '{"or": [' * 1500 + leaf + "]}" * 1500
    with pytest.raises(ConditionSyntaxError, match="max depth"):
        parse_conditions(text, max_depth=5)


def test_parse_rejects_over_long_text() -> None:
    text = json.dumps({"field": "a", "operator": "in", "value": ["x" * 20000]})
    with pytest.raises(ConditionSyntaxError, match="characters"):
        parse_conditions(text, max_depth=5)


def test_validate_turns_deep_nesting_into_validation_error() -> None:
    with pytest.raises(ValidationError):
        _engine().validate("[" * 5000 + "]" * 5000, "posts")


def test_or_group_stops_at_first_match() -> None:
    engine = _engine(schemas={"posts": ResourceSchema(required=["author_id"])})
    rule = make_rule(
        json.dumps(
            {
                "or": [
                    {"field": "status", "operator": "equals", "value": "published"},
                    {"field": "author_id", "operator": "equals", "value": "$user.id"},
                ]
            }
        )
    )
    assert engine.evaluate(rule, {"status": "published"}, User(id="u1"))
    with pytest.raises(RuleEvaluationError):
        engine.evaluate(rule, {"status": "draft"}, User(id="u1"))
