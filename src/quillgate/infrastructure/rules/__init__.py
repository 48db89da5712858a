"""Data permission rule engine and cache."""

from quillgate.infrastructure.rules.rule_cache import RuleCache
from quillgate.infrastructure.rules.rule_engine import ConditionRuleEngine

__all__ = ["ConditionRuleEngine", "RuleCache"]
