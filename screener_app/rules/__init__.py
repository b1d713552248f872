"""Condition rules: comparators, declarative rule sets, evaluation and statistics."""

from .comparators import is_greater_than, is_greater_than_with_tolerance
from .evaluator import ConditionEvaluator, FailedCondition, Verdict
from .rule_sets import (
    FULL_RULE_SET,
    RULE_SETS,
    SIMPLIFIED_RULE_SET,
    Comparator,
    ConditionRule,
    Operand,
    get_rule_set,
)
from .statistics import RunningStatistics

__all__ = [
    "is_greater_than",
    "is_greater_than_with_tolerance",
    "ConditionEvaluator",
    "FailedCondition",
    "Verdict",
    "FULL_RULE_SET",
    "SIMPLIFIED_RULE_SET",
    "RULE_SETS",
    "Comparator",
    "ConditionRule",
    "Operand",
    "get_rule_set",
    "RunningStatistics",
]
