"""Condition evaluation against an indicator bundle"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Union

from ..logging.config import get_evaluation_logger, log_rule_decision
from ..models.indicators import EvaluationInput
from .comparators import DEFAULT_EPSILON, DEFAULT_TOLERANCE_PCT
from .rule_sets import FULL_RULE_SET, ConditionRule
from .statistics import RunningStatistics

logger = get_evaluation_logger(__name__)


@dataclass(frozen=True)
class FailedCondition:
    """Audit record for a rule that did not pass."""
    name: str                           # Rule label
    expected: str
    actual: Union[str, float]
    condition: str                      # Rule key

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "expected": self.expected,
            "actual": self.actual,
            "condition": self.condition,
        }


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating one rule set against one input"""
    ticker: str
    conditions: Mapping[str, bool]
    passed_count: int
    total_count: int
    all_passed: bool
    failed_details: tuple[FailedCondition, ...] = ()
    price: Optional[float] = None

    @property
    def score(self) -> str:
        return f"{self.passed_count}/{self.total_count}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "conditions": dict(self.conditions),
            "passedConditions": self.passed_count,
            "totalConditions": self.total_count,
            "allConditionsMet": self.all_passed,
            "failedConditions": [failed.to_dict() for failed in self.failed_details],
            "score": self.score,
        }


def _format_value(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value}"


def build_failure(rule: ConditionRule, left: Optional[float], right: Optional[float]) -> FailedCondition:
    """
    Build the audit record for a failed rule.

    Comparisons against a constant report the observed value; comparisons
    between two values report both and their difference.
    """
    if rule.right.is_constant:
        return FailedCondition(
            name=rule.label,
            expected=f"> {rule.right.label}",
            actual="N/A" if left is None else left,
            condition=rule.key,
        )

    diff = "N/A" if left is None or right is None else f"{left - right:.6f}"
    return FailedCondition(
        name=rule.label,
        expected=f"{rule.left.label} ({_format_value(left)}) > {rule.right.label} ({_format_value(right)})",
        actual=f"{_format_value(left)} vs {_format_value(right)} (diff: {diff})",
        condition=rule.key,
    )


class ConditionEvaluator:
    """
    Evaluates an ordered rule set and records running statistics.

    The evaluator holds no per-call state; the statistics object is the only
    thing mutated, once per call.
    """

    def __init__(
        self,
        rule_set: Sequence[ConditionRule] = FULL_RULE_SET,
        statistics: Optional[RunningStatistics] = None,
        epsilon: float = DEFAULT_EPSILON,
        tolerance_pct: float = DEFAULT_TOLERANCE_PCT
    ):
        self.rule_set = tuple(rule_set)
        self.statistics = statistics if statistics is not None else RunningStatistics(self.rule_set)
        self.epsilon = epsilon
        self.tolerance_pct = tolerance_pct

    def evaluate(self, data: Union[EvaluationInput, Mapping[str, Any]]) -> Verdict:
        """
        Evaluate every rule in declared order.

        Args:
            data: EvaluationInput, or its dictionary form
                ``{ticker, indicators, lastBar, currentPrice}``

        Returns:
            Verdict with per-rule outcomes and failure records
        """
        if not isinstance(data, EvaluationInput):
            data = EvaluationInput.from_dict(data)

        conditions: dict[str, bool] = {}
        failures: list[FailedCondition] = []

        for rule in self.rule_set:
            left = rule.left.resolve(data)
            right = rule.right.resolve(data)
            passed = rule.comparator.compare(left, right, self.epsilon, self.tolerance_pct)
            conditions[rule.key] = passed

            log_rule_decision(logger, rule.key, passed, data.ticker, left, right)
            if not passed:
                failures.append(build_failure(rule, left, right))

        passed_count = sum(1 for passed in conditions.values() if passed)
        total_count = len(conditions)
        all_passed = passed_count == total_count

        self.statistics.record(conditions, all_passed)

        logger.info(
            "Conditions evaluated",
            ticker=data.ticker,
            score=f"{passed_count}/{total_count}",
            all_conditions_met=all_passed,
            failed=[failed.condition for failed in failures],
        )

        return Verdict(
            ticker=data.ticker,
            conditions=MappingProxyType(conditions),
            passed_count=passed_count,
            total_count=total_count,
            all_passed=all_passed,
            failed_details=tuple(failures),
            price=data.reference_price,
        )
