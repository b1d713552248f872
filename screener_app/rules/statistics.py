"""Running pass/fail statistics for condition evaluation"""

import threading
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .rule_sets import ConditionRule


@dataclass
class _RuleCounts:
    name: str
    passed: int = 0
    failed: int = 0


def _rate(count: int, total: int) -> str:
    """One-decimal percentage string, "0.0" when nothing was counted."""
    if total <= 0:
        return "0.0"
    return f"{count / total * 100:.1f}"


class RunningStatistics:
    """
    Process-lifetime evaluation counters.

    Tracks the number of evaluations, how many passed every rule, and per-rule
    pass/fail counts. All updates and reads happen under a single lock so
    concurrent evaluations never interleave a partial update.
    """

    def __init__(self, rule_set: Iterable[ConditionRule] = ()):
        self._lock = threading.Lock()
        self._labels = {rule.key: rule.label for rule in rule_set}
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._total_evaluations = 0
        self._total_passed = 0
        self._rules: dict[str, _RuleCounts] = {
            key: _RuleCounts(name=label) for key, label in self._labels.items()
        }

    def record(self, conditions: Mapping[str, bool], all_passed: bool) -> None:
        """Record one evaluation's outcome."""
        with self._lock:
            self._total_evaluations += 1
            if all_passed:
                self._total_passed += 1

            for key, passed in conditions.items():
                counts = self._rules.get(key)
                if counts is None:
                    counts = self._rules[key] = _RuleCounts(name=self._labels.get(key, key))
                if passed:
                    counts.passed += 1
                else:
                    counts.failed += 1

    @property
    def total_evaluations(self) -> int:
        with self._lock:
            return self._total_evaluations

    @property
    def total_passed(self) -> int:
        with self._lock:
            return self._total_passed

    def snapshot(self) -> dict[str, Any]:
        """
        Current counters with pass and failure rates.

        Rates are percentage strings with one decimal place.
        """
        with self._lock:
            total = self._total_evaluations
            conditions = {}
            for key, counts in self._rules.items():
                rule_total = counts.passed + counts.failed
                conditions[key] = {
                    "name": counts.name,
                    "passed": counts.passed,
                    "failed": counts.failed,
                    "total": rule_total,
                    "passRate": _rate(counts.passed, rule_total),
                    "failureRate": _rate(counts.failed, rule_total),
                }

            return {
                "totalEvaluations": total,
                "totalPassed": self._total_passed,
                "totalFailed": total - self._total_passed,
                "passRate": _rate(self._total_passed, total),
                "conditions": conditions,
            }

    def top_failing(self, limit: int = 5) -> list[dict[str, Any]]:
        """Per-rule entries ordered by failure count, most failures first."""
        conditions = self.snapshot()["conditions"]
        entries = [dict(entry, condition=key) for key, entry in conditions.items()]
        entries.sort(key=lambda entry: entry["failed"], reverse=True)
        return entries[:limit]

    def reset(self) -> None:
        """Zero every counter."""
        with self._lock:
            self._reset_counters()
