"""Tests for condition evaluation"""

import pytest

from screener_app.models.indicators import EvaluationInput, IndicatorBundle, MACDResult
from screener_app.rules.evaluator import ConditionEvaluator, FailedCondition, Verdict
from screener_app.rules.rule_sets import FULL_RULE_SET, SIMPLIFIED_RULE_SET
from screener_app.rules.statistics import RunningStatistics

PASSING = {
    "macd_5m": MACDResult(macd=0.5, signal=0.3, histogram=0.2),
    "macd_1m": MACDResult(macd=0.4, signal=0.1, histogram=0.3),
    "ema_1m_18": 101.0,
    "ema_1m_200": 99.0,
    "vwap_1m": 100.0,
    "ema_5m_18": 100.0,
    "ema_5m_200": 105.0,
}


def make_input(overrides=None, current_price=102.0) -> EvaluationInput:
    values = dict(PASSING)
    values.update(overrides or {})
    return EvaluationInput(
        ticker="AAPL",
        indicators=IndicatorBundle(values),
        current_price=current_price,
    )


@pytest.fixture
def statistics():
    return RunningStatistics(FULL_RULE_SET)


@pytest.fixture
def evaluator(statistics):
    return ConditionEvaluator(FULL_RULE_SET, statistics=statistics)


class TestConditionEvaluator:
    """Test rule evaluation"""

    def test_all_conditions_met(self, evaluator):
        """A bundle satisfying every rule is valid"""
        verdict = evaluator.evaluate(make_input())

        assert verdict.all_passed is True
        assert verdict.passed_count == verdict.total_count == 7
        assert verdict.score == "7/7"
        assert verdict.failed_details == ()
        assert verdict.price == 102.0

    def test_condition_order(self, evaluator):
        """Conditions are reported in declared order"""
        verdict = evaluator.evaluate(make_input())
        assert list(verdict.conditions) == [rule.key for rule in FULL_RULE_SET]

    def test_constant_failure_record(self, evaluator):
        """A failed zero crossing reports the observed value"""
        verdict = evaluator.evaluate(make_input({
            "macd_5m": MACDResult(macd=-0.5, signal=-0.2, histogram=-0.3),
        }))

        assert verdict.conditions["macd5mPositive"] is False
        assert verdict.failed_details == (
            FailedCondition(
                name="MACD (5m) > 0",
                expected="> 0",
                actual=-0.5,
                condition="macd5mPositive",
            ),
        )

    def test_comparison_failure_record(self, evaluator):
        """A failed comparison reports both values and their difference"""
        verdict = evaluator.evaluate(make_input({"ema_1m_18": 99.0, "ema_1m_200": 100.0}))

        failed = {f.condition: f for f in verdict.failed_details}
        record = failed["ema18Above200_1m"]
        assert record.name == "EMA 18 (1m) > EMA 200 (1m)"
        assert record.expected == "EMA 18 (99.0) > EMA 200 (100.0)"
        assert record.actual == "99.0 vs 100.0 (diff: -1.000000)"

    def test_missing_operand_fails(self, evaluator):
        """A missing operand fails its rule and is reported as N/A"""
        verdict = evaluator.evaluate(make_input({"ema_5m_200": None}))

        assert verdict.conditions["ema200AboveEma18_5m"] is False
        assert verdict.all_passed is False
        record = verdict.failed_details[-1]
        assert record.expected == "EMA 200 (N/A) > EMA 18 (100.0)"
        assert record.actual == "N/A vs 100.0 (diff: N/A)"

    def test_missing_constant_operand_reported(self, evaluator):
        """A missing MACD is reported as N/A"""
        verdict = evaluator.evaluate(make_input({"macd_1m": None}))
        record = verdict.failed_details[0]
        assert record.condition == "macd1mPositive"
        assert record.actual == "N/A"

    def test_counting_invariants(self, evaluator):
        """Passed count matches the conditions; all_passed iff every rule passed"""
        verdict = evaluator.evaluate(make_input({"vwap_1m": 200.0}, current_price=50.0))

        assert verdict.passed_count == sum(verdict.conditions.values())
        assert verdict.all_passed == (verdict.passed_count == verdict.total_count)
        assert len(verdict.failed_details) == verdict.total_count - verdict.passed_count

    def test_price_falls_back_to_last_close(self, evaluator):
        """Without an alert price the last bar's close is used"""
        data = make_input(current_price=None).to_dict()
        data["lastBar"] = {
            "timestamp": "2024-03-07T19:59:00+00:00",
            "open": 100.0, "high": 103.0, "low": 99.5, "close": 102.5, "volume": 900,
        }
        verdict = evaluator.evaluate(data)

        assert verdict.price == 102.5
        assert verdict.conditions["closeAboveEma18_1m"] is True

    def test_no_price_fails_close_rule(self, evaluator):
        """Without any price the close rule fails"""
        verdict = evaluator.evaluate(make_input(current_price=None))
        assert verdict.conditions["closeAboveEma18_1m"] is False
        assert verdict.price is None

    def test_determinism_and_statistics(self, evaluator, statistics):
        """Repeated evaluation is identical and counts once per call"""
        first = evaluator.evaluate(make_input())
        second = evaluator.evaluate(make_input())

        assert first == second
        assert statistics.total_evaluations == 2
        assert statistics.total_passed == 2

        evaluator.evaluate(make_input({"ema_1m_18": 50.0}))
        assert statistics.total_evaluations == 3
        assert statistics.total_passed == 2

    def test_default_statistics_are_isolated(self):
        """Evaluators without injected statistics do not share counters"""
        first = ConditionEvaluator()
        second = ConditionEvaluator()
        first.evaluate(make_input())

        assert first.statistics.total_evaluations == 1
        assert second.statistics.total_evaluations == 0

    def test_dict_input(self, evaluator):
        """The dictionary input contract is accepted"""
        verdict = evaluator.evaluate(make_input().to_dict())
        assert verdict == evaluator.evaluate(make_input())


class TestMACDFieldSelection:
    """Rule sets read the MACD field they are configured for"""

    DATA = {
        "ticker": "AAPL",
        "indicators": {"macd_5m": {"histogram": 0.03}},
        "lastBar": None,
        "currentPrice": None,
    }

    def test_full_rule_set_reads_macd(self):
        """The full set does not fall back to the histogram"""
        verdict = ConditionEvaluator(FULL_RULE_SET).evaluate(self.DATA)

        assert verdict.conditions["macd5mPositive"] is False
        assert verdict.failed_details[0].actual == "N/A"

    def test_simplified_rule_set_reads_histogram(self):
        """The simplified set reads the histogram"""
        verdict = ConditionEvaluator(SIMPLIFIED_RULE_SET).evaluate(self.DATA)

        assert verdict.conditions["macd5mPositive"] is True
        assert verdict.conditions["macd1mPositive"] is False
        assert verdict.score == "1/3"


class TestVerdict:
    """Test verdict serialisation"""

    def test_to_dict_shape(self, evaluator):
        """Verdict renders the stable output shape"""
        verdict = evaluator.evaluate(make_input({"ema_1m_18": 99.0, "ema_1m_200": 100.0}))
        data = verdict.to_dict()

        assert set(data) == {
            "conditions", "passedConditions", "totalConditions",
            "allConditionsMet", "failedConditions", "score",
        }
        assert data["totalConditions"] == 7
        assert data["allConditionsMet"] is False
        assert data["score"] == f"{data['passedConditions']}/7"
        assert set(data["failedConditions"][0]) == {"name", "expected", "actual", "condition"}

    def test_score(self):
        """Score renders passed/total"""
        verdict = Verdict(
            ticker="AAPL", conditions={"a": True, "b": False},
            passed_count=1, total_count=2, all_passed=False,
        )
        assert verdict.score == "1/2"
