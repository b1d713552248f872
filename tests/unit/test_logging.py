"""Tests for structured logging helpers"""

import io
import logging

import orjson
import structlog
from structlog.testing import capture_logs

from screener_app.logging.config import (
    configure_logging,
    get_evaluation_logger,
    log_data_quality_warning,
    log_rule_decision,
)
from screener_app.rules.evaluator import ConditionEvaluator
from screener_app.rules.rule_sets import SIMPLIFIED_RULE_SET


class TestRuleDecisionLogging:
    """Rule decisions are logged with audit markers"""

    def test_pass_and_fail_levels(self):
        logger = get_evaluation_logger("test")

        with capture_logs() as logs:
            log_rule_decision(logger, "macd1mPositive", True, "AAPL", 0.5, 0.0)
            log_rule_decision(logger, "ema18AboveVwap_1m", False, "AAPL", None, 10.0)

        assert [entry["log_level"] for entry in logs] == ["info", "warning"]
        assert logs[0]["rule_result"] == "PASS"
        assert logs[1]["rule_result"] == "FAIL"
        assert logs[1]["left"] is None
        assert all(entry["audit_trail"] is True for entry in logs)
        assert all(entry["subsystem"] == "conditions" for entry in logs)

    def test_evaluator_logs_every_rule(self):
        """One decision per rule plus a summary event"""
        evaluator = ConditionEvaluator(SIMPLIFIED_RULE_SET)

        with capture_logs() as logs:
            evaluator.evaluate({"ticker": "AAPL", "indicators": {}})

        rules = [entry["rule"] for entry in logs if "rule" in entry]
        assert rules == [rule.key for rule in SIMPLIFIED_RULE_SET]
        assert logs[-1]["event"] == "Conditions evaluated"
        assert logs[-1]["score"] == "0/3"


class TestDataQualityLogging:
    def test_warning_fields(self):
        logger = get_evaluation_logger("test")

        with capture_logs() as logs:
            log_data_quality_warning(logger, "AAPL", "stale_data", "Data is stale", {"age_hours": 30.0})

        assert logs == [{
            "event": "Data is stale",
            "log_level": "warning",
            "subsystem": "conditions",
            "audit_trail": True,
            "ticker": "AAPL",
            "quality_issue": "stale_data",
            "details": {"age_hours": 30.0},
        }]


class TestConfigureLogging:
    """Application-wide structlog configuration"""

    def test_json_lines_to_stream(self):
        """JSON mode writes one object per event with name, level and UTC time"""
        stream = io.StringIO()
        saved = structlog.get_config()
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            root.handlers[:] = []
            configure_logging(level="INFO", format_json=True, stream=stream)
            structlog.get_logger("screener.tests").info("Configured", ticker="AAPL")
            structlog.get_logger("screener.tests").debug("Filtered out")
        finally:
            structlog.configure(**saved)
            root.handlers[:] = handlers
            root.setLevel(level)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        event = orjson.loads(lines[0])
        assert event["event"] == "Configured"
        assert event["ticker"] == "AAPL"
        assert event["level"] == "info"
        assert event["logger"] == "screener.tests"
        assert event["timestamp"].endswith("Z")
