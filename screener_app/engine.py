"""
Alert screening engine.

Orchestrates the screening pipeline for incoming price alerts:
Alert → Acquisition → Indicators → Condition Evaluation → Publishers
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

import structlog

from .acquisition.policy import AcquiredBars, HistoricalDataAcquirer
from .acquisition.providers import BarProvider
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .data.models import Alert
from .data.parsers import extract_ticker, parse_alert
from .delivery.base import BasePublisher, DeliveryStatus
from .errors import AcquisitionExhaustedError, DataQualityError, ProviderError, SystemFailureError
from .metrics.aggregator import IndicatorAggregator
from .models.indicators import IndicatorSnapshot
from .rules.evaluator import ConditionEvaluator, Verdict
from .rules.rule_sets import get_rule_set
from .rules.statistics import RunningStatistics
from .utils.time import utc_now

logger = structlog.get_logger(__name__)

ALERTS_PROCESSED = "ALERTS_PROCESSED"


@dataclass(frozen=True)
class ScreenedAlert:
    """An alert with its indicators and verdict."""
    alert: Alert
    snapshot: IndicatorSnapshot
    verdict: Verdict
    session_only: bool
    lookback_days: int

    @property
    def ticker(self) -> str:
        return self.alert.ticker

    @property
    def is_valid(self) -> bool:
        return self.verdict.all_passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.alert.ticker,
            "timestamp": self.alert.timestamp.isoformat(),
            "price": self.alert.price,
            "volume": self.alert.volume,
            "change": self.alert.change,
            "changePercent": self.alert.change_percent,
            "alertType": self.alert.alert_type,
            "indicators": self.snapshot.indicators.to_dict(),
            "evaluation": self.verdict.to_dict(),
            "lastCandle": self.snapshot.last_bar.to_dict() if self.snapshot.last_bar else None,
            "barCounts": dict(self.snapshot.bar_counts),
            "sessionOnly": self.session_only,
            "lookbackDays": self.lookback_days,
            "warnings": [warning.to_dict() for warning in self.snapshot.warnings],
        }


@dataclass(frozen=True)
class SkippedAlert:
    """An alert that produced no verdict, with the reason."""
    ticker: Optional[str]
    reason: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"ticker": self.ticker, "reason": self.reason, "error": self.error}


@dataclass
class ScreeningReport:
    """Outcome of screening a batch of alerts"""
    valid: list[ScreenedAlert] = field(default_factory=list)
    filtered: list[ScreenedAlert] = field(default_factory=list)
    skipped: list[SkippedAlert] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.valid) + len(self.filtered)

    @property
    def total(self) -> int:
        return self.processed + len(self.skipped)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": [screened.to_dict() for screened in self.valid],
            "filtered": [screened.to_dict() for screened in self.filtered],
            "total": self.total,
            "processed": self.processed,
            "skipped": len(self.skipped),
            "skippedAlerts": [skipped.to_dict() for skipped in self.skipped],
        }


def _skip_reason(error: Exception) -> str:
    if isinstance(error, AcquisitionExhaustedError):
        return error.reason
    if isinstance(error, ProviderError):
        return "provider_error"
    return type(error).__name__


class AlertScreeningEngine:
    """
    Main coordinator for alert screening.

    Owns the running statistics shared by every evaluation. When a
    ``ConfigLoader`` is supplied, per-ticker configuration overrides from the
    configuration file apply to acquisition and indicator computation. The
    file is read once at construction; a new engine picks up file changes.
    """

    def __init__(
        self,
        provider: BarProvider,
        config: Optional[DefaultConfig] = None,
        statistics: Optional[RunningStatistics] = None,
        publishers: Optional[Sequence[BasePublisher]] = None,
        config_loader: Optional[ConfigLoader] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        now_fn: Callable[[], datetime] = utc_now
    ) -> None:
        self.provider = provider
        self.config_loader = config_loader
        if config is None:
            config = (config_loader or ConfigLoader.create()).load_config()
        self.config = config

        self.rule_set = get_rule_set(self.config.evaluation.rule_set)
        self.statistics = statistics if statistics is not None else RunningStatistics(self.rule_set)
        self.evaluator = ConditionEvaluator(
            self.rule_set,
            statistics=self.statistics,
            epsilon=self.config.evaluation.epsilon,
            tolerance_pct=self.config.evaluation.tolerance_pct,
        )
        self.publishers = list(publishers or [])
        self.clock = clock
        self.sleep = sleep
        self.now_fn = now_fn

        self._ticker_sections: frozenset[str] = frozenset()
        if config_loader is not None:
            sections = config_loader.load_file_config().get("tickers") or {}
            self._ticker_sections = frozenset(str(name).upper() for name in sections)
        self._ticker_configs: dict[str, DefaultConfig] = {}
        self._config_lock = threading.Lock()

        logger.info(
            "Alert screening engine initialized",
            rule_set=self.config.evaluation.rule_set,
            rule_count=len(self.rule_set),
            publishers=[publisher.name for publisher in self.publishers],
        )

    def config_for(self, ticker: str) -> DefaultConfig:
        """
        Effective configuration for a ticker.

        Only tickers with their own section in the configuration file get a
        separate, cached configuration; every other ticker shares the engine's.

        Raises:
            ConfigurationError: The ticker's section is invalid
        """
        if self.config_loader is None or ticker.upper() not in self._ticker_sections:
            return self.config

        with self._config_lock:
            config = self._ticker_configs.get(ticker)
            if config is None:
                config = self.config_loader.load_config(ticker=ticker)
                self._ticker_configs[ticker] = config
            return config

    def _deadline(self) -> Optional[float]:
        timeout = self.config.pipeline.acquisition_timeout_seconds
        if timeout is None:
            return None
        return self.clock() + timeout

    def screen(self, raw_alert: dict[str, Any]) -> ScreenedAlert:
        """
        Screen one alert, raising on any failure.

        Raises:
            DataQualityError: The alert is malformed or history is insufficient
            ProviderError: The bar provider failed
        """
        alert = parse_alert(raw_alert)
        config = self.config_for(alert.ticker)

        acquirer = HistoricalDataAcquirer(self.provider, config, clock=self.clock, now_fn=self.now_fn)
        bars: AcquiredBars = acquirer.acquire(alert.ticker, deadline=self._deadline())

        snapshot = IndicatorAggregator(config).calculate(
            alert.ticker, bars.fine, bars.coarse, now=self.now_fn()
        )
        verdict = self.evaluator.evaluate(snapshot.to_evaluation_input(alert.price))

        logger.info(
            "Alert screened",
            ticker=alert.ticker,
            score=verdict.score,
            valid=verdict.all_passed,
            session_only=bars.session_only,
            attempts=bars.attempts,
        )

        return ScreenedAlert(
            alert=alert,
            snapshot=snapshot,
            verdict=verdict,
            session_only=bars.session_only,
            lookback_days=bars.lookback_days,
        )

    def process_alert(self, raw_alert: dict[str, Any]) -> Optional[ScreenedAlert]:
        """
        Screen one alert.

        Returns:
            ScreenedAlert, or None when the alert was skipped for data reasons

        Raises:
            ProviderError: Propagated unmodified from the bar provider
        """
        try:
            return self.screen(raw_alert)
        except DataQualityError as e:
            logger.warning(
                "Skipping alert",
                ticker=extract_ticker(raw_alert) if isinstance(raw_alert, dict) else None,
                reason=_skip_reason(e),
                error=str(e),
            )
            return None

    def _process_for_batch(self, raw_alert: dict[str, Any]) -> ScreenedAlert | SkippedAlert:
        ticker = extract_ticker(raw_alert) if isinstance(raw_alert, dict) else None
        try:
            return self.screen(raw_alert)
        except (DataQualityError, SystemFailureError) as e:
            logger.warning("Skipping alert", ticker=ticker, reason=_skip_reason(e), error=str(e))
            return SkippedAlert(ticker=ticker, reason=_skip_reason(e), error=str(e))
        except Exception as e:
            logger.exception(
                "Unexpected error screening alert",
                ticker=ticker,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SkippedAlert(ticker=ticker, reason=_skip_reason(e), error=str(e))

    def process_alerts(self, raw_alerts: Sequence[dict[str, Any]]) -> ScreeningReport:
        """
        Screen alerts in concurrent batches and publish the report.

        At most ``pipeline.batch_size`` alerts are in flight at once, with a
        pacing delay of ``pipeline.batch_delay_seconds`` between batches.
        Any failure screening one alert, including provider and per-ticker
        configuration errors, is recorded for that ticker as skipped.

        Args:
            raw_alerts: Raw alert records

        Returns:
            ScreeningReport partitioned into valid, filtered and skipped
        """
        pipeline = self.config.pipeline
        batch_size = pipeline.batch_size
        report = ScreeningReport()

        logger.info("Processing alerts", count=len(raw_alerts), batch_size=batch_size)

        if raw_alerts:
            with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="screener") as executor:
                for start in range(0, len(raw_alerts), batch_size):
                    batch = raw_alerts[start:start + batch_size]
                    for outcome in executor.map(self._process_for_batch, batch):
                        if isinstance(outcome, SkippedAlert):
                            report.skipped.append(outcome)
                        elif outcome.is_valid:
                            report.valid.append(outcome)
                        else:
                            report.filtered.append(outcome)

                    if start + batch_size < len(raw_alerts) and pipeline.batch_delay_seconds > 0:
                        self.sleep(pipeline.batch_delay_seconds)

        logger.info(
            "Processing complete",
            valid=len(report.valid),
            filtered=len(report.filtered),
            skipped=len(report.skipped),
        )

        self.publish(ALERTS_PROCESSED, report.to_dict())
        return report

    def publish(self, message_type: str, data: Any) -> None:
        """Send a message to every publisher."""
        if not self.publishers:
            return

        message = {"type": message_type, "data": data, "timestamp": self.now_fn().isoformat()}
        for publisher in self.publishers:
            results = publisher.publish([message])
            failed = [result for result in results if result.status != DeliveryStatus.SUCCESS]
            if failed:
                logger.error(
                    "Publisher failed",
                    publisher=publisher.name,
                    message_type=message_type,
                    errors=[result.message for result in failed],
                )

    def get_statistics(self) -> dict[str, Any]:
        """Running evaluation statistics."""
        return self.statistics.snapshot()

    def get_top_failing_conditions(self, limit: int = 5) -> list[dict[str, Any]]:
        return self.statistics.top_failing(limit)

    def reset_statistics(self) -> None:
        self.statistics.reset()
        logger.info("Statistics reset")
