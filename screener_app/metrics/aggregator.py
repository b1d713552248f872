"""Indicator aggregator coordinating all indicator calculations for a ticker"""

from typing import Optional, Sequence

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import Bar
from ..logging.config import get_logger
from ..models.indicators import (
    HOD_KEY,
    LOD_KEY,
    IndicatorBundle,
    IndicatorSnapshot,
    IndicatorValue,
    ema_key,
    macd_key,
    vwap_key,
)
from ..utils.time import utc_now
from .ema import EMACalculator, MACDCalculator
from .quality import run_quality_checks
from .vwap import calculate_session_range, calculate_vwap

logger = get_logger(__name__)


class IndicatorAggregator:
    """
    Computes the full indicator bundle from fine and coarse bar sequences.

    EMAs and MACD are computed on both timeframes, VWAP and the session
    low/high on the fine timeframe only. An indicator that cannot be computed
    is recorded as None; the bundle is always produced.
    """

    def __init__(self, config: Optional[DefaultConfig] = None):
        self.config = config or get_default_config()

        indicators = self.config.indicators
        self.ema_calculators = [EMACalculator(period) for period in indicators.ema_periods]
        self.macd_calculator = MACDCalculator(
            fast_period=indicators.macd_fast,
            slow_period=indicators.macd_slow,
            signal_period=indicators.macd_signal,
        )

    def calculate(self, ticker: str, fine: Sequence[Bar], coarse: Sequence[Bar],
                  now=None) -> IndicatorSnapshot:
        """
        Calculate all indicators for a ticker

        Args:
            ticker: Ticker the bars belong to
            fine: Fine timeframe bars in ascending order
            coarse: Coarse timeframe bars in ascending order
            now: Evaluation time for freshness checks (defaults to now)

        Returns:
            IndicatorSnapshot with the bundle, last fine bar and any
            data quality warnings
        """
        now = now or utc_now()
        timeframes = self.config.timeframes
        quality = self.config.quality

        warnings = run_quality_checks(
            ticker,
            fine,
            coarse,
            now,
            max_stale_hours=quality.max_stale_hours,
            coarse_minutes=timeframes.coarse_minutes,
            tolerance_seconds=quality.alignment_tolerance_seconds,
            fine_label=timeframes.fine_label,
            coarse_label=timeframes.coarse_label,
        )

        values: dict[str, IndicatorValue] = {}
        for label, bars in ((timeframes.fine_label, fine), (timeframes.coarse_label, coarse)):
            for calculator in self.ema_calculators:
                values[ema_key(label, calculator.period)] = calculator.calculate_with_bars(bars)
            values[macd_key(label)] = self.macd_calculator.calculate_with_bars(bars)

        session_range = calculate_session_range(fine)
        values[vwap_key(timeframes.fine_label)] = calculate_vwap(fine)
        values[LOD_KEY] = session_range.low
        values[HOD_KEY] = session_range.high

        bundle = IndicatorBundle(values)
        missing = bundle.missing()
        if missing:
            logger.info(
                "Some indicators undefined for available history",
                ticker=ticker,
                missing=missing,
                fine_count=len(fine),
                coarse_count=len(coarse),
            )

        logger.debug("Indicators calculated", ticker=ticker, indicator_count=len(values))

        return IndicatorSnapshot(
            ticker=ticker,
            computed_at=now,
            indicators=bundle,
            last_bar=fine[-1] if fine else None,
            bar_counts={timeframes.fine_label: len(fine), timeframes.coarse_label: len(coarse)},
            warnings=tuple(warnings),
        )

    def get_warmup_period(self) -> int:
        """Minimum number of bars for every indicator on one timeframe to be defined"""
        periods = list(self.config.indicators.ema_periods) + [self.macd_calculator.min_bars]
        return max(periods)
