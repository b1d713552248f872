"""Tests for the indicator aggregator"""

from dataclasses import replace
from datetime import timedelta

import pytest

from screener_app.config.defaults import IndicatorParams, get_default_config
from screener_app.metrics.aggregator import IndicatorAggregator
from screener_app.metrics.ema import MACDResult, calculate_ema, calculate_macd
from screener_app.metrics.vwap import calculate_vwap
from screener_app.utils.time import floor_to_timeframe


@pytest.fixture
def history(bar_factory):
    """250 fine bars and 60 coarse bars ending in the same 5m bucket."""
    fine = bar_factory([100.0 + i * 0.1 for i in range(250)])
    coarse_last = floor_to_timeframe(fine[-1].ts, 5)
    coarse = bar_factory(
        [100.0 + i * 0.5 for i in range(60)],
        start=coarse_last - timedelta(minutes=5 * 59),
        minutes=5,
    )
    return fine, coarse


class TestIndicatorAggregator:
    """Test full bundle computation"""

    def test_bundle_names(self, history):
        """Every configured indicator appears in the bundle"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate("AAPL", fine, coarse, now=fine[-1].ts)

        expected = {f"ema_{tf}_{p}" for tf in ("1m", "5m") for p in (12, 18, 20, 26, 200)}
        expected |= {"macd_1m", "macd_5m", "vwap_1m", "lod", "hod"}
        assert set(snapshot.indicators.names()) == expected

    def test_values(self, history):
        """Bundle values match the individual calculators"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate("AAPL", fine, coarse, now=fine[-1].ts)
        bundle = snapshot.indicators

        fine_closes = [bar.close for bar in fine]
        coarse_closes = [bar.close for bar in coarse]
        assert bundle.get("ema_1m_18") == calculate_ema(fine_closes, 18)
        assert bundle.get("ema_1m_200") == calculate_ema(fine_closes, 200)
        assert bundle.get("ema_5m_18") == calculate_ema(coarse_closes, 18)
        assert bundle.get("macd_5m") == calculate_macd(coarse_closes)
        assert bundle.get("vwap_1m") == calculate_vwap(fine)
        assert bundle.get("lod") == fine[0].low
        assert bundle.get("hod") == fine[-1].high

    def test_insufficient_history_is_none(self, history):
        """Indicators without enough bars are None, the rest still computed"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate("AAPL", fine, coarse, now=fine[-1].ts)

        assert snapshot.indicators.get("ema_5m_200") is None
        assert isinstance(snapshot.indicators.get("macd_5m"), MACDResult)
        assert snapshot.indicators.missing() == ["ema_5m_200"]

    def test_snapshot_metadata(self, history):
        """Snapshot carries the last fine bar and bar counts"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate("AAPL", fine, coarse, now=fine[-1].ts)

        assert snapshot.ticker == "AAPL"
        assert snapshot.last_bar == fine[-1]
        assert snapshot.bar_counts == {"1m": 250, "5m": 60}
        assert snapshot.warnings == ()

    def test_empty_input(self):
        """Empty sequences give an all-None bundle and quality findings"""
        snapshot = IndicatorAggregator().calculate("AAPL", [], [])

        assert snapshot.last_bar is None
        assert all(snapshot.indicators.get(name) is None for name in snapshot.indicators.names())
        assert snapshot.has_warnings()

    def test_stale_history_warns(self, history):
        """Old bars are flagged but still produce indicators"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate(
            "AAPL", fine, coarse, now=fine[-1].ts + timedelta(days=3)
        )

        assert {w.kind for w in snapshot.warnings} == {"stale_data"}
        assert snapshot.indicators.get("ema_1m_200") is not None

    def test_configured_periods(self, history):
        """EMA periods come from configuration"""
        fine, coarse = history
        config = replace(get_default_config(), indicators=IndicatorParams(ema_periods=(9, 50)))
        snapshot = IndicatorAggregator(config).calculate("AAPL", fine, coarse, now=fine[-1].ts)

        assert snapshot.indicators.get("ema_1m_9") is not None
        assert snapshot.indicators.get("ema_1m_18") is None
        assert "ema_5m_50" in snapshot.indicators.names()

    def test_warmup_period(self):
        """Warmup covers the longest EMA and the MACD minimum"""
        assert IndicatorAggregator().get_warmup_period() == 200

    def test_to_evaluation_input(self, history):
        """Snapshot hands off to the evaluator with the alert price"""
        fine, coarse = history
        snapshot = IndicatorAggregator().calculate("AAPL", fine, coarse, now=fine[-1].ts)
        data = snapshot.to_evaluation_input(current_price=150.0)

        assert data.ticker == "AAPL"
        assert data.current_price == 150.0
        assert data.last_bar == fine[-1]
        assert data.indicators is snapshot.indicators
