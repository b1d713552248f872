"""Tests for VWAP and session range calculations"""

from datetime import datetime, timedelta, timezone

import pytest

from screener_app.data.models import Bar
from screener_app.metrics.vwap import SessionRange, calculate_session_range, calculate_vwap

BASE_TS = datetime(2024, 3, 4, 14, 0, tzinfo=timezone.utc)


def flat_bar(minute: int, price: float, volume: float) -> Bar:
    return Bar(
        ts=BASE_TS + timedelta(minutes=minute),
        open=price, high=price, low=price, close=price,
        volume=volume,
    )


class TestVWAP:
    """Test VWAP calculation"""

    def test_empty(self):
        """VWAP of no bars is undefined"""
        assert calculate_vwap([]) is None

    def test_zero_total_volume(self):
        """VWAP is undefined without traded volume"""
        bars = [flat_bar(0, 10.0, 0.0), flat_bar(1, 11.0, 0.0)]
        assert calculate_vwap(bars) is None

    def test_volume_weighting(self):
        """Typical prices are weighted by volume"""
        bars = [flat_bar(0, 10.0, 1.0), flat_bar(1, 20.0, 3.0)]
        assert calculate_vwap(bars) == pytest.approx(17.5)

    def test_uniform_volume_is_mean_typical_price(self, bar_factory):
        """With uniform volume VWAP is the plain mean of typical prices"""
        bars = bar_factory([10.0, 12.0, 15.0, 11.0], volume=500.0)
        expected = sum(bar.typical_price for bar in bars) / len(bars)
        assert calculate_vwap(bars) == pytest.approx(expected)

    def test_zero_volume_bars_skipped(self):
        """Zero-volume bars do not contribute at all"""
        bars = [flat_bar(0, 10.0, 2.0), flat_bar(1, 1000.0, 0.0), flat_bar(2, 20.0, 2.0)]
        assert calculate_vwap(bars) == pytest.approx(15.0)

    def test_typical_price(self):
        """Typical price is (high + low + close) / 3"""
        bar = Bar(ts=BASE_TS, open=10.0, high=12.0, low=9.0, close=11.5, volume=1.0)
        assert calculate_vwap([bar]) == pytest.approx((12.0 + 9.0 + 11.5) / 3)


class TestSessionRange:
    """Test session low/high"""

    def test_empty(self):
        """Both fields are undefined without bars"""
        assert calculate_session_range([]) == SessionRange(low=None, high=None)

    def test_running_extremes(self, bar_factory):
        """Low and high span all bars"""
        bars = bar_factory([10.0, 14.0, 8.0, 12.0])
        result = calculate_session_range(bars)
        assert result.low == 7.5
        assert result.high == 14.5

    def test_single_bar(self, bar_factory):
        """A single bar seeds both extremes"""
        result = calculate_session_range(bar_factory([10.0]))
        assert result == SessionRange(low=9.5, high=10.5)
