"""Tests for EMA and MACD calculations"""

import math

import pytest

from screener_app.metrics.ema import (
    EMACalculator,
    MACDCalculator,
    MACDResult,
    calculate_ema,
    calculate_ema_series,
    calculate_macd,
    ema_multiplier,
)


class TestEMA:
    """Test EMA calculation"""

    def test_empty_values(self):
        """EMA of no values is undefined"""
        assert calculate_ema([], 12) is None

    def test_below_period(self):
        """EMA is undefined below the period"""
        assert calculate_ema([1.0] * 11, 12) is None

    def test_non_positive_period(self):
        """Zero or negative periods are undefined"""
        assert calculate_ema([1.0, 2.0, 3.0], 0) is None
        assert calculate_ema([1.0, 2.0, 3.0], -1) is None

    def test_exact_period_is_simple_average(self):
        """With exactly ``period`` values the EMA is the seed SMA"""
        assert calculate_ema([2.0, 4.0, 6.0, 8.0], 4) == pytest.approx(5.0)

    def test_multiplier(self):
        """Smoothing factor is 2 / (period + 1)"""
        assert ema_multiplier(12) == pytest.approx(2 / 13)
        assert ema_multiplier(1) == 1.0

    def test_ascending_closes_reference(self):
        """EMA(12) of 1..40 is seeded at 6.5 and recursed forward"""
        closes = [float(i) for i in range(1, 41)]

        alpha = 2 / 13
        expected = sum(closes[:12]) / 12
        assert expected == 6.5
        for value in closes[12:]:
            expected = value * alpha + expected * (1 - alpha)

        assert calculate_ema(closes, 12) == pytest.approx(expected, abs=1e-9)

    def test_constant_series_fixed_point(self):
        """EMA of a constant series equals the constant"""
        assert calculate_ema([42.5] * 60, 20) == pytest.approx(42.5)

    @pytest.mark.parametrize("period", [1, 12, 26])
    def test_appending_current_value_is_fixed_point(self, period):
        """Appending the current EMA to a varying series leaves the EMA unchanged"""
        values = [float(i) for i in range(1, 41)]
        current = calculate_ema(values, period)

        assert calculate_ema(values + [current], period) == pytest.approx(current)

    def test_finite_at_and_above_period(self):
        """EMA is defined for any length at or above the period"""
        values = [100.0 + i * 0.25 for i in range(30)]
        for length in range(12, 31):
            result = calculate_ema(values[:length], 12)
            assert result is not None
            assert math.isfinite(result)

    def test_calculator_uses_closes(self, bar_factory):
        """EMACalculator extracts closes from bars"""
        closes = [10.0 + i for i in range(25)]
        bars = bar_factory(closes)

        calculator = EMACalculator(period=18)
        assert calculator.calculate_with_bars(bars) == calculate_ema(closes, 18)
        assert calculator.calculate_with_bars(bars[:17]) is None


class TestEMASeries:
    """Test prefix EMA series"""

    def test_series_matches_prefix_recomputation(self):
        """Every series entry equals the EMA of the matching prefix exactly"""
        values = [100.0 + ((i * 7) % 11) * 0.37 - i * 0.05 for i in range(80)]
        series = calculate_ema_series(values, 12)

        assert len(series) == len(values)
        for i, value in enumerate(series):
            assert value == calculate_ema(values[:i + 1], 12)

    def test_series_undefined_prefix(self):
        """Entries before the first full period are None"""
        series = calculate_ema_series([1.0, 2.0, 3.0, 4.0], 3)
        assert series[:2] == [None, None]
        assert series[2] == pytest.approx(2.0)

    def test_series_too_short(self):
        """A sequence shorter than the period gives all None"""
        assert calculate_ema_series([1.0, 2.0], 3) == [None, None]


class TestMACD:
    """Test MACD calculation"""

    def test_undefined_below_minimum(self):
        """MACD needs slow + signal closes"""
        closes = [100.0 + i for i in range(34)]
        assert calculate_macd(closes) is None

    def test_defined_at_minimum(self):
        """MACD is defined at exactly slow + signal closes"""
        closes = [100.0 + i for i in range(35)]
        assert calculate_macd(closes) is not None

    def test_histogram_is_macd_minus_signal(self):
        """Histogram equals macd - signal exactly"""
        closes = [100.0 + ((i * 13) % 7) - i * 0.1 for i in range(120)]
        result = calculate_macd(closes)

        assert result is not None
        assert result.histogram == result.macd - result.signal

    def test_matches_prefix_recomputation(self):
        """MACD line and signal equal the per-prefix EMA recomputation"""
        closes = [50.0 + ((i * 5) % 9) * 0.8 + i * 0.02 for i in range(100)]

        line = []
        for i in range(len(closes)):
            fast = calculate_ema(closes[:i + 1], 12)
            slow = calculate_ema(closes[:i + 1], 26)
            if fast is not None and slow is not None:
                line.append(fast - slow)
        signal = calculate_ema(line, 9)

        result = calculate_macd(closes)
        assert result.macd == line[-1]
        assert result.signal == signal

    def test_linear_uptrend_positive(self):
        """A steady uptrend settles at a positive MACD equal to the lag difference"""
        closes = [100.0 + i for i in range(300)]
        result = calculate_macd(closes)

        # EMA lag is (period - 1) / 2 steps: 12.5 - 5.5 = 7
        assert result.macd == pytest.approx(7.0, abs=1e-6)
        assert result.histogram == pytest.approx(0.0, abs=1e-6)

    def test_downtrend_negative(self):
        """A steady downtrend gives a negative MACD"""
        closes = [500.0 - i for i in range(100)]
        assert calculate_macd(closes).macd < 0

    def test_custom_periods(self):
        """Periods are configurable"""
        closes = [100.0 + i * 0.5 for i in range(20)]
        assert calculate_macd(closes, fast_period=3, slow_period=6, signal_period=4) is not None
        assert calculate_macd(closes[:9], fast_period=3, slow_period=6, signal_period=4) is None

    def test_calculator_min_bars(self, bar_factory):
        """MACDCalculator reports its warmup and returns None below it"""
        calculator = MACDCalculator()
        assert calculator.min_bars == 35

        bars = bar_factory([100.0 + i for i in range(40)])
        assert calculator.calculate_with_bars(bars[:34]) is None
        assert calculator.calculate_with_bars(bars) == calculate_macd([bar.close for bar in bars])

    def test_result_to_dict(self):
        """MACDResult renders as a plain triple"""
        result = MACDResult(macd=0.5, signal=0.2, histogram=0.3)
        assert result.to_dict() == {"macd": 0.5, "signal": 0.2, "histogram": 0.3}
        assert MACDResult.from_dict(result.to_dict()) == result
