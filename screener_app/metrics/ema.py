"""EMA (Exponential Moving Average) and MACD calculations"""

from typing import Optional, Sequence

from ..data.models import Bar
from ..models.indicators import MACDResult


def ema_multiplier(period: int) -> float:
    """Smoothing factor 2 / (period + 1)."""
    return 2.0 / (period + 1)


def _seed(values: Sequence[float], period: int) -> float:
    """Simple average of the first ``period`` values."""
    total = 0.0
    for value in values[:period]:
        total += value
    return total / period


def calculate_ema(values: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate the EMA of a value sequence.

    The EMA is seeded with the simple average of the first ``period`` values
    and then recursed forward:

        ema_i = value_i * a + ema_(i-1) * (1 - a),   a = 2 / (period + 1)

    Args:
        values: Values in chronological order
        period: EMA period

    Returns:
        EMA of the last value, or None if fewer than ``period`` values
    """
    if not values or period <= 0 or len(values) < period:
        return None

    ema = _seed(values, period)
    multiplier = ema_multiplier(period)
    for value in values[period:]:
        ema = value * multiplier + ema * (1 - multiplier)

    return ema


def calculate_ema_series(values: Sequence[float], period: int) -> list[Optional[float]]:
    """
    Calculate the EMA of every prefix of ``values``.

    Entry ``i`` equals ``calculate_ema(values[:i + 1], period)``: the same
    seed and the same recursion steps are applied in the same order, so the
    results are identical to recomputing each prefix, in a single pass.

    Args:
        values: Values in chronological order
        period: EMA period

    Returns:
        List aligned with ``values``; None where the prefix is shorter than
        ``period``
    """
    series: list[Optional[float]] = [None] * len(values)
    if period <= 0 or len(values) < period:
        return series

    ema = _seed(values, period)
    series[period - 1] = ema
    multiplier = ema_multiplier(period)
    for i in range(period, len(values)):
        ema = values[i] * multiplier + ema * (1 - multiplier)
        series[i] = ema

    return series


def calculate_macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9
) -> Optional[MACDResult]:
    """
    Calculate MACD from closing prices.

    The MACD line holds ``ema_fast - ema_slow`` for every prefix where both
    EMAs are defined. The signal line is the EMA of that line, and the
    histogram is the last line value minus the signal.

    Args:
        closes: Closing prices in chronological order
        fast_period: Fast EMA period (default 12)
        slow_period: Slow EMA period (default 26)
        signal_period: Signal EMA period (default 9)

    Returns:
        MACDResult, or None if fewer than ``slow_period + signal_period``
        closes or the signal line cannot be computed
    """
    if not closes or len(closes) < slow_period + signal_period:
        return None

    fast_series = calculate_ema_series(closes, fast_period)
    slow_series = calculate_ema_series(closes, slow_period)

    macd_line = [
        fast - slow
        for fast, slow in zip(fast_series, slow_series)
        if fast is not None and slow is not None
    ]
    if not macd_line:
        return None

    signal = calculate_ema(macd_line, signal_period)
    if signal is None:
        return None

    latest = macd_line[-1]
    return MACDResult(macd=latest, signal=signal, histogram=latest - signal)


class EMACalculator:
    """EMA calculator over bar closes for a fixed period"""

    def __init__(self, period: int):
        self.period = period

    def calculate_with_bars(self, bars: Sequence[Bar]) -> Optional[float]:
        """
        Calculate the EMA of bar closes.

        Args:
            bars: Bars in chronological order

        Returns:
            EMA value or None if insufficient data
        """
        if len(bars) < self.period:
            return None
        return calculate_ema([bar.close for bar in bars], self.period)


class MACDCalculator:
    """MACD calculator over bar closes"""

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period

    @property
    def min_bars(self) -> int:
        return self.slow_period + self.signal_period

    def calculate_with_bars(self, bars: Sequence[Bar]) -> Optional[MACDResult]:
        """
        Calculate MACD of bar closes.

        Args:
            bars: Bars in chronological order

        Returns:
            MACDResult or None if insufficient data
        """
        if len(bars) < self.min_bars:
            return None
        return calculate_macd(
            [bar.close for bar in bars],
            self.fast_period,
            self.slow_period,
            self.signal_period,
        )
