"""VWAP (Volume-Weighted Average Price) and session range calculations"""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..data.models import Bar


@dataclass(frozen=True)
class SessionRange:
    """Low and high of day; both None when no bars were available."""
    low: Optional[float] = None
    high: Optional[float] = None


def calculate_vwap(bars: Sequence[Bar]) -> Optional[float]:
    """
    Calculate VWAP over a bar sequence

    VWAP = sum(typical_price * volume) / sum(volume),
    typical_price = (high + low + close) / 3

    Bars with zero volume are skipped entirely.

    Args:
        bars: Bars to accumulate over

    Returns:
        VWAP value or None if there is no traded volume
    """
    total_volume = 0.0
    total_value = 0.0

    for bar in bars:
        if bar.volume > 0:
            total_value += bar.typical_price * bar.volume
            total_volume += bar.volume

    if total_volume <= 0:
        return None

    return total_value / total_volume


def calculate_session_range(bars: Sequence[Bar]) -> SessionRange:
    """
    Calculate the running low and high across bars

    Args:
        bars: Bars in chronological order

    Returns:
        SessionRange seeded from the first bar, or an empty range
    """
    if not bars:
        return SessionRange()

    low = bars[0].low
    high = bars[0].high
    for bar in bars:
        if bar.low < low:
            low = bar.low
        if bar.high > high:
            high = bar.high

    return SessionRange(low=low, high=high)
