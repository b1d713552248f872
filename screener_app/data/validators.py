"""
Bar sequence validation and normalization.

Provider sequences are expected to be ascending with strictly increasing
timestamps. These helpers enforce that ordering and reject bars whose values
cannot be used by the indicator calculators.
"""

import math
from typing import Iterable

import structlog

from ..errors import MalformedDataError
from .models import Bar

logger = structlog.get_logger(__name__)


def validate_bar(bar: Bar) -> None:
    """
    Validate a single bar's values.

    Raises:
        MalformedDataError: If a price is non-finite or non-positive, OHLC is
            inconsistent, or volume is negative/non-finite
    """
    prices = [bar.open, bar.high, bar.low, bar.close]
    for price in prices:
        if not isinstance(price, (int, float)):
            raise MalformedDataError(f"Invalid price type: {type(price)}")
        if math.isnan(price) or math.isinf(price):
            raise MalformedDataError(f"Invalid price value: {price}")
        if price <= 0:
            raise MalformedDataError(f"Non-positive price: {price}")

    if bar.high < bar.low:
        raise MalformedDataError("High price less than low price")

    if math.isnan(bar.volume) or math.isinf(bar.volume):
        raise MalformedDataError(f"Invalid volume value: {bar.volume}")
    if bar.volume < 0:
        raise MalformedDataError(f"Negative volume: {bar.volume}")


def is_strictly_increasing(bars: list[Bar]) -> bool:
    """True when every bar's timestamp is later than the previous one."""
    return all(prev.ts < curr.ts for prev, curr in zip(bars, bars[1:]))


def normalize_bar_sequence(bars: Iterable[Bar], ticker: str = "", timeframe: str = "") -> list[Bar]:
    """
    Return bars sorted ascending with duplicate timestamps collapsed.

    When two bars share a timestamp the later one in provider order wins.
    Sequences that are already strictly increasing are returned as a list
    without modification.

    Args:
        bars: Bars as delivered by the provider
        ticker: Ticker, for logging
        timeframe: Timeframe label, for logging

    Returns:
        Strictly increasing list of bars
    """
    bar_list = list(bars)
    if is_strictly_increasing(bar_list):
        return bar_list

    by_ts: dict = {}
    for bar in bar_list:
        by_ts[bar.ts] = bar
    normalized = [by_ts[ts] for ts in sorted(by_ts)]

    logger.warning(
        "Normalized out-of-order or duplicate bars",
        ticker=ticker,
        timeframe=timeframe,
        received=len(bar_list),
        kept=len(normalized),
    )
    return normalized
