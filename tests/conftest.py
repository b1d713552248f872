"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

import pytest

from screener_app.data.models import Bar

# Monday, inside the 13:30-20:00 UTC session
BASE_TS = datetime(2024, 3, 4, 14, 0, tzinfo=timezone.utc)


def make_bars(closes: Sequence[float], start: datetime = BASE_TS, minutes: int = 1,
              volume: float = 1000.0) -> list[Bar]:
    """Bars at a fixed spacing with typical price equal to the close."""
    return [
        Bar(
            ts=start + timedelta(minutes=i * minutes),
            open=close,
            high=close + 0.5,
            low=close - 0.5,
            close=close,
            volume=volume,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def bar_factory() -> Callable[..., list[Bar]]:
    """Factory building bar sequences from closing prices."""
    return make_bars


@pytest.fixture
def sample_alert() -> dict:
    """Raw alert record as delivered by the alert source."""
    return {
        "symbol": "aapl",
        "close": 187.25,
        "price": 187.2,
        "volume": 1250000,
        "change": 2.15,
        "changePercent": 1.16,
        "timestamp": "2024-03-07T19:45:00Z",
        "alert_type": "new_high",
    }


@pytest.fixture
def sample_aggregates() -> dict:
    """Aggregates response body with rows out of order."""
    return {
        "ticker": "AAPL",
        "status": "OK",
        "resultsCount": 3,
        "results": [
            {"t": 1709820060000, "o": 187.1, "h": 187.4, "l": 187.0, "c": 187.3, "v": 1500},
            {"t": 1709820000000, "o": 187.0, "h": 187.2, "l": 186.9, "c": 187.1, "v": 1200},
            {"t": 1709820120000, "o": 187.3, "h": 187.5, "l": 187.2, "c": 187.4, "v": 900},
        ],
    }
