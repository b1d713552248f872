"""Historical bar provider interface and an in-memory implementation"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, Protocol

from ..data.models import Bar
from ..errors import NoDataError


class BarProvider(Protocol):
    """
    Source of historical OHLCV bars.

    Implementations return bars in ascending timestamp order, raise
    ``NoDataError`` when they hold nothing for the request and
    ``ProviderError`` for transport, auth or rate-limit failures.
    """

    def fetch_bars(self, ticker: str, timeframe_minutes: int,
                   from_date: date, to_date: date) -> list[Bar]:
        ...


class InMemoryBarProvider:
    """
    Bar provider serving preloaded sequences.

    Requests are answered with the stored bars whose timestamps fall inside
    ``[from_date 00:00, to_date + 1 day 00:00)`` UTC. Every request is
    recorded in ``requests`` for inspection.
    """

    def __init__(self, bars: Optional[dict[tuple[str, int], Iterable[Bar]]] = None,
                 raise_on_empty: bool = False):
        self._bars: dict[tuple[str, int], list[Bar]] = {}
        self.raise_on_empty = raise_on_empty
        self.requests: list[tuple[str, int, date, date]] = []
        for (ticker, timeframe_minutes), sequence in (bars or {}).items():
            self.add_bars(ticker, timeframe_minutes, sequence)

    def add_bars(self, ticker: str, timeframe_minutes: int, bars: Iterable[Bar]) -> None:
        key = (ticker.upper(), timeframe_minutes)
        merged = self._bars.get(key, []) + list(bars)
        merged.sort(key=lambda bar: bar.ts)
        self._bars[key] = merged

    def fetch_bars(self, ticker: str, timeframe_minutes: int,
                   from_date: date, to_date: date) -> list[Bar]:
        self.requests.append((ticker, timeframe_minutes, from_date, to_date))

        start = datetime.combine(from_date, time(0, 0), tzinfo=timezone.utc)
        end = datetime.combine(to_date, time(0, 0), tzinfo=timezone.utc) + timedelta(days=1)
        stored = self._bars.get((ticker.upper(), timeframe_minutes), [])
        bars = [bar for bar in stored if start <= bar.ts < end]

        if not bars and self.raise_on_empty:
            raise NoDataError(
                f"No {timeframe_minutes}m bars for {ticker}",
                ticker=ticker,
                timeframe_minutes=timeframe_minutes,
            )
        return bars
