"""
Canonical data models for normalized market data.

This module defines immutable data structures that represent clean, validated
market data after normalization from raw provider and alert formats.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Bar:
    """Normalized OHLCV bar with a UTC timestamp (bar open time)."""
    ts: datetime        # UTC market timestamp
    open: float         # Opening price
    high: float         # High price
    low: float          # Low price
    close: float        # Closing price
    volume: float       # Traded volume

    @property
    def typical_price(self) -> float:
        """(high + low + close) / 3"""
        return (self.high + self.low + self.close) / 3.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.ts.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bar":
        ts = data["timestamp"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        return cls(
            ts=ts,
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=float(data.get("volume") or 0.0),
        )


@dataclass(frozen=True)
class Alert:
    """A price alert received from the streaming alert source."""
    ticker: str
    timestamp: datetime
    price: Optional[float] = None
    volume: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    alert_type: Optional[str] = None
    raw: Optional[dict[str, Any]] = None
