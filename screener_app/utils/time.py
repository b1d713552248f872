"""
Time helpers for bar timestamps, session windows and lookback ranges.

Bar timestamps from the provider are authoritative; wall-clock time is only
used for freshness checks and to anchor lookback windows.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Return ``ts`` as an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def from_epoch_ms(epoch_ms: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` clock string."""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def minute_of_day(ts: datetime) -> int:
    """Minutes since UTC midnight for ``ts``."""
    ts = ensure_utc(ts)
    return ts.hour * 60 + ts.minute


def in_session(ts: datetime, start: time, end: time) -> bool:
    """
    Check whether a timestamp falls inside a daily UTC session window.

    Args:
        ts: Bar timestamp
        start: Session start (inclusive)
        end: Session end (exclusive)

    Returns:
        True when start <= time-of-day(ts) < end
    """
    minutes = minute_of_day(ts)
    return start.hour * 60 + start.minute <= minutes < end.hour * 60 + end.minute


def floor_to_timeframe(ts: datetime, timeframe_minutes: int) -> datetime:
    """
    Floor a timestamp down to the start of its timeframe bucket.

    Buckets are aligned to the epoch, so for any timeframe that divides an
    hour this matches flooring the minute-of-hour.

    Args:
        ts: Timestamp to floor
        timeframe_minutes: Bucket size in minutes

    Returns:
        Aware UTC datetime at the bucket start, seconds and microseconds zeroed
    """
    ts = ensure_utc(ts)
    bucket = timeframe_minutes * 60
    epoch_seconds = int(ts.timestamp())
    return datetime.fromtimestamp(epoch_seconds - epoch_seconds % bucket, tz=timezone.utc)


def lookback_range(days: int, now: Optional[datetime] = None) -> tuple[date, date]:
    """
    Compute the date range covering the last ``days`` days.

    Args:
        days: Lookback length in days
        now: Anchor time, defaults to current wall-clock time

    Returns:
        Tuple of (from_date, to_date) in UTC
    """
    now = ensure_utc(now) if now is not None else utc_now()
    start = now - timedelta(days=days)
    return start.date(), now.date()


def age_seconds(ts: datetime, now: Optional[datetime] = None) -> float:
    """Seconds elapsed between ``ts`` and ``now`` (positive when ``ts`` is older)."""
    now = ensure_utc(now) if now is not None else utc_now()
    return (now - ensure_utc(ts)).total_seconds()
