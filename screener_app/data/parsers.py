"""
Parsers converting raw provider and alert payloads into canonical objects.

Handles the aggregate-bar response format of the historical data provider
(rows keyed ``t, o, h, l, c, v``) and the loosely structured alert records
delivered by the streaming alert source.
"""

from datetime import datetime
from typing import Any, Optional

import orjson

from ..errors import MalformedDataError
from ..utils.time import ensure_utc, from_epoch_ms, utc_now
from .models import Alert, Bar
from .validators import validate_bar

_TICKER_KEYS = ("ticker", "symbol", "instrument")
_TIMESTAMP_KEYS = ("timestamp", "time", "created_at")


def parse_json_payload(raw_data: bytes | str) -> dict[str, Any]:
    """
    Parse a raw JSON body into a dictionary.

    Raises:
        MalformedDataError: If the body is not valid JSON or not an object
    """
    try:
        payload = orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise MalformedDataError(f"Invalid JSON: {e}", raw_data=str(raw_data)[:100])

    if not isinstance(payload, dict):
        raise MalformedDataError(
            f"Expected JSON object, got {type(payload).__name__}",
            raw_data=str(raw_data)[:100],
            expected_format="object"
        )
    return payload


def parse_aggregate_bar(row: dict[str, Any]) -> Bar:
    """
    Convert one aggregate row into a Bar.

    Args:
        row: Mapping with epoch-ms ``t`` and ``o, h, l, c, v`` values

    Returns:
        Validated Bar

    Raises:
        MalformedDataError: If fields are missing or values are invalid
    """
    try:
        bar = Bar(
            ts=from_epoch_ms(float(row["t"])),
            open=float(row["o"]),
            high=float(row["h"]),
            low=float(row["l"]),
            close=float(row["c"]),
            volume=float(row.get("v") or 0.0),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Invalid aggregate row: {e}",
            raw_data=str(row)[:100],
            expected_format="{t, o, h, l, c, v}"
        )

    validate_bar(bar)
    return bar


def parse_aggregate_bars(payload: dict[str, Any]) -> list[Bar]:
    """
    Convert an aggregates response into bars sorted by timestamp.

    Args:
        payload: Parsed response with a ``results`` list

    Returns:
        Bars in ascending timestamp order (empty if ``results`` is absent)
    """
    rows = payload.get("results") or []
    bars = [parse_aggregate_bar(row) for row in rows]
    bars.sort(key=lambda bar: bar.ts)
    return bars


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return from_epoch_ms(value)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_ticker(raw: dict[str, Any]) -> Optional[str]:
    """Pick the ticker out of an alert record, upper-cased."""
    for key in _TICKER_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip().upper()
    return None


def parse_alert(raw: dict[str, Any]) -> Alert:
    """
    Normalize a raw alert record.

    The reference price prefers ``close`` over ``price``; a missing or
    non-positive value leaves the price unset so evaluation falls back to the
    last bar's close. The timestamp falls back to the current time when the
    record carries none.

    Raises:
        MalformedDataError: If the record is not a mapping or has no ticker
    """
    if not isinstance(raw, dict):
        raise MalformedDataError(
            f"Alert payload must be dict, got {type(raw)}",
            raw_data=str(raw)[:100]
        )

    ticker = extract_ticker(raw)
    if not ticker:
        raise MalformedDataError("Alert is missing a ticker", raw_data=str(raw)[:100])

    price = None
    for key in ("close", "price"):
        candidate = _parse_number(raw.get(key))
        if candidate is not None and candidate > 0:
            price = candidate
            break

    timestamp = None
    for key in _TIMESTAMP_KEYS:
        timestamp = _parse_timestamp(raw.get(key))
        if timestamp is not None:
            break

    return Alert(
        ticker=ticker,
        timestamp=timestamp or utc_now(),
        price=price,
        volume=_parse_number(raw.get("volume")) or 0.0,
        change=_parse_number(raw.get("change")) or 0.0,
        change_percent=_parse_number(raw.get("changePercent")) or 0.0,
        alert_type=raw.get("alert_type"),
        raw=raw,
    )
