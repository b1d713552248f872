"""
Advisory data quality checks run before indicators are computed.

Neither check blocks evaluation: a possibly stale verdict is preferred over
no verdict, so findings are returned as records and logged for operators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from ..data.models import Bar
from ..logging.config import get_logger, log_data_quality_warning
from ..utils.time import age_seconds, floor_to_timeframe

logger = get_logger(__name__)

STALE_DATA = "stale_data"
TIME_MISALIGNMENT = "time_misalignment"
INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class DataQualityWarning:
    """A non-fatal data quality finding."""
    kind: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": dict(self.details)}


def _emit(ticker: str, warning: DataQualityWarning) -> DataQualityWarning:
    log_data_quality_warning(logger, ticker, warning.kind, warning.message, warning.details)
    return warning


def check_freshness(
    ticker: str,
    fine: Sequence[Bar],
    coarse: Sequence[Bar],
    now: datetime,
    max_stale_hours: float = 24.0,
    fine_label: str = "1m",
    coarse_label: str = "5m"
) -> list[DataQualityWarning]:
    """
    Warn when the last bar of either timeframe is older than the threshold.

    Args:
        ticker: Ticker the bars belong to
        fine: Fine timeframe bars
        coarse: Coarse timeframe bars
        now: Evaluation time
        max_stale_hours: Staleness threshold in hours
        fine_label: Label of the fine timeframe
        coarse_label: Label of the coarse timeframe

    Returns:
        One warning per stale timeframe, or a single insufficient-data
        warning when either sequence is empty
    """
    if not fine or not coarse:
        return [_emit(ticker, DataQualityWarning(
            kind=INSUFFICIENT_DATA,
            message="Cannot validate data freshness: insufficient bar data",
            details={"fine_count": len(fine), "coarse_count": len(coarse)},
        ))]

    warnings = []
    max_age = max_stale_hours * 3600.0
    for label, bars in ((fine_label, fine), (coarse_label, coarse)):
        last_ts = bars[-1].ts
        age = age_seconds(last_ts, now)
        if age > max_age:
            warnings.append(_emit(ticker, DataQualityWarning(
                kind=STALE_DATA,
                message=f"{label} bar data is older than {max_stale_hours:g}h",
                details={
                    "timeframe": label,
                    "last_bar": last_ts.isoformat(),
                    "age_hours": round(age / 3600.0, 2),
                    "max_stale_hours": max_stale_hours,
                },
            )))

    if not warnings:
        logger.debug(
            "Data freshness verified",
            ticker=ticker,
            last_fine=fine[-1].ts.isoformat(),
            last_coarse=coarse[-1].ts.isoformat(),
        )
    return warnings


def check_time_alignment(
    ticker: str,
    fine: Sequence[Bar],
    coarse: Sequence[Bar],
    coarse_minutes: int = 5,
    tolerance_seconds: float = 60
) -> list[DataQualityWarning]:
    """
    Warn when the coarse sequence lags the fine one.

    Both last timestamps are floored to the coarse granularity; a difference
    larger than the tolerance means a stale coarse sequence is being paired
    with a fresh fine one (or the reverse).

    Args:
        ticker: Ticker the bars belong to
        fine: Fine timeframe bars
        coarse: Coarse timeframe bars
        coarse_minutes: Coarse timeframe in minutes
        tolerance_seconds: Allowed difference after flooring

    Returns:
        A misalignment warning, an insufficient-data warning, or nothing
    """
    if not fine or not coarse:
        return [_emit(ticker, DataQualityWarning(
            kind=INSUFFICIENT_DATA,
            message="Cannot verify time alignment: insufficient bar data",
            details={"fine_count": len(fine), "coarse_count": len(coarse)},
        ))]

    fine_floor = floor_to_timeframe(fine[-1].ts, coarse_minutes)
    coarse_floor = floor_to_timeframe(coarse[-1].ts, coarse_minutes)
    difference = abs((fine_floor - coarse_floor).total_seconds())

    if difference > tolerance_seconds:
        return [_emit(ticker, DataQualityWarning(
            kind=TIME_MISALIGNMENT,
            message="Fine and coarse bars are not aligned in time",
            details={
                "fine_last": fine[-1].ts.isoformat(),
                "coarse_last": coarse[-1].ts.isoformat(),
                "normalized_fine": fine_floor.isoformat(),
                "normalized_coarse": coarse_floor.isoformat(),
                "difference_seconds": difference,
            },
        ))]

    return []


def run_quality_checks(
    ticker: str,
    fine: Sequence[Bar],
    coarse: Sequence[Bar],
    now: datetime,
    max_stale_hours: float = 24.0,
    coarse_minutes: int = 5,
    tolerance_seconds: float = 60,
    fine_label: Optional[str] = None,
    coarse_label: Optional[str] = None
) -> list[DataQualityWarning]:
    """Run the freshness and alignment checks and collect their warnings."""
    warnings = check_freshness(
        ticker, fine, coarse, now, max_stale_hours,
        fine_label or "1m", coarse_label or f"{coarse_minutes}m",
    )
    warnings.extend(check_time_alignment(ticker, fine, coarse, coarse_minutes, tolerance_seconds))
    return warnings
