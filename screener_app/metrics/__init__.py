"""Indicator calculation engine for technical analysis"""

from .aggregator import IndicatorAggregator
from .ema import EMACalculator, MACDCalculator, MACDResult, calculate_ema, calculate_ema_series, calculate_macd
from .quality import DataQualityWarning, check_freshness, check_time_alignment
from .vwap import SessionRange, calculate_session_range, calculate_vwap

__all__ = [
    "IndicatorAggregator",
    "EMACalculator",
    "MACDCalculator",
    "MACDResult",
    "calculate_ema",
    "calculate_ema_series",
    "calculate_macd",
    "calculate_vwap",
    "calculate_session_range",
    "SessionRange",
    "DataQualityWarning",
    "check_freshness",
    "check_time_alignment",
]
