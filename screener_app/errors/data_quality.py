"""
Data quality error classifications for market data processing.

These exceptions help categorize different types of data quality issues
that can occur while acquiring and preparing historical bars. All of them
are recoverable: the worst outcome is that one ticker produces no verdict
for the current cycle.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingDataError(DataQualityError):
    """Required data is completely missing."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class NoDataError(MissingDataError):
    """The bar provider holds no data at all for a ticker/timeframe."""

    def __init__(self, message: str, ticker: Optional[str] = None,
                 timeframe_minutes: Optional[int] = None, **kwargs):
        kwargs.setdefault("data_type", "bars")
        super().__init__(message, **kwargs)
        self.ticker = ticker
        self.timeframe_minutes = timeframe_minutes


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """Not enough historical data for calculations."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count


class AcquisitionExhaustedError(InsufficientDataError):
    """The widening lookback loop never reached sufficient history."""

    def __init__(self, message: str, ticker: Optional[str] = None,
                 attempts: int = 0, reason: str = "insufficient_data",
                 fine_count: int = 0, coarse_count: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.ticker = ticker
        self.attempts = attempts
        self.reason = reason
        self.fine_count = fine_count
        self.coarse_count = coarse_count
