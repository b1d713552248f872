"""
Error classification system for the alert screener.

This module provides a structured exception hierarchy separating recoverable
data quality problems (skip the ticker this cycle) from provider and system
failures (propagated to the caller).
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    NoDataError,
    MalformedDataError,
    InsufficientDataError,
    AcquisitionExhaustedError,
)
from .system_failures import (
    SystemFailureError,
    ProviderError,
    RateLimitError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "NoDataError",
    "MalformedDataError",
    "InsufficientDataError",
    "AcquisitionExhaustedError",
    # System Failures
    "SystemFailureError",
    "ProviderError",
    "RateLimitError",
    "ConfigurationError",
]
