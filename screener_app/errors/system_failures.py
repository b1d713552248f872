"""
System failure error classifications.

These exceptions represent failures outside the screening core, such as the
historical data provider being unreachable. They are propagated unmodified so
that the caller owns retry and backoff decisions.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for failures the screening core cannot recover from."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ProviderError(SystemFailureError):
    """The bar provider failed (network, auth, upstream error status)."""

    def __init__(self, message: str, ticker: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ticker = ticker
        self.status_code = status_code


class RateLimitError(ProviderError):
    """The bar provider rejected the request due to rate limiting."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ConfigurationError(SystemFailureError):
    """Configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
