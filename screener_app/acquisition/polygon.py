"""HTTP bar provider for the Polygon aggregates API."""

import os
import socket
from datetime import date
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..config.defaults import ProviderParams
from ..data.models import Bar
from ..data.parsers import parse_aggregate_bars, parse_json_payload
from ..errors import MalformedDataError, NoDataError, ProviderError, RateLimitError
from ..logging.config import get_logger

API_KEY_ENV = "POLYGON_API_KEY"


class PolygonBarProvider:
    """
    Fetches minute aggregates over HTTP.

    The provider performs a single request per call and never retries;
    failures are raised as ``ProviderError`` for the caller to handle.
    """

    def __init__(self, params: Optional[ProviderParams] = None, api_key: Optional[str] = None):
        self.params = params or ProviderParams()
        self.api_key = api_key or self.params.api_key or os.environ.get(API_KEY_ENV)
        self.logger = get_logger(__name__).bind(provider="polygon")

        if not self.api_key:
            self.logger.warning("No API key configured", env_var=API_KEY_ENV)

    def build_url(self, ticker: str, timeframe_minutes: int, from_date: date, to_date: date) -> str:
        """Build the aggregates request URL."""
        path = (
            f"/v2/aggs/ticker/{quote(ticker.upper())}/range/{timeframe_minutes}/minute/"
            f"{from_date.isoformat()}/{to_date.isoformat()}"
        )
        query = {"adjusted": "true", "sort": "asc", "limit": 50000}
        if self.api_key:
            query["apiKey"] = self.api_key
        return f"{self.params.base_url.rstrip('/')}{path}?{urlencode(query)}"

    def fetch_bars(self, ticker: str, timeframe_minutes: int,
                   from_date: date, to_date: date) -> list[Bar]:
        """
        Fetch bars for a ticker and date range.

        Raises:
            NoDataError: The response holds no results
            RateLimitError: HTTP 429
            ProviderError: Any other HTTP, network or payload failure
        """
        url = self.build_url(ticker, timeframe_minutes, from_date, to_date)
        req = Request(url, headers={"User-Agent": "alert-screener/0.1", "Accept": "application/json"})

        try:
            with urlopen(req, timeout=self.params.timeout_seconds) as response:
                body = response.read()

        except HTTPError as e:
            self.logger.warning(
                "Provider HTTP error",
                ticker=ticker,
                timeframe_minutes=timeframe_minutes,
                error_code=e.code,
                error_reason=str(e.reason),
            )
            if e.code == 429:
                retry_after = e.headers.get("Retry-After") if e.headers else None
                raise RateLimitError(
                    f"Rate limited fetching {ticker}",
                    retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
                    ticker=ticker,
                )
            raise ProviderError(f"HTTP {e.code}: {e.reason}", ticker=ticker, status_code=e.code)

        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning("Provider network error", ticker=ticker, error=str(e))
            raise ProviderError(f"Network error: {str(e)}", ticker=ticker)

        try:
            payload = parse_json_payload(body)
            bars = self._parse_payload(ticker, payload)
        except MalformedDataError as e:
            raise ProviderError(f"Invalid provider response: {str(e)}", ticker=ticker)

        if not bars:
            raise NoDataError(
                f"No {timeframe_minutes}m data for {ticker}",
                ticker=ticker,
                timeframe_minutes=timeframe_minutes,
            )

        self.logger.debug(
            "Fetched bars",
            ticker=ticker,
            timeframe_minutes=timeframe_minutes,
            from_date=from_date.isoformat(),
            to_date=to_date.isoformat(),
            count=len(bars),
        )
        return bars

    def _parse_payload(self, ticker: str, payload: dict[str, Any]) -> list[Bar]:
        status = payload.get("status")
        if status not in (None, "OK", "DELAYED"):
            raise ProviderError(
                f"Provider returned status {status}: {payload.get('error') or payload.get('message', '')}",
                ticker=ticker,
            )
        return parse_aggregate_bars(payload)
