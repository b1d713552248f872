"""
Adaptive historical data acquisition.

The 200-period EMA on the fine timeframe needs at least 200 bars, which a
thinly traded ticker may not produce inside a short window of regular
session hours. The acquirer therefore widens its lookback window step by
step, preferring session-only bars, and on its final attempt accepts
extended-hours bars when those are sufficient.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import Bar
from ..data.validators import normalize_bar_sequence
from ..errors import AcquisitionExhaustedError, NoDataError
from ..logging.config import get_acquisition_logger
from ..utils.time import in_session, lookback_range, parse_clock, utc_now
from .providers import BarProvider

logger = get_acquisition_logger(__name__)


@dataclass(frozen=True)
class AcquiredBars:
    """Fine and coarse bar sequences accepted by the acquisition policy."""
    ticker: str
    fine: list[Bar]
    coarse: list[Bar]
    session_only: bool          # False when extended-hours bars were accepted
    attempts: int
    lookback_days: int


class HistoricalDataAcquirer:
    """
    Fetches enough fine and coarse history for indicator computation.

    Provider failures (``ProviderError``) are never caught here: retry and
    backoff belong to the caller.
    """

    def __init__(
        self,
        provider: BarProvider,
        config: Optional[DefaultConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        now_fn: Callable[[], datetime] = utc_now
    ):
        self.provider = provider
        self.config = config or get_default_config()
        self.clock = clock
        self.now_fn = now_fn

        session = self.config.session
        self.session_start = parse_clock(session.start_utc)
        self.session_end = parse_clock(session.end_utc)

    @property
    def schedule(self) -> tuple[int, ...]:
        """Lookback windows in days, one per attempt."""
        acquisition = self.config.acquisition
        return tuple(acquisition.lookback_days[:acquisition.max_attempts])

    def filter_session(self, bars: list[Bar]) -> list[Bar]:
        """Keep bars whose timestamp falls inside the session window."""
        return [bar for bar in bars if in_session(bar.ts, self.session_start, self.session_end)]

    def is_sufficient(self, fine: list[Bar], coarse: list[Bar]) -> bool:
        acquisition = self.config.acquisition
        return len(fine) >= acquisition.min_fine_bars and len(coarse) >= acquisition.min_coarse_bars

    def acquire(self, ticker: str, deadline: Optional[float] = None) -> AcquiredBars:
        """
        Acquire fine and coarse bars for a ticker.

        Args:
            ticker: Ticker to fetch
            deadline: Optional value of ``clock`` after which acquisition
                is abandoned

        Returns:
            AcquiredBars meeting the minimum bar counts

        Raises:
            NoDataError: The provider has no fine data for the ticker
            AcquisitionExhaustedError: Every window was too short, or the
                deadline passed
            ProviderError: Propagated from the provider unmodified
        """
        timeframes = self.config.timeframes
        schedule = self.schedule
        fine: list[Bar] = []
        coarse: list[Bar] = []

        for attempt, days in enumerate(schedule, start=1):
            self._check_deadline(ticker, deadline, attempt - 1, fine, coarse)

            from_date, to_date = lookback_range(days, self.now_fn())
            logger.info(
                "Fetching historical bars",
                ticker=ticker,
                attempt=attempt,
                lookback_days=days,
                from_date=from_date.isoformat(),
                to_date=to_date.isoformat(),
            )

            fine = normalize_bar_sequence(
                self.provider.fetch_bars(ticker, timeframes.fine_minutes, from_date, to_date),
                ticker=ticker,
                timeframe=timeframes.fine_label,
            )
            self._check_deadline(ticker, deadline, attempt, fine, coarse)

            if not fine:
                logger.warning("No data available", ticker=ticker, attempt=attempt)
                raise NoDataError(
                    f"No {timeframes.fine_label} data available for {ticker}",
                    ticker=ticker,
                    timeframe_minutes=timeframes.fine_minutes,
                )

            coarse = normalize_bar_sequence(
                self.provider.fetch_bars(ticker, timeframes.coarse_minutes, from_date, to_date),
                ticker=ticker,
                timeframe=timeframes.coarse_label,
            )
            self._check_deadline(ticker, deadline, attempt, fine, coarse)

            session_fine = self.filter_session(fine)
            session_coarse = self.filter_session(coarse)
            logger.debug(
                "Session filtered bar counts",
                ticker=ticker,
                attempt=attempt,
                fine_count=len(fine),
                coarse_count=len(coarse),
                session_fine_count=len(session_fine),
                session_coarse_count=len(session_coarse),
            )

            if self.is_sufficient(session_fine, session_coarse):
                logger.info(
                    "Using session-only bars",
                    ticker=ticker,
                    attempt=attempt,
                    fine_count=len(session_fine),
                    coarse_count=len(session_coarse),
                )
                return AcquiredBars(ticker, session_fine, session_coarse, True, attempt, days)

            if attempt == len(schedule) and self.is_sufficient(fine, coarse):
                logger.warning(
                    "Using extended-hours bars on final attempt",
                    ticker=ticker,
                    attempt=attempt,
                    fine_count=len(fine),
                    coarse_count=len(coarse),
                )
                return AcquiredBars(ticker, fine, coarse, False, attempt, days)

            logger.info(
                "Insufficient history, widening lookback",
                ticker=ticker,
                attempt=attempt,
                session_fine_count=len(session_fine),
                session_coarse_count=len(session_coarse),
            )

        logger.warning(
            "Acquisition exhausted",
            ticker=ticker,
            attempts=len(schedule),
            fine_count=len(fine),
            coarse_count=len(coarse),
        )
        raise AcquisitionExhaustedError(
            f"Insufficient data for {ticker} after {len(schedule)} attempts "
            f"({timeframes.fine_label}: {len(fine)}, {timeframes.coarse_label}: {len(coarse)})",
            ticker=ticker,
            attempts=len(schedule),
            fine_count=len(fine),
            coarse_count=len(coarse),
            required_count=self.config.acquisition.min_fine_bars,
            available_count=len(fine),
        )

    def _check_deadline(self, ticker: str, deadline: Optional[float], attempts: int,
                        fine: list[Bar], coarse: list[Bar]) -> None:
        if deadline is None or self.clock() <= deadline:
            return

        logger.warning("Acquisition deadline exceeded", ticker=ticker, attempts=attempts)
        raise AcquisitionExhaustedError(
            f"Acquisition deadline exceeded for {ticker}",
            ticker=ticker,
            attempts=attempts,
            reason="deadline",
            fine_count=len(fine),
            coarse_count=len(coarse),
        )
