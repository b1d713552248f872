"""Default configuration parameters for the alert screening engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimeframeParams:
    """Bar timeframes used for indicator computation."""
    fine_minutes: int = 1                             # Fine timeframe (1m bars)
    coarse_minutes: int = 5                           # Coarse timeframe (5m bars)

    @property
    def fine_label(self) -> str:
        return f"{self.fine_minutes}m"

    @property
    def coarse_label(self) -> str:
        return f"{self.coarse_minutes}m"


@dataclass(frozen=True)
class IndicatorParams:
    """Indicator periods."""
    ema_periods: tuple[int, ...] = (12, 18, 20, 26, 200)
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9


@dataclass(frozen=True)
class AcquisitionParams:
    """Historical data acquisition policy parameters."""
    lookback_days: tuple[int, ...] = (10, 15, 20, 30)  # Widening lookback windows
    max_attempts: int = 4
    min_fine_bars: int = 200                          # Stable 200-period EMA
    min_coarse_bars: int = 50


@dataclass(frozen=True)
class SessionParams:
    """Active trading session window (UTC, end exclusive)."""
    start_utc: str = "13:30"                          # 9:30 ET
    end_utc: str = "20:00"                            # 16:00 ET


@dataclass(frozen=True)
class QualityParams:
    """Advisory data quality thresholds."""
    max_stale_hours: float = 24.0
    alignment_tolerance_seconds: int = 60


@dataclass(frozen=True)
class EvaluationParams:
    """Condition evaluation parameters."""
    rule_set: str = "full"                            # "full" (7 rules) or "simplified" (3 rules)
    epsilon: float = 1e-10                            # Strict comparator absolute epsilon
    tolerance_pct: float = 0.0001                     # Relative tolerance for price-scale comparisons


@dataclass(frozen=True)
class PipelineParams:
    """Batch screening parameters."""
    batch_size: int = 5                               # Concurrent tickers per batch
    batch_delay_seconds: float = 1.0                  # Pacing delay between batches
    acquisition_timeout_seconds: Optional[float] = 60.0


@dataclass(frozen=True)
class ProviderParams:
    """Historical bar provider parameters."""
    base_url: str = "https://api.polygon.io"
    api_key: Optional[str] = None                     # Falls back to POLYGON_API_KEY
    timeout_seconds: int = 30


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    timeframes: TimeframeParams
    indicators: IndicatorParams
    acquisition: AcquisitionParams
    session: SessionParams
    quality: QualityParams
    evaluation: EvaluationParams
    pipeline: PipelineParams
    provider: ProviderParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        timeframes=TimeframeParams(),
        indicators=IndicatorParams(),
        acquisition=AcquisitionParams(),
        session=SessionParams(),
        quality=QualityParams(),
        evaluation=EvaluationParams(),
        pipeline=PipelineParams(),
        provider=ProviderParams(),
    )
