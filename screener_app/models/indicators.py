"""Data models for indicator bundles and evaluation input"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from ..data.models import Bar

if TYPE_CHECKING:
    from ..metrics.quality import DataQualityWarning


@dataclass(frozen=True)
class MACDResult:
    """Latest MACD line value, its signal line and the histogram."""
    macd: float
    signal: float
    histogram: float

    def to_dict(self) -> dict[str, float]:
        return {"macd": self.macd, "signal": self.signal, "histogram": self.histogram}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MACDResult":
        return cls(
            macd=data["macd"],
            signal=data["signal"],
            histogram=data["histogram"],
        )


# Scalar, MACD triple (complete or partial), or None when undefined
IndicatorValue = Union[float, MACDResult, Mapping[str, Any], None]

LOD_KEY = "lod"
HOD_KEY = "hod"

_MACD_FIELDS = ("macd", "signal", "histogram")


def ema_key(timeframe_label: str, period: int) -> str:
    """Bundle name of an EMA, e.g. ``ema_1m_18``."""
    return f"ema_{timeframe_label}_{period}"


def vwap_key(timeframe_label: str) -> str:
    return f"vwap_{timeframe_label}"


def macd_key(timeframe_label: str) -> str:
    """Bundle name of a MACD triple, e.g. ``macd_5m``."""
    return f"macd_{timeframe_label}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _normalize_value(value: Any) -> IndicatorValue:
    if value is None or isinstance(value, MACDResult):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, Mapping):
        if all(_is_number(value.get(name)) for name in _MACD_FIELDS):
            return MACDResult(**{name: float(value[name]) for name in _MACD_FIELDS})
        return MappingProxyType(dict(value))
    return None


@dataclass(frozen=True)
class IndicatorBundle:
    """
    Immutable mapping from indicator name to value.

    A value is None when the indicator could not be computed from the
    available bars. MACD triples supplied from outside (``from_dict``) that
    lack one of their fields are kept as read-only mappings so that a rule
    reading the missing field sees it as missing.
    """
    values: Mapping[str, IndicatorValue] = field(default_factory=dict)

    def __post_init__(self):
        normalized = {name: _normalize_value(value) for name, value in self.values.items()}
        object.__setattr__(self, "values", MappingProxyType(normalized))

    def get(self, name: str) -> IndicatorValue:
        """Value of ``name``, None if undefined or absent."""
        return self.values.get(name)

    def get_field(self, name: str, field_name: str) -> Optional[float]:
        """One field of a MACD triple, None if the triple or the field is missing."""
        value = self.values.get(name)
        if isinstance(value, MACDResult):
            return getattr(value, field_name, None)
        if isinstance(value, Mapping):
            candidate = value.get(field_name)
            if _is_number(candidate):
                return float(candidate)
        return None

    def names(self) -> list[str]:
        return list(self.values)

    def missing(self) -> list[str]:
        """Names of indicators that are undefined."""
        return [name for name, value in self.values.items() if value is None]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, value in self.values.items():
            if isinstance(value, MACDResult):
                result[name] = value.to_dict()
            elif isinstance(value, Mapping):
                result[name] = dict(value)
            else:
                result[name] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IndicatorBundle":
        return cls(values=dict(data))


def _parse_last_bar(value: Any) -> Optional[Bar]:
    """The last bar, or None when it is absent or incomplete."""
    if not isinstance(value, Mapping):
        return None
    try:
        return Bar.from_dict(dict(value))
    except (KeyError, TypeError, ValueError):
        return None


@dataclass(frozen=True)
class EvaluationInput:
    """The condition evaluator's sole input contract."""
    ticker: str
    indicators: IndicatorBundle
    last_bar: Optional[Bar] = None
    current_price: Optional[float] = None

    @property
    def reference_price(self) -> Optional[float]:
        """Current price when it is a positive number, else the last close."""
        if self.current_price is not None and self.current_price > 0:
            return self.current_price
        if self.last_bar is not None:
            return self.last_bar.close
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "indicators": self.indicators.to_dict(),
            "lastBar": self.last_bar.to_dict() if self.last_bar else None,
            "currentPrice": self.current_price,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvaluationInput":
        current_price = data.get("currentPrice")
        if isinstance(current_price, bool) or not isinstance(current_price, (int, float)):
            current_price = None
        return cls(
            ticker=data.get("ticker") or "unknown",
            indicators=IndicatorBundle.from_dict(data.get("indicators") or {}),
            last_bar=_parse_last_bar(data.get("lastBar")),
            current_price=current_price,
        )


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicators computed for one ticker in one evaluation cycle"""
    ticker: str
    computed_at: datetime
    indicators: IndicatorBundle
    last_bar: Optional[Bar] = None
    bar_counts: Mapping[str, int] = field(default_factory=dict)
    warnings: tuple["DataQualityWarning", ...] = ()

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_evaluation_input(self, current_price: Optional[float] = None) -> EvaluationInput:
        return EvaluationInput(
            ticker=self.ticker,
            indicators=self.indicators,
            last_bar=self.last_bar,
            current_price=current_price,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "timestamp": self.computed_at.isoformat(),
            "indicators": self.indicators.to_dict(),
            "lastBar": self.last_bar.to_dict() if self.last_bar else None,
            "barCounts": dict(self.bar_counts),
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
