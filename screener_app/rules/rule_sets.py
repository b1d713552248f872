"""
Declarative condition rule sets.

A rule set is an ordered tuple of ConditionRule records. Rule order is
significant: it is the evaluation order and the order of the verdict's
condition mapping and failure list.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.indicators import EvaluationInput
from .comparators import is_greater_than, is_greater_than_with_tolerance


class Comparator(str, Enum):
    """How a rule compares its two operands."""
    GREATER_THAN = "greater_than"
    GREATER_THAN_WITH_TOLERANCE = "greater_than_with_tolerance"

    def compare(self, a: Optional[float], b: Optional[float],
                epsilon: float, tolerance_pct: float) -> bool:
        if self is Comparator.GREATER_THAN:
            return is_greater_than(a, b, epsilon)
        return is_greater_than_with_tolerance(a, b, tolerance_pct)


class OperandKind(str, Enum):
    INDICATOR = "indicator"
    PRICE = "price"
    CONSTANT = "constant"


@dataclass(frozen=True)
class Operand:
    """Selects one value from an evaluation input."""
    kind: OperandKind
    label: str
    name: Optional[str] = None          # Indicator name in the bundle
    field: Optional[str] = None         # Field of a MACD triple
    value: Optional[float] = None       # Constant value

    @classmethod
    def indicator(cls, name: str, label: str, field: Optional[str] = None) -> "Operand":
        return cls(kind=OperandKind.INDICATOR, label=label, name=name, field=field)

    @classmethod
    def price(cls, label: str = "Close") -> "Operand":
        return cls(kind=OperandKind.PRICE, label=label)

    @classmethod
    def constant(cls, value: float) -> "Operand":
        return cls(kind=OperandKind.CONSTANT, label=f"{value:g}", value=value)

    @property
    def is_constant(self) -> bool:
        return self.kind is OperandKind.CONSTANT

    def resolve(self, data: EvaluationInput) -> Optional[float]:
        """
        Resolve the operand against an evaluation input.

        Returns None when the referenced value is missing. A MACD operand
        reads exactly its configured field; a bare scalar never satisfies a
        field selector.
        """
        if self.kind is OperandKind.CONSTANT:
            return self.value
        if self.kind is OperandKind.PRICE:
            return data.reference_price

        if self.field is not None:
            return data.indicators.get_field(self.name, self.field)

        value = data.indicators.get(self.name)
        if isinstance(value, float):
            return value
        return None


@dataclass(frozen=True)
class ConditionRule:
    """A named comparison between two operands."""
    key: str
    label: str
    comparator: Comparator
    left: Operand
    right: Operand


_ZERO = Operand.constant(0)

_EMA18_1M = Operand.indicator("ema_1m_18", "EMA 18")
_EMA200_1M = Operand.indicator("ema_1m_200", "EMA 200")
_EMA18_5M = Operand.indicator("ema_5m_18", "EMA 18")
_EMA200_5M = Operand.indicator("ema_5m_200", "EMA 200")
_VWAP_1M = Operand.indicator("vwap_1m", "VWAP")

_EMA18_ABOVE_VWAP_1M = ConditionRule(
    key="ema18AboveVwap_1m",
    label="EMA 18 (1m) > VWAP (1m)",
    comparator=Comparator.GREATER_THAN_WITH_TOLERANCE,
    left=_EMA18_1M,
    right=_VWAP_1M,
)

FULL_RULE_SET: tuple[ConditionRule, ...] = (
    ConditionRule(
        key="macd5mPositive",
        label="MACD (5m) > 0",
        comparator=Comparator.GREATER_THAN,
        left=Operand.indicator("macd_5m", "MACD", field="macd"),
        right=_ZERO,
    ),
    ConditionRule(
        key="macd1mPositive",
        label="MACD (1m) > 0",
        comparator=Comparator.GREATER_THAN,
        left=Operand.indicator("macd_1m", "MACD", field="macd"),
        right=_ZERO,
    ),
    ConditionRule(
        key="ema18Above200_1m",
        label="EMA 18 (1m) > EMA 200 (1m)",
        comparator=Comparator.GREATER_THAN_WITH_TOLERANCE,
        left=_EMA18_1M,
        right=_EMA200_1M,
    ),
    _EMA18_ABOVE_VWAP_1M,
    ConditionRule(
        key="vwapAboveEma200_1m",
        label="VWAP (1m) > EMA 200 (1m)",
        comparator=Comparator.GREATER_THAN_WITH_TOLERANCE,
        left=_VWAP_1M,
        right=_EMA200_1M,
    ),
    ConditionRule(
        key="closeAboveEma18_1m",
        label="Close > EMA 18 (1m)",
        comparator=Comparator.GREATER_THAN_WITH_TOLERANCE,
        left=Operand.price("Close"),
        right=_EMA18_1M,
    ),
    ConditionRule(
        key="ema200AboveEma18_5m",
        label="EMA 200 (5m) > EMA 18 (5m)",
        comparator=Comparator.GREATER_THAN_WITH_TOLERANCE,
        left=_EMA200_5M,
        right=_EMA18_5M,
    ),
)

SIMPLIFIED_RULE_SET: tuple[ConditionRule, ...] = (
    ConditionRule(
        key="macd5mPositive",
        label="MACD Histogram (5m) > 0",
        comparator=Comparator.GREATER_THAN,
        left=Operand.indicator("macd_5m", "MACD Histogram", field="histogram"),
        right=_ZERO,
    ),
    ConditionRule(
        key="macd1mPositive",
        label="MACD Histogram (1m) > 0",
        comparator=Comparator.GREATER_THAN,
        left=Operand.indicator("macd_1m", "MACD Histogram", field="histogram"),
        right=_ZERO,
    ),
    _EMA18_ABOVE_VWAP_1M,
)

RULE_SETS: dict[str, tuple[ConditionRule, ...]] = {
    "full": FULL_RULE_SET,
    "simplified": SIMPLIFIED_RULE_SET,
}


def get_rule_set(name: str) -> tuple[ConditionRule, ...]:
    """
    Look up a registered rule set by name.

    Raises:
        KeyError: If no rule set is registered under ``name``
    """
    try:
        return RULE_SETS[name]
    except KeyError:
        raise KeyError(f"Unknown rule set '{name}', expected one of: {', '.join(sorted(RULE_SETS))}")
