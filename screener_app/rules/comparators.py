"""Floating-point comparators used by condition rules"""

from typing import Optional

DEFAULT_EPSILON = 1e-10
DEFAULT_TOLERANCE_PCT = 0.0001


def is_greater_than(a: Optional[float], b: Optional[float], epsilon: float = DEFAULT_EPSILON) -> bool:
    """
    Strict comparison guarded by an absolute epsilon.

    Used for zero-crossing checks where values near exactly zero would
    otherwise flip on floating-point noise.

    Returns:
        True iff both operands are present and ``a - b > epsilon``
    """
    if a is None or b is None:
        return False
    return (a - b) > epsilon


def is_greater_than_with_tolerance(a: Optional[float], b: Optional[float],
                                   tolerance_pct: float = DEFAULT_TOLERANCE_PCT) -> bool:
    """
    Comparison with a tolerance relative to the magnitude of ``b``.

    Used between price-scale values (EMA, VWAP, price) so that near-equal
    values count as not greater regardless of the instrument's price level.

    Returns:
        True iff both operands are present and ``a - b > |b| * tolerance_pct``
    """
    if a is None or b is None:
        return False
    return (a - b) > abs(b) * tolerance_pct
