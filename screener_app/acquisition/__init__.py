"""Historical bar acquisition: provider interface, adapters and the widening policy."""

from .policy import AcquiredBars, HistoricalDataAcquirer
from .polygon import PolygonBarProvider
from .providers import BarProvider, InMemoryBarProvider

__all__ = [
    "AcquiredBars",
    "HistoricalDataAcquirer",
    "BarProvider",
    "InMemoryBarProvider",
    "PolygonBarProvider",
]
