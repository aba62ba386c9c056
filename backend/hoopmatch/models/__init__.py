"""Domain models for the hoop pattern matcher.

Import models from this module rather than from the individual files.
"""

from hoopmatch.models.candles import Candle, CandleSeries
from hoopmatch.models.hoop import (
    AnchorMode,
    CombineMode,
    Hoop,
    HoopMatchResult,
    HoopPattern,
    PriceSmoothingType,
)

__all__ = [
    "AnchorMode",
    "Candle",
    "CandleSeries",
    "CombineMode",
    "Hoop",
    "HoopMatchResult",
    "HoopPattern",
    "PriceSmoothingType",
]
