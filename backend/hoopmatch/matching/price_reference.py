"""Reference price resolution for hoop matching.

The matcher never scans raw closes directly: it scans one reference price
per bar, optionally smoothed to reduce noise from wicks and spikes. Bars in
the warm-up region of a windowed average are NaN ("unavailable") and are
skipped by the evaluator, both as anchors and as hoop hits.
"""

import numpy as np
from numpy.typing import NDArray

from hoopmatch.indicators.technical import (
    exponential_moving_average,
    simple_moving_average,
    typical_price,
)
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import HoopPattern, PriceSmoothingType


def resolve_reference_prices(
    series: CandleSeries,
    smoothing_type: PriceSmoothingType = PriceSmoothingType.NONE,
    period: int = 5,
) -> NDArray[np.float64]:
    """Compute the per-bar reference price for a candle series.

    Args:
        series: Candle series to resolve
        smoothing_type: Smoothing applied to the series
        period: Window for SMA/EMA (ignored for NONE and HLC3)

    Returns:
        Array aligned with the series. NaN marks warm-up bars.

    Raises:
        ValueError: If period <= 0 for a windowed smoothing type
    """
    if len(series) == 0:
        return np.empty(0, dtype=float)

    if smoothing_type == PriceSmoothingType.NONE:
        return series.closes.astype(float, copy=True)
    elif smoothing_type == PriceSmoothingType.SMA:
        return simple_moving_average(series.closes, period)
    elif smoothing_type == PriceSmoothingType.EMA:
        return exponential_moving_average(series.closes, period)
    elif smoothing_type == PriceSmoothingType.HLC3:
        return typical_price(series.highs, series.lows, series.closes)

    raise ValueError(f"Unsupported smoothing type: {smoothing_type}")


def resolve_for_pattern(pattern: HoopPattern, series: CandleSeries) -> NDArray[np.float64]:
    """Resolve reference prices using a pattern's smoothing settings."""
    return resolve_reference_prices(
        series, pattern.price_smoothing_type, pattern.price_smoothing_period
    )


def warmup_bars(smoothing_type: PriceSmoothingType, period: int) -> int:
    """Number of leading bars with no reference value."""
    if smoothing_type in (PriceSmoothingType.SMA, PriceSmoothingType.EMA):
        return max(0, period - 1)
    return 0
