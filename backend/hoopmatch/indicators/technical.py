"""Price smoothing indicators used to build hoop reference prices.

This module provides NumPy-based implementations of the smoothing functions
the matcher can apply to a candle series before scanning it.

All functions return an array aligned 1:1 with their input. Bars inside the
warm-up region of a windowed average are NaN so that callers can tell
"unavailable" apart from a real price.
"""

import numpy as np
from numpy.typing import NDArray


def simple_moving_average(
    prices: list[float] | NDArray[np.float64], period: int
) -> NDArray[np.float64]:
    """Calculate Simple Moving Average (SMA).

    The SMA is calculated as the arithmetic mean of the last n periods.
    Formula: SMA = (P1 + P2 + ... + Pn) / n

    Args:
        prices: Price data as list or numpy array
        period: Number of periods for the average (must be > 0)

    Returns:
        Array of SMA values. NaN for the first period - 1 bars.

    Raises:
        ValueError: If period <= 0

    Example:
        >>> prices = [1, 2, 3, 4, 5]
        >>> sma = simple_moving_average(prices, 3)
        >>> # Returns [NaN, NaN, 2.0, 3.0, 4.0]
    """
    if period <= 0:
        raise ValueError("Period must be greater than 0")

    prices_array = np.asarray(prices, dtype=float)
    sma = np.full(len(prices_array), np.nan)

    if len(prices_array) < period:
        return sma

    # Use convolution for efficient calculation
    kernel = np.ones(period) / period
    sma[period - 1 :] = np.convolve(prices_array, kernel, mode="valid")

    return sma


def exponential_moving_average(
    prices: list[float] | NDArray[np.float64], period: int
) -> NDArray[np.float64]:
    """Calculate Exponential Moving Average (EMA).

    Formula: EMA = α * Price + (1 - α) * Previous_EMA
    where α = 2 / (period + 1)

    The recursion is seeded with the SMA of the first `period` prices, so the
    first value is available at index period - 1 and earlier bars are NaN.

    Args:
        prices: Price data as list or numpy array
        period: Number of periods for the average (must be > 0)

    Returns:
        Array of EMA values. NaN for the first period - 1 bars.

    Raises:
        ValueError: If period <= 0

    Example:
        >>> ema = exponential_moving_average([1, 2, 3, 4, 5], 3)
        >>> # Returns [NaN, NaN, 2.0, 3.0, 4.0]
    """
    if period <= 0:
        raise ValueError("Period must be greater than 0")

    prices_array = np.asarray(prices, dtype=float)
    ema = np.full(len(prices_array), np.nan)

    if len(prices_array) < period:
        return ema

    alpha = 2.0 / (period + 1)
    ema[period - 1] = prices_array[:period].mean()

    for i in range(period, len(prices_array)):
        ema[i] = alpha * prices_array[i] + (1 - alpha) * ema[i - 1]

    return ema


def typical_price(
    high: list[float] | NDArray[np.float64],
    low: list[float] | NDArray[np.float64],
    close: list[float] | NDArray[np.float64],
) -> NDArray[np.float64]:
    """Calculate Typical Price (HLC3).

    Formula: TP = (High + Low + Close) / 3

    Args:
        high: High prices as list or numpy array
        low: Low prices as list or numpy array
        close: Close prices as list or numpy array

    Returns:
        Array of typical price values

    Raises:
        ValueError: If arrays have different lengths
    """
    high_array = np.asarray(high, dtype=float)
    low_array = np.asarray(low, dtype=float)
    close_array = np.asarray(close, dtype=float)

    if len(high_array) != len(low_array) or len(high_array) != len(close_array):
        raise ValueError("High, low, and close arrays must have same length")

    result: NDArray[np.float64] = (high_array + low_array + close_array) / 3.0
    return result
