"""Candle series container scanned by the hoop matcher.

The series is the read-only substrate of a search. It is validated once at
construction (timestamps strictly increasing) so the search loop never has
to re-check data shape.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from hoopmatch.core.exceptions import CandleSeriesError


@dataclass(frozen=True)
class Candle:
    """Single OHLCV bar. Timestamp is epoch milliseconds (bar open time)."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True, eq=False)
class CandleSeries:
    """Column-oriented OHLCV series with strictly increasing timestamps."""

    timestamps: NDArray[np.int64]
    opens: NDArray[np.float64]
    highs: NDArray[np.float64]
    lows: NDArray[np.float64]
    closes: NDArray[np.float64]
    volumes: NDArray[np.float64]

    def __post_init__(self) -> None:
        lengths = {
            len(self.timestamps),
            len(self.opens),
            len(self.highs),
            len(self.lows),
            len(self.closes),
            len(self.volumes),
        }
        if len(lengths) != 1:
            raise CandleSeriesError("All candle columns must have the same length")

        if len(self.timestamps) > 1:
            steps = np.diff(self.timestamps)
            if np.any(steps <= 0):
                bad = int(np.argmax(steps <= 0)) + 1
                raise CandleSeriesError(
                    f"Candle timestamps must be strictly increasing (violated at bar {bad})"
                )

    def __len__(self) -> int:
        return len(self.timestamps)

    @classmethod
    def from_candles(cls, candles: Sequence[Candle]) -> "CandleSeries":
        """Build a series from a sequence of Candle objects.

        Args:
            candles: Bars ordered oldest to newest

        Returns:
            CandleSeries

        Raises:
            CandleSeriesError: If timestamps are duplicated or out of order
        """
        return cls(
            timestamps=np.array([c.timestamp for c in candles], dtype=np.int64),
            opens=np.array([c.open for c in candles], dtype=float),
            highs=np.array([c.high for c in candles], dtype=float),
            lows=np.array([c.low for c in candles], dtype=float),
            closes=np.array([c.close for c in candles], dtype=float),
            volumes=np.array([c.volume for c in candles], dtype=float),
        )

    @classmethod
    def from_dataframe(cls, data: pd.DataFrame) -> "CandleSeries":
        """Build a series from an OHLCV DataFrame.

        Expects Open/High/Low/Close columns (Volume optional). Timestamps come
        from a `timestamp` column in epoch milliseconds if present, otherwise
        from a DatetimeIndex.

        Args:
            data: DataFrame with OHLCV data

        Returns:
            CandleSeries

        Raises:
            CandleSeriesError: If columns are missing or timestamps are not increasing
        """
        missing = [col for col in ("Open", "High", "Low", "Close") if col not in data.columns]
        if missing:
            raise CandleSeriesError(f"DataFrame is missing OHLC columns: {missing}")

        if "timestamp" in data.columns:
            timestamps = data["timestamp"].to_numpy(dtype=np.int64)
        elif isinstance(data.index, pd.DatetimeIndex):
            timestamps = data.index.as_unit("ms").asi8.astype(np.int64)
        else:
            raise CandleSeriesError("DataFrame needs a 'timestamp' column or a DatetimeIndex")

        volumes = (
            data["Volume"].to_numpy(dtype=float)
            if "Volume" in data.columns
            else np.zeros(len(data))
        )

        return cls(
            timestamps=timestamps,
            opens=data["Open"].to_numpy(dtype=float),
            highs=data["High"].to_numpy(dtype=float),
            lows=data["Low"].to_numpy(dtype=float),
            closes=data["Close"].to_numpy(dtype=float),
            volumes=volumes,
        )

    @classmethod
    def empty(cls) -> "CandleSeries":
        """Series with no bars."""
        return cls.from_candles([])
