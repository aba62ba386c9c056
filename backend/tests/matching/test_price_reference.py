"""Tests for reference price resolution."""

import numpy as np
import pytest

from hoopmatch.matching.price_reference import (
    resolve_for_pattern,
    resolve_reference_prices,
    warmup_bars,
)
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import HoopPattern, PriceSmoothingType
from tests.utils.factories import make_series


class TestResolveReferencePrices:
    """Per-bar reference prices for each smoothing type."""

    @pytest.mark.unit
    def test_none_uses_close(self):
        """Test NONE returns a copy of the closes."""
        series = make_series([10.0, 11.0, 12.0])

        refs = resolve_reference_prices(series, PriceSmoothingType.NONE)

        np.testing.assert_array_equal(refs, [10.0, 11.0, 12.0])
        refs[0] = 0.0
        assert series.closes[0] == 10.0

    @pytest.mark.unit
    def test_sma_marks_warmup_unavailable(self):
        """Test SMA leaves period - 1 leading bars as NaN."""
        series = make_series([1.0, 2.0, 3.0, 4.0, 5.0])

        refs = resolve_reference_prices(series, PriceSmoothingType.SMA, period=3)

        assert np.all(np.isnan(refs[:2]))
        np.testing.assert_array_almost_equal(refs[2:], [2.0, 3.0, 4.0])

    @pytest.mark.unit
    def test_ema_longer_than_series(self):
        """Test EMA(10) on five bars leaves every bar unavailable."""
        series = make_series([1.0, 2.0, 3.0, 4.0, 5.0])

        refs = resolve_reference_prices(series, PriceSmoothingType.EMA, period=10)

        assert len(refs) == 5
        assert np.all(np.isnan(refs))

    @pytest.mark.unit
    def test_hlc3(self):
        """Test HLC3 averages high, low and close."""
        series = make_series([10.0, 20.0], highs=[13.0, 23.0], lows=[7.0, 17.0])

        refs = resolve_reference_prices(series, PriceSmoothingType.HLC3)

        np.testing.assert_array_almost_equal(refs, [10.0, 20.0])

    @pytest.mark.unit
    def test_aligned_with_series(self):
        """Test every smoothing type returns one value per bar."""
        series = make_series(np.linspace(100.0, 110.0, 30))

        for smoothing in PriceSmoothingType:
            assert len(resolve_reference_prices(series, smoothing, period=7)) == 30

    @pytest.mark.unit
    def test_empty_series(self):
        """Test an empty series resolves to an empty array."""
        refs = resolve_reference_prices(CandleSeries.empty(), PriceSmoothingType.SMA, period=5)
        assert len(refs) == 0

    @pytest.mark.unit
    def test_resolve_for_pattern_uses_pattern_settings(self):
        """Test the pattern's smoothing type and period are applied."""
        series = make_series([1.0, 2.0, 3.0, 4.0])
        pattern = HoopPattern(id="p", price_smoothing_type="SMA", price_smoothing_period=2)

        refs = resolve_for_pattern(pattern, series)

        assert np.isnan(refs[0])
        np.testing.assert_array_almost_equal(refs[1:], [1.5, 2.5, 3.5])


class TestWarmupBars:
    """Warm-up length per smoothing type."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "smoothing,period,expected",
        [
            (PriceSmoothingType.NONE, 10, 0),
            (PriceSmoothingType.HLC3, 10, 0),
            (PriceSmoothingType.SMA, 10, 9),
            (PriceSmoothingType.EMA, 1, 0),
        ],
    )
    def test_warmup_bars(self, smoothing, period, expected):
        """Test warm-up is period - 1 for windowed averages only."""
        assert warmup_bars(smoothing, period) == expected
