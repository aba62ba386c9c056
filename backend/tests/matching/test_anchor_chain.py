"""Tests for anchor chain evaluation."""

import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hoopmatch.matching.anchor_chain import (
    AnchorChainEvaluator,
    band_target_price,
    evaluate_anchor,
    first_hit_in_window,
    hoop_window,
    next_reference,
    price_band,
    round_half_up,
)
from hoopmatch.models.hoop import AnchorMode, Hoop
from tests.utils.factories import make_pattern

DIP = {"name": "dip", "min_price_percent": -4.0, "max_price_percent": -2.0, "distance": 5, "tolerance": 1}


def flat(length: int, **overrides: float) -> np.ndarray:
    """Reference prices at 100 with selected bars overridden (keys like b5=97.0)."""
    refs = np.full(length, 100.0)
    for key, value in overrides.items():
        refs[int(key[1:])] = value
    return refs


class TestPriceBand:
    """Absolute price band from percentage offsets."""

    @pytest.mark.unit
    def test_closed_band(self):
        """Test a band below the reference price."""
        lo, hi = price_band(Hoop(**DIP), 100.0)

        assert lo == pytest.approx(96.0)
        assert hi == pytest.approx(98.0)

    @pytest.mark.unit
    def test_open_ended_band(self):
        """Test an absent max means no upper bound."""
        lo, hi = price_band(Hoop(min_price_percent=3.0, distance=2), 100.0)

        assert lo == pytest.approx(103.0)
        assert math.isinf(hi)

    @pytest.mark.unit
    def test_negative_reference_normalized(self):
        """Test a negative reference price still gives lo <= hi."""
        lo, hi = price_band(Hoop(**DIP), -100.0)

        assert lo == pytest.approx(-98.0)
        assert hi == pytest.approx(-96.0)

    @given(
        percents=st.lists(
            st.floats(min_value=-100, max_value=100, allow_nan=False), min_size=2, max_size=2
        ),
        ref_price=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False),
    )
    @settings(max_examples=200)
    def test_band_always_ordered(self, percents, ref_price):
        """Property: lo <= hi for any sign combination of offsets and reference."""
        low, high = sorted(percents)
        hoop = Hoop(min_price_percent=low, max_price_percent=high, distance=1)

        lo, hi = price_band(hoop, ref_price)

        assert lo <= hi


class TestHoopWindow:
    """Bar window computation and clipping."""

    @pytest.mark.unit
    def test_unclipped_window(self):
        """Test window is distance +/- tolerance from the reference bar."""
        assert hoop_window(Hoop(**DIP), 10, 100) == (14, 16)

    @pytest.mark.unit
    def test_window_starts_after_reference(self):
        """Test a wide tolerance never reaches the reference bar itself."""
        hoop = Hoop(min_price_percent=0.0, distance=1, tolerance=3)

        assert hoop_window(hoop, 5, 8) == (6, 7)

    @pytest.mark.unit
    def test_window_past_series_end(self):
        """Test a window entirely outside the series is unreachable."""
        assert hoop_window(Hoop(**DIP), 10, 12) is None

    @pytest.mark.unit
    def test_window_clipped_at_series_end(self):
        """Test the window end is clipped to the last bar."""
        assert hoop_window(Hoop(**DIP), 0, 6) == (4, 5)


class TestReferenceAdvance:
    """Deriving the next reference from a hit."""

    @pytest.mark.unit
    def test_round_half_up(self):
        """Test midpoints round up."""
        assert round_half_up(4.5) == 5
        assert round_half_up(5.0) == 5
        assert round_half_up(5.49) == 5

    @pytest.mark.unit
    def test_band_target_price(self):
        """Test midpoint of a closed band and lower edge of an open one."""
        assert band_target_price(96.0, 98.0) == pytest.approx(97.0)
        assert band_target_price(103.0, math.inf) == 103.0

    @pytest.mark.unit
    def test_actual_hit_mode(self):
        """Test ACTUAL_HIT continues from the hit itself."""
        hoop = Hoop(**DIP)
        assert next_reference(hoop, (4, 6), (96.0, 98.0), 4, 96.5) == (4, 96.5)

    @pytest.mark.unit
    def test_target_mode(self):
        """Test TARGET continues from window and band midpoints."""
        hoop = Hoop(**DIP, anchor_mode=AnchorMode.TARGET)

        bar, price = next_reference(hoop, (4, 7), (96.0, 98.0), 4, 96.5)

        assert bar == 6
        assert price == pytest.approx(97.0)


class TestFirstHitInWindow:
    """Earliest qualifying bar selection."""

    @pytest.mark.unit
    def test_earliest_bar_wins(self):
        """Test the first qualifying bar is taken, not the best fit."""
        refs = flat(10, b4=96.1, b5=97.0, b6=97.0)

        assert first_hit_in_window(refs, (4, 6), (96.0, 98.0)) == 4

    @pytest.mark.unit
    def test_closed_interval(self):
        """Test band edges qualify."""
        refs = flat(10, b5=98.0)

        assert first_hit_in_window(refs, (4, 6), (96.0, 98.0)) == 5

    @pytest.mark.unit
    def test_nan_never_qualifies(self):
        """Test unavailable bars are skipped."""
        refs = flat(10, b4=np.nan, b5=97.0)

        assert first_hit_in_window(refs, (4, 6), (96.0, 98.0)) == 5

    @pytest.mark.unit
    def test_no_hit(self):
        """Test None when nothing qualifies."""
        assert first_hit_in_window(flat(10), (4, 6), (96.0, 98.0)) is None


class TestAnchorChainEvaluator:
    """Completing a pattern from one anchor."""

    @pytest.mark.unit
    def test_single_hoop_scenario(self):
        """Test anchor 100, hoop [-4%, -2%] d=5 t=1, close 97 at offset 5 hits there."""
        evaluator = AnchorChainEvaluator(make_pattern(DIP), flat(20, b5=97.0))

        match = evaluator.evaluate(0)

        assert match is not None
        assert match.anchor_bar == 0
        assert match.anchor_price == 100.0
        assert match.hoop_hit_bars == (5,)
        assert match.hoop_hit_prices == (97.0,)
        assert match.completion_bar == 5

    @pytest.mark.unit
    def test_qualifying_bar_outside_window(self):
        """Test the only qualifying bar at offset 7 gives no match from this anchor."""
        evaluator = AnchorChainEvaluator(make_pattern(DIP), flat(20, b7=97.0))

        assert evaluator.evaluate(0) is None

    @pytest.mark.unit
    def test_target_mode_uses_window_midpoint(self):
        """Test hoop 2 is measured from hoop 1's window midpoint in TARGET mode."""
        refs = flat(12, b4=96.5)
        second = {"min_price_percent": 2.0, "max_price_percent": 4.0, "distance": 3, "tolerance": 0}

        target = AnchorChainEvaluator(
            make_pattern({**DIP, "anchor_mode": "TARGET"}, second), refs
        ).evaluate(0)
        actual = AnchorChainEvaluator(make_pattern(DIP, second), refs).evaluate(0)

        assert target is not None and actual is not None
        assert target.hoop_hit_bars == (4, 8)
        assert actual.hoop_hit_bars == (4, 7)

    @pytest.mark.unit
    def test_no_backtracking(self):
        """Test a later hit in the same window is never retried."""
        refs = flat(12, b4=97.0, b6=97.0, b8=104.0)
        bounce = {"min_price_percent": 5.0, "max_price_percent": 10.0, "distance": 2, "tolerance": 0}
        evaluator = AnchorChainEvaluator(make_pattern(DIP, bounce), refs)

        # Hoop 1 takes bar 4; from there hoop 2 looks only at bar 6
        assert evaluator.evaluate(0) is None

    @pytest.mark.unit
    def test_unavailable_anchor(self):
        """Test NaN and out-of-range anchors never match."""
        evaluator = AnchorChainEvaluator(make_pattern(DIP), flat(20, b0=np.nan, b6=97.0))

        assert evaluator.evaluate(0) is None
        assert evaluator.evaluate(-1) is None
        assert evaluator.evaluate(20) is None
        assert evaluator.evaluate(1) is not None

    @pytest.mark.unit
    def test_empty_pattern(self):
        """Test a pattern without hoops never matches."""
        evaluator = AnchorChainEvaluator(make_pattern(), flat(10))

        assert evaluator.evaluate(0) is None
        assert evaluator.evaluate_from(0, 100.0) is None

    @pytest.mark.unit
    def test_evaluate_from_explicit_price(self):
        """Test an explicit anchor price overrides the bar's reference."""
        evaluator = AnchorChainEvaluator(make_pattern(DIP), flat(20))

        match = evaluator.evaluate_from(0, 103.0)

        assert match is not None
        assert match.anchor_price == 103.0
        assert match.hoop_hit_bars == (4,)

    @pytest.mark.unit
    def test_unreachable_window_is_no_match(self):
        """Test an anchor too close to the series end fails quietly."""
        evaluator = AnchorChainEvaluator(make_pattern(DIP), flat(8, b7=97.0))

        assert evaluator.evaluate(5) is None

    @pytest.mark.unit
    def test_evaluate_anchor_function(self):
        """Test the module-level helper matches the evaluator."""
        pattern = make_pattern(DIP)
        refs = flat(20, b5=97.0)

        assert evaluate_anchor(pattern, refs, 0) == AnchorChainEvaluator(pattern, refs).evaluate(0)
        assert evaluate_anchor(pattern, refs, 10) is None
