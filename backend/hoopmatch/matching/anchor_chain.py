"""Anchor chain evaluation for hoop patterns.

Starting from one candidate anchor (bar, reference price), walk the hoops in
order. For each hoop:

1. Compute the absolute price band from the active reference price.
2. Compute the bar window from the active reference bar.
3. Take the first bar in the window whose reference price lies in the band
   (closed interval). Earliest bar wins, never the best-fitting price.
4. Advance the reference according to the hoop's anchor mode.

There is no backtracking: once a hoop has taken its first qualifying bar the
chain never revisits that choice, even if a later bar in the same window
would have let the following hoops complete. This keeps evaluation
deterministic and O(window size) per hoop, at the cost of missing some
matches an exhaustive search would find.

An unmet hoop is the normal "no match" outcome and returns None.
"""

import math

import numpy as np
from numpy.typing import NDArray

from hoopmatch.models.hoop import AnchorMode, Hoop, HoopMatchResult, HoopPattern


def price_band(hoop: Hoop, ref_price: float) -> tuple[float, float]:
    """Absolute price band for a hoop relative to a reference price.

    Args:
        hoop: Hoop definition
        ref_price: Active reference price

    Returns:
        (lo, hi) with lo <= hi. hi is +inf for an open-ended hoop.
    """
    lo = ref_price * (1 + hoop.min_price_percent / 100)
    if hoop.max_price_percent is None:
        return lo, math.inf

    hi = ref_price * (1 + hoop.max_price_percent / 100)
    if lo > hi:
        # Negative reference prices flip the ordering
        lo, hi = hi, lo
    return lo, hi


def hoop_window(hoop: Hoop, ref_bar: int, series_length: int) -> tuple[int, int] | None:
    """Admissible bar window for a hoop, clipped to the series.

    The raw window is [ref_bar + distance - tolerance, ref_bar + distance + tolerance].
    It is clipped so that it starts after the reference bar and ends on the
    last bar of the series.

    Returns:
        (start, end) inclusive, or None when the clipped window is empty
    """
    start = max(ref_bar + hoop.distance - hoop.tolerance, ref_bar + 1, 0)
    end = min(ref_bar + hoop.distance + hoop.tolerance, series_length - 1)
    if start > end:
        return None
    return start, end


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def band_target_price(lo: float, hi: float) -> float:
    """Band midpoint, or the lower edge for an open-ended band."""
    if math.isinf(hi):
        return lo
    return (lo + hi) / 2.0


def next_reference(
    hoop: Hoop,
    window: tuple[int, int],
    band: tuple[float, float],
    hit_bar: int,
    hit_price: float,
) -> tuple[int, float]:
    """Reference (bar, price) for the hoop after a successful hit.

    ACTUAL_HIT continues from the hit itself. TARGET continues from the
    window midpoint bar and the band midpoint price.
    """
    if hoop.anchor_mode == AnchorMode.TARGET:
        return round_half_up((window[0] + window[1]) / 2), band_target_price(*band)
    return hit_bar, hit_price


def first_hit_in_window(
    reference_prices: NDArray[np.float64],
    window: tuple[int, int],
    band: tuple[float, float],
) -> int | None:
    """Earliest bar in the window whose reference price lies inside the band.

    NaN (warm-up) bars never qualify.
    """
    start, end = window
    segment = reference_prices[start : end + 1]
    with np.errstate(invalid="ignore"):
        inside = (segment >= band[0]) & (segment <= band[1])
    hits = np.flatnonzero(inside)
    if len(hits) == 0:
        return None
    return start + int(hits[0])


class AnchorChainEvaluator:
    """Attempts to complete one pattern from individual anchor bars.

    The evaluator holds no state between anchors, so one instance can be
    shared by concurrent workers evaluating disjoint anchor ranges.

    Example:
        >>> evaluator = AnchorChainEvaluator(pattern, reference_prices)
        >>> match = evaluator.evaluate(anchor_bar=10)
        >>> match.hoop_hit_bars if match else "no match"
    """

    def __init__(self, pattern: HoopPattern, reference_prices: NDArray[np.float64]) -> None:
        """Initialize the evaluator.

        Args:
            pattern: Pattern to evaluate. Callers pass a snapshot, not a live pattern.
            reference_prices: Per-bar reference prices (NaN for unavailable bars)
        """
        self.pattern_id = pattern.id
        self.hoops: tuple[Hoop, ...] = tuple(pattern.hoops)
        self.reference_prices = np.asarray(reference_prices, dtype=float)
        self.series_length = len(self.reference_prices)

    def is_available(self, bar: int) -> bool:
        return 0 <= bar < self.series_length and not np.isnan(self.reference_prices[bar])

    def evaluate(self, anchor_bar: int) -> HoopMatchResult | None:
        """Try to complete the chain from an anchor bar.

        The anchor price is the reference price at the anchor bar.

        Args:
            anchor_bar: Candidate anchor bar index

        Returns:
            HoopMatchResult if every hoop is hit, otherwise None
        """
        if not self.hoops or not self.is_available(anchor_bar):
            return None
        return self.evaluate_from(anchor_bar, float(self.reference_prices[anchor_bar]))

    def evaluate_from(self, anchor_bar: int, anchor_price: float) -> HoopMatchResult | None:
        """Try to complete the chain from an explicit (bar, price) anchor."""
        if not self.hoops:
            return None

        ref_bar = anchor_bar
        ref_price = anchor_price
        hit_bars: list[int] = []
        hit_prices: list[float] = []

        for hoop in self.hoops:
            window = hoop_window(hoop, ref_bar, self.series_length)
            if window is None:
                return None

            band = price_band(hoop, ref_price)
            hit_bar = first_hit_in_window(self.reference_prices, window, band)
            if hit_bar is None:
                return None

            hit_price = float(self.reference_prices[hit_bar])
            hit_bars.append(hit_bar)
            hit_prices.append(hit_price)

            ref_bar, ref_price = next_reference(hoop, window, band, hit_bar, hit_price)

        return HoopMatchResult(
            pattern_id=self.pattern_id,
            anchor_bar=anchor_bar,
            anchor_price=anchor_price,
            hoop_hit_bars=tuple(hit_bars),
            hoop_hit_prices=tuple(hit_prices),
            completion_bar=hit_bars[-1],
        )


def evaluate_anchor(
    pattern: HoopPattern, reference_prices: NDArray[np.float64], anchor_bar: int
) -> HoopMatchResult | None:
    """Evaluate a single anchor without keeping an evaluator around."""
    return AnchorChainEvaluator(pattern, reference_prices).evaluate(anchor_bar)
