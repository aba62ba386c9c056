"""Composition of hoop pattern signals with external conditions.

The matcher only reports where a pattern was active or completed. Callers
such as a backtest engine decide how that combines with their own entry and
exit conditions; the helpers here cover the usual cases:

- combine_signals: per-bar AND / OR / pattern-only / condition-only
- map_completions_to_timeframe: project completions onto another timeframe
- evaluate_patterns: search several patterns and project each one
- patterns_match / any_pattern_matches: required/excluded pattern checks
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from hoopmatch.core.constants import DEFAULT_TIMEFRAME_MS, TIMEFRAME_MS, WARMUP_PADDING_BARS
from hoopmatch.matching.search import find_pattern_completions
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import CombineMode, HoopMatchResult, HoopPattern, PriceSmoothingType

logger = logging.getLogger(__name__)


def combine_signals(
    mode: CombineMode,
    pattern_active: Sequence[bool] | NDArray[np.bool_],
    condition: Sequence[bool] | NDArray[np.bool_] | None = None,
) -> NDArray[np.bool_]:
    """Combine a pattern-active series with an external boolean condition.

    Args:
        mode: Combine mode
        pattern_active: Per-bar pattern activity
        condition: Per-bar external condition (required unless mode is PATTERN_ONLY)

    Returns:
        Combined per-bar signal

    Raises:
        ValueError: If the condition is missing or its length differs
    """
    active = np.asarray(pattern_active, dtype=bool)

    if mode == CombineMode.PATTERN_ONLY and condition is None:
        return active.copy()

    if condition is None:
        raise ValueError(f"Combine mode '{mode.value}' requires a condition series")

    cond = np.asarray(condition, dtype=bool)
    if len(cond) != len(active):
        raise ValueError(
            f"Condition length {len(cond)} does not match series length {len(active)}"
        )

    if mode == CombineMode.PATTERN_ONLY:
        return active.copy()
    elif mode == CombineMode.CONDITION_ONLY:
        return cond.copy()
    elif mode == CombineMode.AND:
        return active & cond
    else:
        return active | cond


def map_completions_to_timeframe(
    pattern_timestamps: Sequence[int] | NDArray[np.int64],
    matches: Sequence[HoopMatchResult],
    target_timestamps: Sequence[int] | NDArray[np.int64],
) -> NDArray[np.bool_]:
    """Project pattern completions onto another timeframe's bars.

    Target bar i is set when some completion timestamp falls in
    (target[i-1], target[i]]; the first target bar covers (0, target[0]].

    Args:
        pattern_timestamps: Timestamps of the series the pattern was searched on
        matches: Matches from that series
        target_timestamps: Timestamps of the target timeframe (strictly increasing)

    Returns:
        Boolean array aligned with target_timestamps
    """
    targets = np.asarray(target_timestamps, dtype=np.int64)
    mapped = np.zeros(len(targets), dtype=bool)
    if len(targets) == 0 or not matches:
        return mapped

    source = np.asarray(pattern_timestamps, dtype=np.int64)
    completions = np.sort(np.array([source[m.completion_bar] for m in matches], dtype=np.int64))

    # Index of the first target >= completion, i.e. the bar whose interval contains it
    positions = np.searchsorted(targets, completions, side="left")
    positions = positions[(positions < len(targets)) & (completions > 0)]
    mapped[positions] = True
    return mapped


def evaluate_patterns(
    patterns: Sequence[HoopPattern],
    target_timestamps: Sequence[int] | NDArray[np.int64],
    pattern_candles: Mapping[str, CandleSeries] | None = None,
) -> dict[str, NDArray[np.bool_]]:
    """Search several patterns and project their completions onto one timeframe.

    Candles are looked up per pattern under the key "symbol:timeframe".

    Args:
        patterns: Patterns to evaluate
        target_timestamps: Timestamps of the timeframe results are mapped to
        pattern_candles: Candle series keyed by "symbol:timeframe"

    Returns:
        Mapping of pattern id to completion flags on the target timeframe.
        A pattern without candles maps to all False.
    """
    results: dict[str, NDArray[np.bool_]] = {}
    length = len(target_timestamps)
    if not patterns or length == 0:
        return results

    pattern_candles = pattern_candles or {}

    for pattern in patterns:
        key = f"{pattern.symbol}:{pattern.timeframe}"
        series = pattern_candles.get(key)
        if series is None or len(series) == 0:
            logger.warning(f"No candles for hoop pattern {pattern.id} ({key})")
            results[pattern.id] = np.zeros(length, dtype=bool)
            continue

        matches = find_pattern_completions(pattern.snapshot(), series)
        results[pattern.id] = map_completions_to_timeframe(
            series.timestamps, matches, target_timestamps
        )

    return results


def patterns_match(
    pattern_states: Mapping[str, Sequence[bool] | NDArray[np.bool_]],
    required_ids: Sequence[str] | None,
    excluded_ids: Sequence[str] | None,
    bar_index: int,
) -> bool:
    """Check required and excluded patterns at one bar.

    Every required pattern must be set at the bar (a missing pattern or an
    out-of-range bar counts as not set). No excluded pattern may be set; a
    missing excluded pattern is ignored.
    """
    for pattern_id in required_ids or ():
        state = pattern_states.get(pattern_id)
        if state is None or not 0 <= bar_index < len(state) or not state[bar_index]:
            return False

    for pattern_id in excluded_ids or ():
        state = pattern_states.get(pattern_id)
        if state is None:
            continue
        if 0 <= bar_index < len(state) and state[bar_index]:
            return False

    return True


def any_pattern_matches(
    pattern_states: Mapping[str, Sequence[bool] | NDArray[np.bool_]],
    pattern_ids: Sequence[str] | None,
    bar_index: int,
) -> bool:
    """True if at least one of the given patterns is set at the bar."""
    for pattern_id in pattern_ids or ():
        state = pattern_states.get(pattern_id)
        if state is not None and 0 <= bar_index < len(state) and state[bar_index]:
            return True
    return False


def timeframe_ms(timeframe: str | None) -> int:
    """Duration of one bar in milliseconds (1h for unknown timeframes)."""
    return TIMEFRAME_MS.get(timeframe or "", DEFAULT_TIMEFRAME_MS)


def pattern_warmup_ms(pattern: HoopPattern) -> int:
    """History needed before a window so that a full pattern can complete in it."""
    smoothing_period = (
        pattern.price_smoothing_period
        if pattern.price_smoothing_type in (PriceSmoothingType.SMA, PriceSmoothingType.EMA)
        else 0
    )
    bars = pattern.max_pattern_bars + WARMUP_PADDING_BARS + smoothing_period
    return timeframe_ms(pattern.timeframe) * bars
