"""Match search engine for hoop patterns.

Drives the anchor chain evaluator across every candidate anchor of a candle
series and produces the ordered list of completed matches.

Candidate anchors are visited in ascending order and warm-up bars are
skipped. After a match, the next candidate is
``completion_bar + cooldown_bars + 1`` unless the pattern allows overlap, in
which case it is simply ``anchor_bar + 1`` and cooldown does not apply.

Each anchor is evaluated statelessly, so the search can be split across
workers. The parallel variant evaluates anchor ranges concurrently and then
applies the same skip rule in ascending-anchor order, which makes its result
identical to the sequential search.
"""

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from hoopmatch.core.exceptions import SearchCancelledError
from hoopmatch.matching.anchor_chain import AnchorChainEvaluator
from hoopmatch.matching.price_reference import resolve_for_pattern
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import HoopMatchResult, HoopPattern

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


def next_candidate_anchor(pattern: HoopPattern, match: HoopMatchResult) -> int:
    """First anchor bar that may be tried after a match."""
    if pattern.allow_overlap:
        return match.anchor_bar + 1
    return match.completion_bar + pattern.cooldown_bars + 1


def _check_cancelled(should_cancel: CancelCheck | None) -> None:
    if should_cancel is not None and should_cancel():
        raise SearchCancelledError("Search superseded before completion")


def find_pattern_completions(
    pattern: HoopPattern,
    series: CandleSeries,
    should_cancel: CancelCheck | None = None,
    reference_prices: NDArray[np.float64] | None = None,
) -> list[HoopMatchResult]:
    """Find all completed matches of a pattern in a candle series.

    Args:
        pattern: Pattern to search for (pass a snapshot if it may be edited concurrently)
        series: Candle series to scan
        should_cancel: Optional callable polled once per candidate anchor
        reference_prices: Precomputed reference prices; resolved from the
            pattern's smoothing settings when omitted

    Returns:
        Matches ordered by ascending anchor bar. Empty when the pattern has no
        hoops, the series is empty, or every bar is inside the warm-up region.

    Raises:
        SearchCancelledError: If should_cancel returned True
    """
    started = time.perf_counter()

    if not pattern.has_hoops or len(series) == 0:
        return []

    refs = reference_prices if reference_prices is not None else resolve_for_pattern(pattern, series)
    evaluator = AnchorChainEvaluator(pattern, refs)

    matches: list[HoopMatchResult] = []
    bar = 0
    while bar < evaluator.series_length:
        _check_cancelled(should_cancel)

        match = evaluator.evaluate(bar)
        if match is None:
            bar += 1
            continue

        matches.append(match)
        bar = next_candidate_anchor(pattern, match)

    _log_summary(pattern, len(series), matches, started, parallel=False)
    return matches


def _evaluate_range(
    evaluator: AnchorChainEvaluator,
    start: int,
    stop: int,
    should_cancel: CancelCheck | None,
) -> list[HoopMatchResult]:
    results = []
    for bar in range(start, stop):
        _check_cancelled(should_cancel)
        match = evaluator.evaluate(bar)
        if match is not None:
            results.append(match)
    return results


def select_matches(
    pattern: HoopPattern, candidates: list[HoopMatchResult]
) -> list[HoopMatchResult]:
    """Apply the overlap/cooldown skip rule to per-anchor matches.

    Args:
        pattern: Pattern whose policy applies
        candidates: Every anchor's match, in ascending anchor order

    Returns:
        The matches the sequential search would report
    """
    selected: list[HoopMatchResult] = []
    next_allowed = 0
    for match in candidates:
        if match.anchor_bar < next_allowed:
            continue
        selected.append(match)
        next_allowed = next_candidate_anchor(pattern, match)
    return selected


def find_pattern_completions_parallel(
    pattern: HoopPattern,
    series: CandleSeries,
    max_workers: int = 4,
    chunk_size: int = 2_000,
    should_cancel: CancelCheck | None = None,
) -> list[HoopMatchResult]:
    """Parallel variant of find_pattern_completions with an identical result.

    Every candidate anchor is evaluated (chunks of ``chunk_size`` anchors per
    work item) and the skip rule is applied afterwards in ascending order.

    Raises:
        SearchCancelledError: If should_cancel returned True in any worker
        ValueError: If max_workers or chunk_size is not positive
    """
    if max_workers <= 0 or chunk_size <= 0:
        raise ValueError("max_workers and chunk_size must be greater than 0")

    started = time.perf_counter()

    if not pattern.has_hoops or len(series) == 0:
        return []

    evaluator = AnchorChainEvaluator(pattern, resolve_for_pattern(pattern, series))
    bounds = [
        (start, min(start + chunk_size, evaluator.series_length))
        for start in range(0, evaluator.series_length, chunk_size)
    ]

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hoop-search") as pool:
        futures = [
            pool.submit(_evaluate_range, evaluator, start, stop, should_cancel)
            for start, stop in bounds
        ]
        try:
            # Futures are collected in submission order, i.e. ascending anchors
            candidates = [match for future in futures for match in future.result()]
        except SearchCancelledError:
            for future in futures:
                future.cancel()
            raise

    matches = select_matches(pattern, candidates)
    _log_summary(pattern, len(series), matches, started, parallel=True)
    return matches


def pattern_active_mask(matches: list[HoopMatchResult], length: int) -> NDArray[np.bool_]:
    """Per-bar "pattern active" flags.

    A bar is active if it lies within [anchor_bar, completion_bar] of any match.
    """
    active = np.zeros(length, dtype=bool)
    for match in matches:
        start = max(match.anchor_bar, 0)
        end = min(match.completion_bar, length - 1)
        if start <= end:
            active[start : end + 1] = True
    return active


def completion_mask(matches: list[HoopMatchResult], length: int) -> NDArray[np.bool_]:
    """Per-bar flags set only on the bar where a match completed."""
    completed = np.zeros(length, dtype=bool)
    for match in matches:
        if 0 <= match.completion_bar < length:
            completed[match.completion_bar] = True
    return completed


def _log_summary(
    pattern: HoopPattern,
    bars: int,
    matches: list[HoopMatchResult],
    started: float,
    parallel: bool,
) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"Hoop search {pattern.id}: {len(matches)} matches in {bars} bars "
        f"({elapsed_ms:.1f}ms, {'parallel' if parallel else 'sequential'})"
    )
