"""Search service running hoop searches off the event loop.

A parameter change invalidates the previous match set wholesale, so the
service keeps at most one live search. Starting a new search supersedes the
one in flight: its cancel event is set, the worker stops at the next anchor,
and its result is discarded rather than raced against the new one.
"""

import asyncio
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from hoopmatch.core.config import Settings, get_settings
from hoopmatch.core.exceptions import SearchCancelledError
from hoopmatch.matching.search import (
    completion_mask,
    find_pattern_completions,
    find_pattern_completions_parallel,
    pattern_active_mask,
)
from hoopmatch.matching.signals import combine_signals
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import CombineMode, HoopMatchResult, HoopPattern
from hoopmatch.utils.structured_logging import (
    bind_search_context,
    clear_search_context,
    get_logger,
)

logger = get_logger(__name__)


@dataclass
class SearchOutcome:
    """Result of one completed search.

    Attributes:
        pattern_id: Id of the searched pattern
        generation: Search generation that produced this outcome
        matches: Matches in ascending anchor order
        pattern_active: Per-bar flag, True inside [anchor_bar, completion_bar] of any match
        completed: Per-bar flag, True on completion bars
        combined: Pattern activity combined with the condition per the pattern's
            combine mode; None when the mode needs a condition and none was given
    """

    pattern_id: str
    generation: int
    matches: list[HoopMatchResult] = field(default_factory=list)
    pattern_active: NDArray[np.bool_] = field(default_factory=lambda: np.zeros(0, dtype=bool))
    completed: NDArray[np.bool_] = field(default_factory=lambda: np.zeros(0, dtype=bool))
    combined: NDArray[np.bool_] | None = None


class HoopSearchService:
    """Runs hoop searches in a worker thread with supersede-on-restart semantics.

    Example:
        >>> service = HoopSearchService()
        >>> outcome = await service.search(pattern, series)
        >>> if outcome is not None:
        ...     print(len(outcome.matches))
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the service.

        Args:
            settings: Application settings (defaults to the cached settings)
        """
        self.settings = settings or get_settings()
        self._generation = 0
        self._cancel_event: threading.Event | None = None

    @property
    def generation(self) -> int:
        """Generation number of the most recently started search."""
        return self._generation

    def cancel(self) -> None:
        """Abandon the in-flight search, if any."""
        if self._cancel_event is not None:
            self._cancel_event.set()

    async def search(
        self,
        pattern: HoopPattern,
        series: CandleSeries,
        condition: Sequence[bool] | NDArray[np.bool_] | None = None,
    ) -> SearchOutcome | None:
        """Search a pattern, superseding any search still running.

        The pattern is snapshotted before the worker starts, so the caller may
        keep editing it while the search runs.

        Args:
            pattern: Pattern to search
            series: Candle series to scan
            condition: Optional external per-bar condition for combine modes

        Returns:
            SearchOutcome, or None if a newer search superseded this one

        Raises:
            ValueError: If the condition length differs from the series length
        """
        if condition is not None and len(condition) != len(series):
            raise ValueError(
                f"Condition length {len(condition)} does not match series length {len(series)}"
            )

        snapshot = pattern.snapshot()

        self.cancel()
        cancel_event = threading.Event()
        self._cancel_event = cancel_event
        self._generation += 1
        generation = self._generation

        bind_search_context(snapshot.id, generation)
        try:
            loop = asyncio.get_running_loop()
            try:
                matches = await loop.run_in_executor(
                    None, self._run_search, snapshot, series, cancel_event
                )
            except SearchCancelledError:
                logger.info("Hoop search superseded", bars=len(series))
                return None

            if cancel_event.is_set() or generation != self._generation:
                logger.info("Discarding stale hoop search result", matches=len(matches))
                return None

            outcome = self._build_outcome(snapshot, generation, matches, len(series), condition)
            logger.info(
                "Hoop search completed",
                bars=len(series),
                matches=len(matches),
                combine_mode=snapshot.combine_mode.value,
            )
            return outcome
        finally:
            clear_search_context()
            if self._cancel_event is cancel_event:
                self._cancel_event = None

    def _run_search(
        self,
        pattern: HoopPattern,
        series: CandleSeries,
        cancel_event: threading.Event,
    ) -> list[HoopMatchResult]:
        if len(series) >= self.settings.parallel_search_min_bars:
            return find_pattern_completions_parallel(
                pattern,
                series,
                max_workers=self.settings.search_max_workers,
                chunk_size=self.settings.parallel_search_chunk_size,
                should_cancel=cancel_event.is_set,
            )
        return find_pattern_completions(pattern, series, should_cancel=cancel_event.is_set)

    @staticmethod
    def _build_outcome(
        pattern: HoopPattern,
        generation: int,
        matches: list[HoopMatchResult],
        length: int,
        condition: Sequence[bool] | NDArray[np.bool_] | None,
    ) -> SearchOutcome:
        active = pattern_active_mask(matches, length)

        combined = None
        if condition is not None or pattern.combine_mode == CombineMode.PATTERN_ONLY:
            combined = combine_signals(pattern.combine_mode, active, condition)

        return SearchOutcome(
            pattern_id=pattern.id,
            generation=generation,
            matches=matches,
            pattern_active=active,
            completed=completion_mask(matches, length),
            combined=combined,
        )


class SearchServiceRegistry:
    """One HoopSearchService per pattern id.

    A re-submitted pattern supersedes the previous search of the same pattern;
    searches of different patterns run independently.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._services: dict[str, HoopSearchService] = {}

    def for_pattern(self, pattern_id: str) -> HoopSearchService:
        service = self._services.get(pattern_id)
        if service is None:
            service = HoopSearchService(self.settings)
            self._services[pattern_id] = service
        return service

    def cancel_all(self) -> None:
        for service in self._services.values():
            service.cancel()
