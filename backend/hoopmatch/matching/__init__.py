"""Hoop pattern matching package.

- price_reference: per-bar reference prices (close, SMA, EMA, HLC3)
- anchor_chain: completes one pattern from one anchor
- search: scans every candidate anchor of a series
- signals: combines matches with external conditions and timeframes
- geometry: translates zone drags back into hoop parameters
"""

from .anchor_chain import AnchorChainEvaluator
from .anchor_chain import evaluate_anchor
from .anchor_chain import hoop_window
from .anchor_chain import price_band
from .geometry import AxisMapping
from .geometry import EdgeKind
from .geometry import HoopZone
from .geometry import apply_hoop_edit
from .geometry import apply_pixel_drag
from .geometry import compute_hoop_zones
from .geometry import invert_edge
from .price_reference import resolve_for_pattern
from .price_reference import resolve_reference_prices
from .search import completion_mask
from .search import find_pattern_completions
from .search import find_pattern_completions_parallel
from .search import pattern_active_mask
from .signals import any_pattern_matches
from .signals import combine_signals
from .signals import evaluate_patterns
from .signals import map_completions_to_timeframe
from .signals import pattern_warmup_ms
from .signals import patterns_match

__all__ = [
    "AnchorChainEvaluator",
    "AxisMapping",
    "EdgeKind",
    "HoopZone",
    "any_pattern_matches",
    "apply_hoop_edit",
    "apply_pixel_drag",
    "combine_signals",
    "completion_mask",
    "compute_hoop_zones",
    "evaluate_anchor",
    "evaluate_patterns",
    "find_pattern_completions",
    "find_pattern_completions_parallel",
    "hoop_window",
    "invert_edge",
    "map_completions_to_timeframe",
    "pattern_active_mask",
    "pattern_warmup_ms",
    "patterns_match",
    "price_band",
    "resolve_for_pattern",
    "resolve_reference_prices",
]
