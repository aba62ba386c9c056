"""Geometry inversion for interactive hoop editing.

The chart editor shows each hoop as a rectangle: its bar window on the x axis
and its price band on the y axis, positioned from a reference (bar, price)
obtained by walking the chain from the pattern anchor. Dragging one edge of a
rectangle is translated back into hoop parameters here.

The editor preview walks the chain with TARGET semantics for every hoop: the
next reference bar is the window midpoint and the next reference price is the
band midpoint (or its lower edge when open-ended). Windows are not clipped to
any series; the rendering layer clips what it draws.

Every function here is pure. Edits return a new Hoop and the caller commits
it with ``HoopPattern.replace_hoop``.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from hoopmatch.core.exceptions import HoopEditError
from hoopmatch.matching.anchor_chain import band_target_price, price_band, round_half_up
from hoopmatch.models.hoop import Hoop, HoopPattern

logger = logging.getLogger(__name__)


class EdgeKind(str, Enum):
    """Edge of a hoop zone being dragged."""

    TOP = "TOP"  # upper price edge -> max_price_percent
    BOTTOM = "BOTTOM"  # lower price edge -> min_price_percent
    LEFT = "LEFT"  # window start -> distance
    RIGHT = "RIGHT"  # window end -> tolerance


@dataclass(frozen=True)
class HoopZone:
    """Rectangle of one hoop in data space.

    Attributes:
        hoop_index: Position of the hoop in its pattern
        ref_bar: Reference bar the window is measured from
        ref_price: Reference price the band is measured from
        start_bar: First bar of the window (may be negative)
        end_bar: Last bar of the window
        min_price: Price at min_price_percent
        max_price: Price at max_price_percent, None when open-ended
    """

    hoop_index: int
    ref_bar: int
    ref_price: float
    start_bar: int
    end_bar: int
    min_price: float
    max_price: float | None

    @property
    def mid_bar(self) -> int:
        return round_half_up((self.start_bar + self.end_bar) / 2)


def compute_hoop_zones(
    pattern: HoopPattern,
    anchor_bar: int,
    anchor_price: float,
    upto: int | None = None,
) -> list[HoopZone]:
    """Walk the chain from an anchor and compute each hoop's zone.

    Args:
        pattern: Pattern to lay out
        anchor_bar: Bar the first hoop is measured from
        anchor_price: Price the first hoop is measured from
        upto: Number of hoops to lay out (defaults to all of them)

    Returns:
        One zone per hoop, in hoop order
    """
    count = len(pattern.hoops) if upto is None else max(0, min(upto, len(pattern.hoops)))

    zones: list[HoopZone] = []
    ref_bar = anchor_bar
    ref_price = anchor_price

    for index, hoop in enumerate(pattern.hoops[:count]):
        start = ref_bar + hoop.distance - hoop.tolerance
        end = ref_bar + hoop.distance + hoop.tolerance
        max_price = (
            None
            if hoop.max_price_percent is None
            else ref_price * (1 + hoop.max_price_percent / 100)
        )
        zone = HoopZone(
            hoop_index=index,
            ref_bar=ref_bar,
            ref_price=ref_price,
            start_bar=start,
            end_bar=end,
            min_price=ref_price * (1 + hoop.min_price_percent / 100),
            max_price=max_price,
        )
        zones.append(zone)

        ref_bar = zone.mid_bar
        ref_price = band_target_price(*price_band(hoop, ref_price))

    return zones


def invert_edge(
    hoop: Hoop,
    edge: EdgeKind,
    value: float,
    ref_bar: int,
    ref_price: float,
) -> Hoop:
    """Recompute hoop parameters from a dragged edge position.

    Args:
        hoop: Hoop being edited
        edge: Which edge moved
        value: New edge position in data space (a price for TOP/BOTTOM, a bar for LEFT/RIGHT)
        ref_bar: Reference bar of the hoop's zone
        ref_price: Reference price of the hoop's zone

    Returns:
        Updated copy of the hoop. Derived values are clamped to the hoop
        invariants: the band never inverts, distance stays >= 1 and
        tolerance >= 0. Price edges are left unchanged when the percent
        offset is not finite (zero or vanishing reference price).
    """
    if edge in (EdgeKind.TOP, EdgeKind.BOTTOM):
        if ref_price == 0:
            return hoop
        percent = (value / ref_price - 1) * 100
        if not math.isfinite(percent):
            return hoop

        if edge == EdgeKind.TOP:
            return hoop.with_changes(max_price_percent=max(percent, hoop.min_price_percent))

        if hoop.max_price_percent is not None:
            percent = min(percent, hoop.max_price_percent)
        return hoop.with_changes(min_price_percent=percent)

    delta = round_half_up(value) - ref_bar
    if edge == EdgeKind.LEFT:
        return hoop.with_changes(distance=max(1, delta + hoop.tolerance))
    return hoop.with_changes(tolerance=max(0, delta - hoop.distance))


def apply_hoop_edit(
    pattern: HoopPattern,
    hoop_index: int,
    edge: EdgeKind,
    value: float,
    anchor_bar: int,
    anchor_price: float,
) -> Hoop:
    """Data-space edit entry point.

    Walks the chain up to the edited hoop to find its reference, then inverts
    the edge. The pattern itself is not modified. Re-applying an edge at its
    current position returns the hoop unchanged, including TOP on an open
    band, whose drawn top is its lower edge.

    Raises:
        HoopEditError: If hoop_index is out of range
    """
    if not 0 <= hoop_index < len(pattern.hoops):
        raise HoopEditError(
            f"Hoop index {hoop_index} out of range (pattern has {len(pattern.hoops)} hoops)"
        )

    zone = compute_hoop_zones(pattern, anchor_bar, anchor_price, upto=hoop_index + 1)[hoop_index]
    if edge == EdgeKind.TOP and zone.max_price is None and value == zone.min_price:
        # Open band: its drawn top is the lower edge, so this is not a move
        return pattern.hoops[hoop_index]
    updated = invert_edge(pattern.hoops[hoop_index], edge, value, zone.ref_bar, zone.ref_price)
    logger.debug(
        f"Edited hoop {hoop_index} of {pattern.id} via {edge.value} edge: "
        f"{pattern.hoops[hoop_index].model_dump()} -> {updated.model_dump()}"
    )
    return updated


@dataclass(frozen=True)
class AxisMapping:
    """Linear mapping between one data axis and screen pixels.

    ``pixel_start`` corresponds to ``data_lower`` and ``pixel_end`` to
    ``data_upper``; a y axis that grows downward passes pixel_start > pixel_end.
    """

    data_lower: float
    data_upper: float
    pixel_start: float
    pixel_end: float

    def __post_init__(self) -> None:
        if self.data_lower == self.data_upper:
            raise ValueError("Axis data range must not be empty")
        if self.pixel_start == self.pixel_end:
            raise ValueError("Axis pixel range must not be empty")

    def to_pixel(self, value: float) -> float:
        ratio = (value - self.data_lower) / (self.data_upper - self.data_lower)
        return self.pixel_start + ratio * (self.pixel_end - self.pixel_start)

    def to_data(self, pixel: float) -> float:
        ratio = (pixel - self.pixel_start) / (self.pixel_end - self.pixel_start)
        return self.data_lower + ratio * (self.data_upper - self.data_lower)


def _edge_value(zone: HoopZone, edge: EdgeKind) -> float:
    if edge == EdgeKind.TOP:
        # An open-ended band has no top; the drag starts from its lower edge
        return zone.max_price if zone.max_price is not None else zone.min_price
    elif edge == EdgeKind.BOTTOM:
        return zone.min_price
    elif edge == EdgeKind.LEFT:
        return float(zone.start_bar)
    return float(zone.end_bar)


def apply_pixel_drag(
    pattern: HoopPattern,
    hoop_index: int,
    edge: EdgeKind,
    pixel_delta: float,
    anchor_bar: int,
    anchor_price: float,
    x_axis: AxisMapping,
    y_axis: AxisMapping,
) -> Hoop:
    """Screen-space edit entry point.

    Moves the chosen edge of the hoop's zone by ``pixel_delta`` pixels along
    its axis (x for LEFT/RIGHT, y for TOP/BOTTOM) and inverts the result.

    Args:
        pattern: Pattern being edited (not modified)
        hoop_index: Hoop whose zone was dragged
        edge: Dragged edge
        pixel_delta: Drag distance in pixels
        anchor_bar: Pattern anchor bar used by the editor
        anchor_price: Pattern anchor price used by the editor
        x_axis: Bar <-> pixel mapping
        y_axis: Price <-> pixel mapping

    Returns:
        Updated copy of the hoop; the unchanged hoop for a zero delta

    Raises:
        HoopEditError: If hoop_index is out of range
    """
    if not 0 <= hoop_index < len(pattern.hoops):
        raise HoopEditError(
            f"Hoop index {hoop_index} out of range (pattern has {len(pattern.hoops)} hoops)"
        )
    if pixel_delta == 0:
        return pattern.hoops[hoop_index]

    zone = compute_hoop_zones(pattern, anchor_bar, anchor_price, upto=hoop_index + 1)[hoop_index]
    axis = y_axis if edge in (EdgeKind.TOP, EdgeKind.BOTTOM) else x_axis
    value = axis.to_data(axis.to_pixel(_edge_value(zone, edge)) + pixel_delta)

    return invert_edge(pattern.hoops[hoop_index], edge, value, zone.ref_bar, zone.ref_price)
