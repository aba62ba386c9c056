"""Hoop pattern data model.

A hoop is one price/time checkpoint; a hoop pattern is an ordered chain of
hoops plus the policy used when searching for it (cooldown, overlap, price
smoothing, combine mode).

Definitions are validated when they are built or deserialized, never inside
the search loop. The persistence record uses the camelCase keys of the
pattern JSON files (``hoop.json``) and keeps unknown keys, so reading and
re-writing a record does not change any value in it.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hoopmatch.core.exceptions import HoopEditError


class AnchorMode(str, Enum):
    """How the next hoop's reference is derived from a hit."""

    ACTUAL_HIT = "ACTUAL_HIT"  # bar/price that satisfied the hoop
    TARGET = "TARGET"  # window midpoint bar, band midpoint price


class PriceSmoothingType(str, Enum):
    """Reference price used by the matcher."""

    NONE = "NONE"  # close
    SMA = "SMA"
    EMA = "EMA"
    HLC3 = "HLC3"  # (high + low + close) / 3


class CombineMode(str, Enum):
    """How the pattern-active signal composes with an external condition."""

    CONDITION_ONLY = "dsl_only"
    PATTERN_ONLY = "hoop_only"
    AND = "and"
    OR = "or"


_RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="allow",
)


class Hoop(BaseModel):
    """One checkpoint in a pattern.

    The admissible price band is ``[ref * (1 + min/100), ref * (1 + max/100)]``
    where ``ref`` is the active anchor price; an absent ``max_price_percent``
    means the band has no upper bound. The admissible bar window is
    ``[ref_bar + distance - tolerance, ref_bar + distance + tolerance]``.
    """

    model_config = ConfigDict(**_RECORD_CONFIG, frozen=True)

    name: str = Field(default="hoop", description="Display label")
    min_price_percent: float = Field(
        ..., allow_inf_nan=False, description="Lower band offset from the anchor price, in percent"
    )
    max_price_percent: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Upper band offset in percent; None for an open-ended band",
    )
    distance: int = Field(..., ge=1, description="Expected bars after the previous reference")
    tolerance: int = Field(default=0, ge=0, description="Bars of slack around distance")
    anchor_mode: AnchorMode = Field(default=AnchorMode.ACTUAL_HIT)

    @model_validator(mode="after")
    def validate_price_band(self) -> "Hoop":
        """Reject inverted price bands."""
        if self.max_price_percent is not None and self.min_price_percent > self.max_price_percent:
            raise ValueError(
                f"min_price_percent ({self.min_price_percent}) must not exceed "
                f"max_price_percent ({self.max_price_percent})"
            )
        return self

    @property
    def is_open_ended(self) -> bool:
        return self.max_price_percent is None

    def with_changes(self, **changes: Any) -> "Hoop":
        """Return a validated copy with the given fields replaced."""
        return Hoop.model_validate({**self.model_dump(), **changes})


class HoopPattern(BaseModel):
    """Ordered chain of hoops plus pattern-level search policy.

    Mutated in place by the edit methods below. Searches must run on a
    ``snapshot()`` so that edits never race an in-flight search.
    """

    model_config = ConfigDict(**_RECORD_CONFIG, validate_assignment=True)

    id: str = Field(..., min_length=1, description="Pattern id, e.g. 'double-bottom'")
    name: str = Field(default="", description="Display name")
    description: str | None = None
    symbol: str | None = Field(default=None, description="Symbol the pattern is evaluated on")
    timeframe: str | None = Field(default=None, description="Evaluation timeframe, e.g. '1h'")

    hoops: list[Hoop] = Field(default_factory=list)

    cooldown_bars: int = Field(
        default=0, ge=0, description="Bars between a completion and the next anchor"
    )
    allow_overlap: bool = Field(
        default=False, description="Start new candidates without skipping past a match"
    )

    price_smoothing_type: PriceSmoothingType = Field(default=PriceSmoothingType.NONE)
    price_smoothing_period: int = Field(default=5, ge=1)

    combine_mode: CombineMode = Field(default=CombineMode.PATTERN_ONLY)

    created: datetime | None = None
    updated: datetime | None = None

    @field_validator("combine_mode", mode="before")
    @classmethod
    def parse_combine_mode(cls, v: Any) -> Any:
        """Accept enum values or names in any case ('hoop_only', 'PATTERN_ONLY', 'AND')."""
        if isinstance(v, str) and not isinstance(v, CombineMode):
            lowered = v.lower()
            for mode in CombineMode:
                if lowered in (mode.value, mode.name.lower()):
                    return mode
        return v

    # Derived sizes

    @property
    def has_hoops(self) -> bool:
        return len(self.hoops) > 0

    @property
    def total_expected_bars(self) -> int:
        """Bars spanned when every hoop hits exactly at its distance."""
        return sum(h.distance for h in self.hoops)

    @property
    def max_pattern_bars(self) -> int:
        """Bars spanned with every tolerance at its maximum."""
        return sum(h.distance + h.tolerance for h in self.hoops)

    @property
    def min_pattern_bars(self) -> int:
        """Bars spanned with every tolerance at its minimum."""
        return sum(max(1, h.distance - h.tolerance) for h in self.hoops)

    # Edit operations

    def hoop_at(self, index: int) -> Hoop:
        self._check_index(index)
        return self.hoops[index]

    def add_hoop(self, hoop: Hoop | dict[str, Any]) -> Hoop:
        """Append a hoop to the end of the chain."""
        validated = Hoop.model_validate(hoop)
        self.hoops.append(validated)
        self._touch()
        return validated

    def insert_hoop(self, index: int, hoop: Hoop | dict[str, Any]) -> Hoop:
        """Insert a hoop before position ``index`` (``len(hoops)`` appends)."""
        if not 0 <= index <= len(self.hoops):
            raise HoopEditError(f"Cannot insert hoop at {index}: pattern has {len(self.hoops)} hoops")
        validated = Hoop.model_validate(hoop)
        self.hoops.insert(index, validated)
        self._touch()
        return validated

    def remove_hoop(self, index: int) -> Hoop:
        self._check_index(index)
        removed = self.hoops.pop(index)
        self._touch()
        return removed

    def replace_hoop(self, index: int, hoop: Hoop | dict[str, Any]) -> Hoop:
        """Commit an edited hoop, e.g. the result of a geometry edit."""
        self._check_index(index)
        validated = Hoop.model_validate(hoop)
        self.hoops[index] = validated
        self._touch()
        return validated

    def move_hoop_up(self, index: int) -> int:
        """Swap a hoop with its predecessor. Returns the hoop's new index."""
        self._check_index(index)
        if index == 0:
            return index
        self.hoops[index - 1], self.hoops[index] = self.hoops[index], self.hoops[index - 1]
        self._touch()
        return index - 1

    def move_hoop_down(self, index: int) -> int:
        """Swap a hoop with its successor. Returns the hoop's new index."""
        self._check_index(index)
        if index == len(self.hoops) - 1:
            return index
        self.hoops[index + 1], self.hoops[index] = self.hoops[index], self.hoops[index + 1]
        self._touch()
        return index + 1

    def snapshot(self) -> "HoopPattern":
        """Deep copy that later edits to this pattern cannot reach."""
        return self.model_copy(deep=True)

    # Persistence record

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON record used by pattern stores.

        Only keys the record was read or built with are written, plus
        ``hoops`` and, once an edit has touched the pattern, ``updated``.
        """
        record = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        record["hoops"] = [
            hoop.model_dump(mode="json", by_alias=True, exclude_unset=True) for hoop in self.hoops
        ]
        if self.updated is not None:
            record.update(self.model_dump(mode="json", by_alias=True, include={"updated"}))
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "HoopPattern":
        """Validate a stored record. Raises pydantic ValidationError on bad definitions."""
        return cls.model_validate(record)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.hoops):
            raise HoopEditError(f"Hoop index {index} out of range (pattern has {len(self.hoops)} hoops)")

    def _touch(self) -> None:
        self.updated = datetime.now(UTC)

    def __str__(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class HoopMatchResult:
    """One completed pattern match.

    Holds scalar snapshots only, never references into the candle series.

    Attributes:
        pattern_id: Id of the matched pattern
        anchor_bar: Bar index the chain started from
        anchor_price: Reference price at the anchor bar
        hoop_hit_bars: Bar index of each hoop's hit, in hoop order
        hoop_hit_prices: Reference price of each hoop's hit, in hoop order
        completion_bar: Bar index of the last hoop hit
    """

    pattern_id: str
    anchor_bar: int
    anchor_price: float
    hoop_hit_bars: tuple[int, ...]
    hoop_hit_prices: tuple[float, ...]
    completion_bar: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hoop_hit_bars"] = list(self.hoop_hit_bars)
        data["hoop_hit_prices"] = list(self.hoop_hit_prices)
        return data
