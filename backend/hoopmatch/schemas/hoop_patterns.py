"""Schemas for the hoop pattern API."""

from typing import Any

from pydantic import Field, model_validator

from hoopmatch.matching.geometry import EdgeKind, HoopZone
from hoopmatch.models.candles import Candle, CandleSeries
from hoopmatch.models.hoop import HoopMatchResult, HoopPattern
from hoopmatch.schemas.base import StrictBaseModel


class CandleIn(StrictBaseModel):
    """One OHLCV bar. Timestamp is epoch milliseconds."""

    timestamp: int = Field(..., ge=0, description="Bar open time in epoch milliseconds")
    open: float = Field(..., allow_inf_nan=False)
    high: float = Field(..., allow_inf_nan=False)
    low: float = Field(..., allow_inf_nan=False)
    close: float = Field(..., allow_inf_nan=False)
    volume: float = Field(default=0.0, ge=0)


def candles_to_series(candles: list[CandleIn]) -> CandleSeries:
    """Build a CandleSeries from request candles.

    Raises:
        CandleSeriesError: If timestamps are duplicated or out of order
    """
    return CandleSeries.from_candles([Candle(**c.model_dump()) for c in candles])


class HoopMatchOut(StrictBaseModel):
    """One completed match."""

    pattern_id: str
    anchor_bar: int
    anchor_price: float
    hoop_hit_bars: list[int]
    hoop_hit_prices: list[float]
    completion_bar: int
    completion_timestamp: int = Field(..., description="Timestamp of the completion bar")

    @classmethod
    def from_result(cls, result: HoopMatchResult, series: CandleSeries) -> "HoopMatchOut":
        return cls(
            **result.to_dict(),
            completion_timestamp=int(series.timestamps[result.completion_bar]),
        )


class MatchRequest(StrictBaseModel):
    """Search a pattern over a candle series."""

    pattern: HoopPattern = Field(..., description="Pattern record (camelCase keys)")
    candles: list[CandleIn] = Field(default_factory=list, description="Bars oldest to newest")
    condition: list[bool] | None = Field(
        default=None, description="External per-bar condition for the pattern's combine mode"
    )

    @model_validator(mode="after")
    def validate_condition_length(self) -> "MatchRequest":
        if self.condition is not None and len(self.condition) != len(self.candles):
            raise ValueError(
                f"condition has {len(self.condition)} values but there are "
                f"{len(self.candles)} candles"
            )
        return self

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {
                    "pattern": {
                        "id": "pullback",
                        "name": "Pullback",
                        "hoops": [
                            {
                                "name": "dip",
                                "minPricePercent": -4.0,
                                "maxPricePercent": -2.0,
                                "distance": 5,
                                "tolerance": 1,
                                "anchorMode": "ACTUAL_HIT",
                            }
                        ],
                        "cooldownBars": 0,
                        "allowOverlap": False,
                    },
                    "candles": [
                        {
                            "timestamp": 1704067200000,
                            "open": 100.0,
                            "high": 101.0,
                            "low": 99.0,
                            "close": 100.0,
                            "volume": 1000.0,
                        }
                    ],
                }
            ]
        },
    }


class MatchResponse(StrictBaseModel):
    """Matches plus per-bar signals aligned with the request candles."""

    pattern_id: str
    bars: int
    matches: list[HoopMatchOut]
    pattern_active: list[bool]
    completed: list[bool]
    combined: list[bool] | None = Field(
        default=None,
        description="Combined signal; null when the combine mode needs a condition and none was sent",
    )


class ZonesRequest(StrictBaseModel):
    """Lay out a pattern's hoop zones from an anchor."""

    pattern: HoopPattern
    anchor_bar: int
    anchor_price: float = Field(..., allow_inf_nan=False)


class HoopZoneOut(StrictBaseModel):
    """Hoop rectangle in data space."""

    hoop_index: int
    ref_bar: int
    ref_price: float
    start_bar: int
    end_bar: int
    min_price: float
    max_price: float | None

    @classmethod
    def from_zone(cls, zone: HoopZone) -> "HoopZoneOut":
        return cls(
            hoop_index=zone.hoop_index,
            ref_bar=zone.ref_bar,
            ref_price=zone.ref_price,
            start_bar=zone.start_bar,
            end_bar=zone.end_bar,
            min_price=zone.min_price,
            max_price=zone.max_price,
        )


class ZonesResponse(StrictBaseModel):
    pattern_id: str
    zones: list[HoopZoneOut]


class EditRequest(StrictBaseModel):
    """Drag one edge of a hoop zone to a new data-space position."""

    pattern: HoopPattern
    hoop_index: int = Field(..., ge=0)
    edge: EdgeKind
    value: float = Field(
        ..., allow_inf_nan=False, description="New edge position: a price for TOP/BOTTOM, a bar for LEFT/RIGHT"
    )
    anchor_bar: int
    anchor_price: float = Field(..., allow_inf_nan=False)


class EditResponse(StrictBaseModel):
    """Updated hoop and the pattern record with the edit committed."""

    hoop: dict[str, Any]
    pattern: dict[str, Any]
