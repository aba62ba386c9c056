"""Pydantic schemas for API request/response validation.

This module exports all Pydantic schemas used throughout the application.
"""

from hoopmatch.schemas.base import StrictBaseModel
from hoopmatch.schemas.hoop_patterns import (
    CandleIn,
    EditRequest,
    EditResponse,
    HoopMatchOut,
    HoopZoneOut,
    MatchRequest,
    MatchResponse,
    ZonesRequest,
    ZonesResponse,
)

__all__ = [
    "CandleIn",
    "EditRequest",
    "EditResponse",
    "HoopMatchOut",
    "HoopZoneOut",
    "MatchRequest",
    "MatchResponse",
    "StrictBaseModel",
    "ZonesRequest",
    "ZonesResponse",
]
