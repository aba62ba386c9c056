"""Hoop pattern API endpoints: search, zone preview and zone edits."""
import logging

from fastapi import APIRouter
from fastapi import HTTPException
from fastapi import Request
from fastapi import status
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from hoopmatch.core.config import get_settings
from hoopmatch.core.deps import SearchRegistry
from hoopmatch.core.exceptions import CandleSeriesError, HoopEditError
from hoopmatch.matching.geometry import apply_hoop_edit, compute_hoop_zones
from hoopmatch.schemas.hoop_patterns import (
    EditRequest,
    EditResponse,
    HoopMatchOut,
    HoopZoneOut,
    MatchRequest,
    MatchResponse,
    ZonesRequest,
    ZonesResponse,
    candles_to_series,
)

logger = logging.getLogger(__name__)
router = APIRouter()

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)


@router.post(
    "/match",
    response_model=MatchResponse,
    summary="Search Hoop Pattern",
    description="Find every completed match of a hoop pattern in the given candles. "
    "Returns matches in ascending anchor order plus per-bar pattern-active, completion "
    "and combined signals aligned with the candles. A newer request for the same "
    "pattern id supersedes one still running.",
    operation_id="match_hoop_pattern",
    responses={
        400: {"description": "Invalid candle series"},
        409: {"description": "Search superseded by a newer request for the same pattern"},
        422: {"description": "Invalid pattern definition"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(lambda: get_settings().match_rate_limit)
async def match_hoop_pattern(
    request: Request, body: MatchRequest, registry: SearchRegistry
) -> MatchResponse:
    """Search a pattern over a candle series.

    Returns:
        MatchResponse: Matches and per-bar signals

    Raises:
        HTTPException: 400 for a bad series, 409 when superseded
    """
    try:
        series = candles_to_series(body.candles)
    except CandleSeriesError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    service = registry.for_pattern(body.pattern.id)
    outcome = await service.search(body.pattern, series, body.condition)
    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Search for pattern '{body.pattern.id}' was superseded by a newer request",
        )

    return MatchResponse(
        pattern_id=outcome.pattern_id,
        bars=len(series),
        matches=[HoopMatchOut.from_result(m, series) for m in outcome.matches],
        pattern_active=outcome.pattern_active.tolist(),
        completed=outcome.completed.tolist(),
        combined=outcome.combined.tolist() if outcome.combined is not None else None,
    )


@router.post(
    "/zones",
    response_model=ZonesResponse,
    summary="Preview Hoop Zones",
    description="Lay out each hoop's bar window and price band from an anchor, "
    "as drawn by the pattern editor.",
    operation_id="preview_hoop_zones",
    responses={
        422: {"description": "Invalid pattern definition"},
    },
)
async def preview_hoop_zones(body: ZonesRequest) -> ZonesResponse:
    """Compute the editor zones for a pattern.

    Returns:
        ZonesResponse: One zone per hoop
    """
    zones = compute_hoop_zones(body.pattern, body.anchor_bar, body.anchor_price)
    return ZonesResponse(
        pattern_id=body.pattern.id,
        zones=[HoopZoneOut.from_zone(z) for z in zones],
    )


@router.post(
    "/edit",
    response_model=EditResponse,
    summary="Edit Hoop From Zone Drag",
    description="Translate a dragged zone edge (TOP, BOTTOM, LEFT, RIGHT) into new hoop "
    "parameters and return the updated hoop and pattern record.",
    operation_id="edit_hoop_from_zone",
    responses={
        400: {"description": "Hoop index out of range"},
        422: {"description": "Invalid pattern definition or edit"},
    },
)
async def edit_hoop_from_zone(body: EditRequest) -> EditResponse:
    """Apply a data-space zone edit to one hoop.

    Returns:
        EditResponse: Updated hoop and pattern record

    Raises:
        HTTPException: 400 if the hoop index is out of range, 422 if the
            edited hoop is not a valid definition
    """
    pattern = body.pattern
    try:
        updated = apply_hoop_edit(
            pattern,
            body.hoop_index,
            body.edge,
            body.value,
            body.anchor_bar,
            body.anchor_price,
        )
        pattern.replace_hoop(body.hoop_index, updated)
    except HoopEditError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    logger.info(f"Applied {body.edge.value} edit to hoop {body.hoop_index} of {pattern.id}")
    return EditResponse(
        hoop=updated.model_dump(mode="json", by_alias=True),
        pattern=pattern.to_record(),
    )
