"""Health check endpoints for monitoring application status.
"""
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter
from fastapi import HTTPException
from fastapi import status

from hoopmatch.core.config import get_settings
from hoopmatch.core.deps import get_search_registry
from hoopmatch.core.docs import API_VERSION

router = APIRouter()


@router.get(
    "/health",
    response_model=dict[str, Any],
    summary="Comprehensive Health Check",
    description="Returns application status, version, environment and the search "
    "execution settings. Use this endpoint to verify the matcher is ready to serve.",
    operation_id="get_health_status",
    responses={
        200: {"description": "Service is healthy"},
        503: {"description": "Service is unhealthy"},
    },
)
async def health_check() -> dict[str, Any]:
    """Comprehensive health check endpoint.

    Returns:
        Dict[str, Any]: Health status information

    Raises:
        HTTPException: If any health check fails (status 503)
    """
    settings = get_settings()
    health_data: dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": API_VERSION,
        "environment": settings.environment,
        "checks": {},
    }

    try:
        get_search_registry()
        health_data["checks"]["search"] = {
            "status": "healthy",
            "max_workers": settings.search_max_workers,
            "parallel_min_bars": settings.parallel_search_min_bars,
        }
    except Exception as e:
        health_data["status"] = "unhealthy"
        health_data["checks"]["search"] = {
            "status": "unhealthy",
            "message": f"Search service not ready: {str(e)}",
        }

    if health_data["status"] == "unhealthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=health_data)

    return health_data


@router.get(
    "/health/ready",
    response_model=dict[str, str],
    summary="Readiness Probe",
    description="Simple readiness check for load balancers and orchestration systems. "
    "Returns 200 OK when the application is ready to serve traffic.",
    operation_id="get_readiness",
)
async def readiness_check() -> dict[str, str]:
    """Simple readiness check for load balancer probes."""
    return {"status": "ready", "timestamp": datetime.now(UTC).isoformat()}


@router.get(
    "/health/live",
    response_model=dict[str, str],
    summary="Liveness Probe",
    description="Simple liveness check for container orchestration. "
    "Returns 200 OK when the application process is alive.",
    operation_id="get_liveness",
)
async def liveness_check() -> dict[str, str]:
    """Simple liveness check for container orchestration."""
    return {"status": "alive", "timestamp": datetime.now(UTC).isoformat()}
