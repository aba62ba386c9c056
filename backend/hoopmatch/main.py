"""Main FastAPI application with async support and middleware.
"""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hoopmatch.api.v1 import health
from hoopmatch.api.v1 import hoop_patterns
from hoopmatch.core.config import get_settings
from hoopmatch.core.deps import AppSettings
from hoopmatch.core.deps import get_search_registry
from hoopmatch.core.docs import API_CONTACT
from hoopmatch.core.docs import API_DESCRIPTION
from hoopmatch.core.docs import API_TITLE
from hoopmatch.core.docs import API_VERSION
from hoopmatch.core.docs import OPENAPI_TAGS
from hoopmatch.core.docs import custom_openapi_schema
from hoopmatch.core.docs import get_swagger_ui_html_config
from hoopmatch.utils.structured_logging import configure_structured_logging
from hoopmatch.utils.structured_logging import get_logger

_settings = get_settings()
configure_structured_logging(
    log_level=_settings.log_level, json_logs=not _settings.is_development
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Handles startup and shutdown events for the FastAPI application.
    """
    settings = get_settings()

    logger.info(
        "Starting Hoop Pattern Matcher API",
        environment=settings.environment,
        search_max_workers=settings.search_max_workers,
        parallel_search_min_bars=settings.parallel_search_min_bars,
    )

    try:
        yield
    finally:
        logger.info("Shutting down Hoop Pattern Matcher API")
        # Abandon any search still running in a worker thread
        get_search_registry().cancel_all()
        logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        contact=API_CONTACT,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        debug=settings.debug,
        lifespan=lifespan,
        swagger_ui_parameters=get_swagger_ui_html_config()["swagger_ui_parameters"]
        if settings.is_development
        else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Add rate limiter
    app.state.limiter = hoop_patterns.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        Args:
            request: The incoming request
            exc: The exception that occurred

        Returns:
            JSONResponse: Error response
        """
        logger.error(
            "Unhandled exception occurred",
            exc_info=exc,
            path=str(request.url),
            method=request.method,
        )

        if settings.is_development:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal Server Error",
                    "detail": str(exc),
                    "type": type(exc).__name__,
                },
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal Server Error",
                "detail": "An unexpected error occurred",
            },
        )

    # Include routers
    app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["health"])

    app.include_router(
        hoop_patterns.router,
        prefix=f"{settings.api_v1_prefix}/hoop-patterns",
        tags=["hoop-patterns"],
    )

    @app.get("/", include_in_schema=False)
    async def root(app_settings: AppSettings) -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "message": API_TITLE,
            "version": API_VERSION,
            "docs": "/docs" if app_settings.is_development else "disabled",
            "health": f"{app_settings.api_v1_prefix}/health",
        }

    # Set custom OpenAPI schema with enhanced documentation
    if settings.is_development:
        app.openapi = lambda: custom_openapi_schema(app)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "hoopmatch.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
