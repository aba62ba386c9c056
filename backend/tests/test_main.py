"""Tests for the main FastAPI application.
"""
import pytest
from fastapi import status
from fastapi.testclient import TestClient
from httpx import AsyncClient

from hoopmatch.main import app
from hoopmatch.main import create_app


class TestMainApplication:
    """Test the main FastAPI application configuration and endpoints."""

    def test_create_app(self):
        """Test application factory function."""
        test_app = create_app()
        assert test_app is not None
        assert test_app.title == "Hoop Pattern Matcher API"
        assert test_app.version == "1.0.0"

    @pytest.mark.unit
    def test_root_endpoint(self, client: TestClient):
        """Test the root endpoint returns expected information."""
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()

        assert data["message"] == "Hoop Pattern Matcher API"
        assert data["version"] == "1.0.0"
        assert data["health"] == "/api/v1/health"

    @pytest.mark.asyncio
    async def test_root_endpoint_async(self, async_client: AsyncClient):
        """Test the root endpoint with async client."""
        response = await async_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Hoop Pattern Matcher API"

    @pytest.mark.unit
    def test_cors_headers(self, client: TestClient):
        """Test CORS headers are properly configured."""
        response = client.options(
            "/api/v1/hoop-patterns/match",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code in [status.HTTP_200_OK, status.HTTP_204_NO_CONTENT]

    def test_nonexistent_endpoint(self, client: TestClient):
        """Test that nonexistent endpoints return 404."""
        response = client.get("/nonexistent")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_app_middleware_configured(self):
        """Test that middleware is properly configured."""
        from starlette.middleware.cors import CORSMiddleware

        middleware_classes = [middleware.cls for middleware in app.user_middleware]
        assert CORSMiddleware in middleware_classes

    def test_exception_handlers_registered(self):
        """Test that global and rate limit exception handlers are registered."""
        from slowapi.errors import RateLimitExceeded

        assert Exception in app.exception_handlers
        assert RateLimitExceeded in app.exception_handlers
        assert app.state.limiter is not None

    def test_routes_registered(self):
        """Test the hoop pattern routes are mounted under the API prefix."""
        paths = app.openapi()["paths"]
        assert "/api/v1/hoop-patterns/match" in paths
        assert "/api/v1/hoop-patterns/zones" in paths
        assert "/api/v1/hoop-patterns/edit" in paths
        assert "/api/v1/health" in paths

    def test_docs_disabled_outside_development(self, client: TestClient):
        """Test that docs are not served in the test environment."""
        response = client.get("/docs")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestApplicationLifespan:
    """Test application lifespan management."""

    @pytest.mark.asyncio
    async def test_shutdown_cancels_searches(self, monkeypatch):
        """Test shutdown cancels searches still registered."""
        from hoopmatch.core.config import Settings
        from hoopmatch.main import lifespan
        from hoopmatch.services.search_service import SearchServiceRegistry

        registry = SearchServiceRegistry(Settings())
        service = registry.for_pattern("running")
        cancelled = []
        monkeypatch.setattr(service, "cancel", lambda: cancelled.append("running"))
        monkeypatch.setattr("hoopmatch.main.get_search_registry", lambda: registry)

        async with lifespan(app):
            assert cancelled == []

        assert cancelled == ["running"]
