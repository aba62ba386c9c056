"""Shared pytest fixtures for testing infrastructure.

CRITICAL: Environment variables MUST be set before ANY imports.
"""
import os

# ===============================================================================
# CRITICAL: Set test environment variables FIRST, before ANY other imports!
# This ensures Settings classes pick up the test configuration.
# ===============================================================================
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"

# Now import everything else AFTER environment is configured
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport
from httpx import AsyncClient

from hoopmatch.core.config import Settings
from hoopmatch.models.candles import CandleSeries
from hoopmatch.models.hoop import HoopPattern
from hoopmatch.utils.structured_logging import configure_structured_logging
from tests.utils.factories import make_pattern
from tests.utils.factories import make_series


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings.

    Returns:
        Settings: Test configuration
    """
    return Settings(
        environment="test",
        log_level="WARNING",
        debug=True,
        rate_limit_enabled=False,
    )


@pytest.fixture(scope="session", autouse=True)
def configure_logging(test_settings: Settings):
    """Configure structured logging for tests.

    Args:
        test_settings: Test configuration
    """
    configure_structured_logging(log_level=test_settings.log_level, json_logs=False)


@pytest.fixture
def dip_pattern() -> HoopPattern:
    """Single hoop: a 2-4% dip five bars (+/- 1) after the anchor."""
    return make_pattern(
        {"name": "dip", "min_price_percent": -4.0, "max_price_percent": -2.0, "distance": 5, "tolerance": 1}
    )


@pytest.fixture
def double_bottom_pattern() -> HoopPattern:
    """Dip, recovery to the anchor level, second dip."""
    return make_pattern(
        {"name": "first low", "min_price_percent": -6.0, "max_price_percent": -2.0, "distance": 4, "tolerance": 1},
        {"name": "bounce", "min_price_percent": 2.0, "max_price_percent": 8.0, "distance": 4, "tolerance": 1},
        {"name": "second low", "min_price_percent": -8.0, "max_price_percent": -2.0, "distance": 4, "tolerance": 1},
        id="double-bottom",
        name="Double Bottom",
    )


@pytest.fixture
def flat_series_with_dip() -> CandleSeries:
    """Twenty bars at 100 with a single 97 close at bar 5."""
    closes = [100.0] * 20
    closes[5] = 97.0
    return make_series(closes)


@pytest.fixture
def app() -> FastAPI:
    """Create the application for API tests.

    Returns:
        FastAPI: Application instance
    """
    from hoopmatch.main import create_app

    return create_app()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create synchronous test client.

    Args:
        app: Test application instance

    Returns:
        TestClient: Synchronous test client
    """
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client.

    Args:
        app: Test application instance

    Yields:
        AsyncClient: Async test client
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


def pytest_configure(config):
    """Configure pytest with custom markers and settings.

    Args:
        config: Pytest configuration
    """
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
