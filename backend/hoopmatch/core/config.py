"""Configuration management using Pydantic v2 settings.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = Field(default="Hoop Pattern Matcher API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(
        default="development", description="Environment (development, production)"
    )

    # API
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173", "http://localhost:8000"],
        description="Allowed CORS origins",
    )

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable per-client rate limits")
    match_rate_limit: str = Field(
        default="30/minute", description="Rate limit for the match endpoint (slowapi syntax)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    # Search execution
    search_max_workers: int = Field(
        default=4,
        ge=1,
        description="Thread pool size used for parallel anchor evaluation",
    )
    parallel_search_min_bars: int = Field(
        default=20_000,
        ge=1,
        description="Series length at which the search service switches to the parallel search",
    )
    parallel_search_chunk_size: int = Field(
        default=2_000,
        ge=1,
        description="Number of candidate anchors evaluated per parallel work item",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
