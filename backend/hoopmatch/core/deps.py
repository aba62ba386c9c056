"""Dependency injection for FastAPI endpoints."""
import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from hoopmatch.core.config import Settings, get_settings
from hoopmatch.services.search_service import SearchServiceRegistry

logger = logging.getLogger(__name__)

# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_search_registry() -> SearchServiceRegistry:
    """Get the process-wide search service registry.

    Returns:
        SearchServiceRegistry: Shared registry of per-pattern search services
    """
    logger.info("Creating hoop search service registry")
    return SearchServiceRegistry(get_settings())


SearchRegistry = Annotated[SearchServiceRegistry, Depends(get_search_registry)]
