"""Structured logging utilities for search runs and API requests.

This module configures structlog so that search summaries (pattern id, bars
scanned, matches found, elapsed time) are emitted as structured events.
JSON output is used outside development for easy parsing.
"""
import logging
import sys

import structlog


def configure_structured_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structured logging for the application.

    Sets up structlog with:
    - JSON formatting (or console formatting when json_logs is False)
    - ISO UTC timestamps
    - Context variables merged into every event (see bind_search_context)
    - Log level filtering

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of the human readable console format
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def bind_search_context(pattern_id: str | None, generation: int) -> None:
    """Attach the running search's identity to subsequent log events.

    Args:
        pattern_id: Id of the pattern being searched
        generation: Search generation number from the search service
    """
    structlog.contextvars.bind_contextvars(pattern_id=pattern_id, search_generation=generation)


def clear_search_context() -> None:
    """Remove search identity from the logging context."""
    structlog.contextvars.unbind_contextvars("pattern_id", "search_generation")


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        BoundLogger instance for structured logging
    """
    return structlog.get_logger(name)
