"""FastAPI documentation configuration and metadata.

OpenAPI descriptions, tags and error examples for the Hoop Pattern Matcher API.
"""
from typing import Any

from fastapi.openapi.utils import get_openapi

# API Metadata
API_TITLE = "Hoop Pattern Matcher API"
API_DESCRIPTION = """
## Hoop Pattern Matcher API

Sequential, tolerance-windowed price checkpoint matching for chart patterns
(double bottoms, flags, head-and-shoulders and the like).

### Concepts

- **Hoop**: one checkpoint. A price band (percent offsets from the active
  anchor price) and a bar window (distance +/- tolerance from the active anchor bar).
- **Anchor mode**: `ACTUAL_HIT` continues from the bar/price that hit the hoop,
  `TARGET` continues from the window midpoint and the band midpoint.
- **Cooldown**: bars required between one match's completion and the next anchor.
- **Combine mode**: how pattern activity combines with an external condition
  (`hoop_only`, `dsl_only`, `and`, `or`).

### Matching Policy

The first qualifying bar in a hoop's window is taken and never revisited.
Results are deterministic and ordered by anchor bar.

### Pattern Records

Patterns are sent as camelCase records (`minPricePercent`, `cooldownBars`, ...).
Unknown keys are preserved when a record is returned.

### API Versioning

Current version: **v1** - All endpoints are prefixed with `/api/v1`

### Error Handling

- **400**: Invalid candle series or hoop index
- **409**: Search superseded by a newer request for the same pattern
- **422**: Invalid pattern definition or request body
- **429**: Rate limit exceeded
"""

API_VERSION = "1.0.0"
API_CONTACT = {
    "name": "Hoop Pattern Matcher",
}
API_LICENSE = {
    "name": "MIT",
    "url": "https://opensource.org/licenses/MIT",
}

# OpenAPI Tags
OPENAPI_TAGS: list[dict[str, Any]] = [
    {
        "name": "health",
        "description": "**System Health & Monitoring**\n\n"
        "Endpoints for monitoring application health, readiness, and liveness.",
    },
    {
        "name": "hoop-patterns",
        "description": "**Hoop Pattern Matching**\n\n"
        "Search hoop patterns over candle series, preview hoop zones from an anchor, "
        "and translate zone edge drags into hoop parameters.",
    },
]

# Response Examples
COMMON_RESPONSES = {
    400: {
        "description": "Bad Request - Invalid input",
        "content": {
            "application/json": {
                "examples": {
                    "unordered_candles": {
                        "summary": "Candles Out Of Order",
                        "value": {
                            "detail": "Candle timestamps must be strictly increasing (violated at bar 3)",
                        },
                    },
                    "hoop_index": {
                        "summary": "Hoop Index Out Of Range",
                        "value": {
                            "detail": "Hoop index 4 out of range (pattern has 2 hoops)",
                        },
                    },
                }
            }
        },
    },
    422: {
        "description": "Validation Error - Invalid pattern definition",
        "content": {
            "application/json": {
                "examples": {
                    "inverted_band": {
                        "summary": "Inverted Price Band",
                        "value": {
                            "detail": [
                                {
                                    "type": "value_error",
                                    "loc": ["body", "pattern", "hoops", 0],
                                    "msg": "Value error, min_price_percent (2.0) must not exceed "
                                    "max_price_percent (-2.0)",
                                }
                            ],
                        },
                    },
                    "negative_tolerance": {
                        "summary": "Negative Tolerance",
                        "value": {
                            "detail": [
                                {
                                    "type": "greater_than_equal",
                                    "loc": ["body", "pattern", "hoops", 0, "tolerance"],
                                    "msg": "Input should be greater than or equal to 0",
                                    "input": -1,
                                }
                            ],
                        },
                    },
                }
            }
        },
    },
    500: {
        "description": "Internal Server Error - Server encountered an error",
        "content": {
            "application/json": {
                "examples": {
                    "generic_error": {
                        "summary": "Generic Internal Error",
                        "value": {
                            "error": "Internal Server Error",
                            "detail": "An unexpected error occurred",
                        },
                    },
                }
            }
        },
    },
}


def custom_openapi_schema(app) -> dict[str, Any]:
    """Generate custom OpenAPI schema with enhanced documentation.

    Args:
        app: FastAPI application instance

    Returns:
        Dict[str, Any]: Custom OpenAPI schema
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=API_TITLE,
        version=API_VERSION,
        description=API_DESCRIPTION,
        routes=app.routes,
        tags=OPENAPI_TAGS,
        contact=API_CONTACT,
        license_info=API_LICENSE,
    )

    openapi_schema["servers"] = [
        {"url": "http://localhost:8000", "description": "Local Development Server"},
    ]

    openapi_schema["components"] = openapi_schema.get("components", {})
    openapi_schema["components"]["responses"] = COMMON_RESPONSES

    app.openapi_schema = openapi_schema
    return app.openapi_schema


def get_swagger_ui_html_config() -> dict[str, Any]:
    """Get Swagger UI HTML configuration.

    Returns:
        Dict[str, Any]: Swagger UI configuration
    """
    return {
        "swagger_ui_parameters": {
            "deepLinking": True,
            "displayRequestDuration": True,
            "defaultModelsExpandDepth": 2,
            "docExpansion": "list",
            "filter": True,
            "tryItOutEnabled": True,
        },
    }
