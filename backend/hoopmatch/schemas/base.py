"""Base Pydantic schemas with strict validation."""
from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Base model that forbids extra fields.

    Request and response envelopes inherit from this class. Embedded pattern
    records do not: they use the camelCase record model, which keeps unknown
    keys so that stored patterns round-trip unchanged.
    """

    model_config = ConfigDict(extra="forbid")
