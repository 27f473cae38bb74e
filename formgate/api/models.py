"""Pydantic response models for the FormGate API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

class EntryResponse(BaseModel):
    """JSON body returned when an entry request does not redirect."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    fields: dict[str, Any] | None = None
    message: str | None = None
    error_code: str | None = Field(default=None, alias="errorCode")
    data: Any = None
    raw_error: str | None = Field(default=None, alias="rawError")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = ""
    pipeline_configured: bool = False
    analytics_enabled: bool = False
