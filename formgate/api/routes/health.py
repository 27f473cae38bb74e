"""Health check endpoint."""

import logging

from fastapi import APIRouter, Request

from formgate import __version__
from formgate.api.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    """Report whether the gateway has its collaborators wired."""
    state = request.app.state
    pipeline_ok = getattr(state, "orchestrator", None) is not None
    analytics_ok = bool(getattr(state, "analytics_enabled", False))

    return HealthResponse(
        status="healthy" if pipeline_ok else "degraded",
        version=__version__,
        pipeline_configured=pipeline_ok,
        analytics_enabled=analytics_ok,
    )
