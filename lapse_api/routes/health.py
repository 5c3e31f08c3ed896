"""
Health check endpoints for monitoring and orchestration.

Provides:
- /health - Full health check with version info
- /health/live - Liveness probe
- /health/ready - Readiness probe (a corpus is loaded)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from lapse.services.explorer_service import LegislationExplorer
from lapse.settings import get_settings
from lapse_api.dependencies import get_explorer

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    status: str
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Full health check endpoint.

    Returns application status, version, and environment.
    """
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        environment=settings.environment.value,
    )


@router.get("/health/live")
async def liveness() -> Dict[str, str]:
    """Liveness probe: 200 while the process is up."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> ReadinessResponse:
    """
    Readiness probe.

    The service is ready once a corpus has been loaded; until then it
    answers 503 so no traffic is routed to it.
    """
    checks: Dict[str, Any] = {}
    if explorer.is_loaded:
        checks["corpus"] = {
            "status": "ready",
            "items": len(explorer.all_items),
            "diagnostics": len(explorer.diagnostics),
        }
    else:
        checks["corpus"] = {"status": "not_loaded"}
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if explorer.is_loaded else "not_ready",
        checks=checks,
    )
