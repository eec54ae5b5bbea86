"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel

from jm_payroll.api.dependencies import Engine
from jm_payroll.errors import ConfigurationError

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    rate_table: str | None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(engine: Engine) -> HealthResponse:
    """Check API health and that a rate table is in effect today."""
    version = None
    try:
        version = engine.resolve_rate_table().version
    except ConfigurationError:
        pass

    return HealthResponse(
        status="healthy" if version else "degraded",
        timestamp=datetime.now(timezone.utc),
        rate_table=version,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
