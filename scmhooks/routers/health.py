"""Health check endpoint."""

from fastapi import APIRouter

from scmhooks.config import settings
from scmhooks.schemas.health import HealthResponse

router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Report liveness; the engine has no backing services to probe."""
    return HealthResponse(status="ok", app=settings.app_name)
