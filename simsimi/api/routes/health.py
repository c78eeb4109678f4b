"""
Health Check Routes - Liveness endpoint for load balancers.

This endpoint only confirms the process is serving requests; the
database-aware check lives at /api/<version>/health.
"""
from datetime import datetime

from fastapi import APIRouter

from simsimi.api.routes.simsimi import APP_VERSION
from simsimi.core.logging_config import get_logger
from simsimi.models.conversation import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get(
    "",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    summary="Health check endpoint",
)
async def health_check() -> HealthResponse:
    """Perform a basic liveness check."""
    logger.debug("Health check requested")

    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        timestamp=datetime.utcnow()
    )
