"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from segmentguard import __version__
from segmentguard.models.responses import HealthResponse

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Liveness plus the number of routes guarded by request validation."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        validated_routes=getattr(request.app.state, "validated_routes", 0),
    )
