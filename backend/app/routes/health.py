"""
TouristMap Backend: Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Asks the store for a lightweight connectivity probe (SELECT 1 for
       SQLite) and reports aggregate status.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app import __version__
from app.schemas.pin import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    """Probe the store and return its status with the service uptime."""
    store = getattr(request.app.state, "store", None)
    reachable = store is not None and await store.health_check()

    body = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not reachable:
        logger.warning("Health check failed: database disconnected")
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
