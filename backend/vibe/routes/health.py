"""
Vibe Backend — Root and Health Check Routes
============================================

What:  GET / (service banner) and GET /health (dependency probe).
Who:   Browsers, Docker health checks, load balancers.

Health semantics:
    healthy:   `SELECT 1` succeeds (HTTP 200)
    unhealthy: the database cannot be reached (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vibe import __version__
from vibe.database import engine
from vibe.schemas.common import HealthResponse, RootResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=RootResponse, summary="Service banner")
async def root() -> RootResponse:
    return RootResponse(message="Vibe Social Network API", version=__version__, status="running")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
