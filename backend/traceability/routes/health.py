"""
Traceability API — Liveness and Health Routes
==============================================

What:  GET / (plain-text liveness) and GET /health (dependency check).
Why:   Hosting platforms probe `/`; monitoring wants to know whether the
       database is still reachable after startup.

Status levels:
    - healthy:   SELECT 1 succeeded (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from traceability import __version__
from traceability.database import Database, get_database
from traceability.schemas.trace import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness string")
async def root() -> str:
    return "Traceability API Server Running."


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    database: Database = Depends(get_database),
) -> HealthResponse:
    """
    Probe the database with SELECT 1 on a connection checked out of the pool.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await database.check_connection()
    except Exception as e:
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
