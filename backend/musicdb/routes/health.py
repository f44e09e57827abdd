"""
Music DB API - Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   The availability gate hides the reason for a 503; /health is exempt
       from the gate and says whether the database is the problem.
How:   Runs a fresh SELECT 1 probe (which also refreshes the gate's ready
       flag) and, when connected, counts the catalog rows.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

An empty catalog is still "healthy": seeding is optional.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy.exc import SQLAlchemyError

from musicdb import __version__
from musicdb.database import async_session_factory, connection_state
from musicdb.schemas.track import HealthResponse
from musicdb.services.track_service import track_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "disconnected"
    overall = "unhealthy"
    track_count = None

    if await connection_state.ping():
        db_status = "connected"
        overall = "healthy"
        try:
            async with async_session_factory() as session:
                track_count = await track_service.count_tracks(session)
        except SQLAlchemyError as e:
            # Reachable but the table is missing (migrations not applied)
            logger.warning("Health check: could not count tracks: %s", str(e))
    else:
        logger.warning("Health check: database unreachable")

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        track_count=track_count,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
