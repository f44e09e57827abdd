"""
Music DB API - Database Availability Gate
===========================================

What:  Rejects requests with 503 while the database link is down.
Why:   Every endpoint needs the database; failing fast with a fixed payload is
       clearer to clients than a slow driver timeout or a 500.
How:   Reads the in-memory ready flag kept by database.ConnectionState. The
       check never issues a query, so the gate adds no per-request round trip.
When:  After RequestIDMiddleware, so the 503 still carries X-Request-ID.

Response when closed:
    HTTP 503  {"error": "Service unavailable", "request_id": "..."}

Excluded paths:
    /health reports database status itself and must answer while the gate is closed.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from musicdb.database import ConnectionState, connection_state
from musicdb.exceptions import ServiceUnavailableError
from musicdb.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class DatabaseAvailabilityMiddleware(BaseHTTPMiddleware):
    """Short-circuits every request with 503 until the database is ready."""

    EXCLUDED_PATHS = {"/health"}

    def __init__(self, app, state: ConnectionState = connection_state):
        super().__init__(app)
        self.state = state

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or self.state.ready:
            return await call_next(request)

        exc = ServiceUnavailableError()
        rid = request_id_var.get("")
        logger.warning("[%s] Rejected %s %s: database not connected", rid, request.method, request.url.path)
        return JSONResponse(
            status_code=503,
            content={"error": exc.message, "request_id": rid},
        )
