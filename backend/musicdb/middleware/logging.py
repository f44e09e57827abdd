"""
Music DB API - Request Logging Middleware
===========================================

What:  One access-log line per HTTP request.
Why:   Shows which filters clients send, how long the queries take, and which
       requests end in 4xx/5xx.
How:   Times the downstream call and logs method, path, query, status,
       duration, request ID and client IP on the `musicdb.access` logger.

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

What we log vs what we DON'T log:
    ✅ method, path, query string, status, duration, IP, request ID
    ❌ request headers, response bodies
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from musicdb.middleware.request_id import request_id_var

logger = logging.getLogger("musicdb.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        # request.client is None under some test transports
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        query = request.url.query
        rid = request_id_var.get("")

        # Probed every few seconds by orchestrators
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s%s %d %.1fms [%s] from %s",
            method,
            path,
            f"?{query}" if query else "",
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
