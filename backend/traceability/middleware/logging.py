"""
Traceability API — Request Logging Middleware
==============================================

What:  One log line per HTTP request: method, path, status, duration, client.
Why:   The service has no metrics layer; the access log is how slow queries
       and error bursts show up.
When:  Runs inside RequestIDMiddleware, so the request ID is available.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request bodies (costs, prices and locations stay out of logs)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from traceability.middleware.request_id import request_id_var

logger = logging.getLogger("traceability.access")

# Liveness probes hit these every few seconds
_QUIET_PATHS = frozenset({"/", "/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request once the response is ready.

    Log level follows the status class:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

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
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
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
