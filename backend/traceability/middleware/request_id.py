"""
Traceability API — Request ID Middleware
=========================================

What:  Assigns a short correlation ID to each request and echoes it back.
Why:   Lets an operator match a client-reported failure to the server log
       lines of that request (the error body itself stays minimal).
How:   Uses the client's X-Request-ID if present, otherwise generates one;
       stores it in a ContextVar and returns it as a response header.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the request, or generate an 8-char UUID prefix
        2. Store it in request_id_var and request.state.request_id
        3. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid

        return response
