"""
PageNotes Backend — Request Logging Middleware
================================================

What:  One access-log line per request: method, path, status, duration,
       client IP and, for authenticated requests, the user id.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

What we log vs what we DON'T log:
    ✅ method, path, status, duration, IP, request ID, user id
    ❌ request bodies (passwords, note text), Authorization headers (tokens)

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pagenotes.middleware.request_id import request_id_var

logger = logging.getLogger("pagenotes.access")

# Probed every few seconds by orchestrators
_QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request after the response is produced."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        # Bound by the auth gate dependency on protected routes
        user_id = getattr(request.state, "user_id", None)

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            user_id if user_id is not None else "-",
            client_ip,
            extra={
                "request_id": request_id_var.get(""),
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        return response
