"""
PageNotes Backend — Auth Throttling Middleware
================================================

What:  Per-IP sliding window limit on the credential endpoints (/auth/*).
Why:   register and login are the only unauthenticated operations and the
       only place passwords can be guessed online. Note endpoints already
       require a valid token and are not throttled.

Algorithm: Sliding Window Log
    1. Each IP keeps a deque of request timestamps
    2. On each request, drop timestamps older than the window
    3. If the remaining count >= limit, reject with 429 + Retry-After
    4. Otherwise record the timestamp and continue

Scope:
    State is in-process. With several workers each worker enforces its own
    window, so the effective limit is max_requests × workers.
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from pagenotes.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class AuthRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests:   Allowed requests per IP within the window.
        window_seconds: Window length.
        path_prefixes:  Only paths starting with one of these are limited.
        clock:          Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        app,
        max_requests: int = 30,
        window_seconds: int = 60,
        path_prefixes: Tuple[str, ...] = ("/auth/",),
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefixes = path_prefixes
        self._clock = clock
        self._requests: Dict[str, Deque[float]] = {}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(self.path_prefixes):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        retry_after = self._check(client_ip, now)

        if retry_after is not None:
            logger.warning(
                "Auth rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                self.max_requests,
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    def _check(self, client_ip: str, now: float):
        """Record the request and return None, or return seconds to wait."""
        window_start = now - self.window_seconds
        timestamps = self._requests.setdefault(client_ip, deque())
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            return int(timestamps[0] + self.window_seconds - now) + 1

        timestamps.append(now)
        self._prune(window_start)
        return None

    def _prune(self, window_start: float) -> None:
        """Forget IPs with no requests inside the window."""
        if len(self._requests) < 1024:
            return
        stale = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in stale:
            del self._requests[ip]
        if stale:
            logger.debug("Cleaned up %d inactive IP entries", len(stale))
