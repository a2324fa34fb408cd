"""
PageNotes Backend — Request ID Middleware
===========================================

What:  Assigns each request a short correlation ID, exposes it to every log
       record, and returns it in the X-Request-ID response header.
How:   A ContextVar holds the ID for the current request's task;
       RequestIDLogFilter copies it onto log records so the format string can
       print %(request_id)s.

Client-supplied IDs:
    An incoming X-Request-ID is reused only if it is short and made of safe
    characters (letters, digits, '-', '_', '.'); anything else is replaced.
    The value ends up in log lines and response headers.
"""

import logging
import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var, request.state.request_id and X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get("X-Request-ID", "")
        rid = incoming if _SAFE_REQUEST_ID.match(incoming) else _new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response


class RequestIDLogFilter(logging.Filter):
    """Adds record.request_id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get("") or "-"
        return True
