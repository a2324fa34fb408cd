"""
PageNotes Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Auth Rate Limit] → [Access Log] → [CORS] → Route

    1. Request ID: correlation ID for logs and the X-Request-ID header;
       outermost so every response, 429s included, carries it
    2. Auth Rate Limit: rejects credential-guessing bursts on /auth/* early
    3. Access Log: method, path, status, duration, user id
    4. CORS: Starlette's CORSMiddleware (handles preflight)

Authentication is NOT middleware: the auth gate is a route dependency
(dependencies.require_user), so only note routes pay for it and /auth and
/health stay open.
"""
