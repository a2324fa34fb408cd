"""
PageNotes Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the engine and every service from the
       given Settings, stores them on app.state, registers middleware,
       exception handlers and routes.
Who:   uvicorn (pagenotes.main:app), `python -m pagenotes`, and tests (which
       call create_app with their own Settings).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │  Middleware: RequestID → AuthRateLimit → AccessLog → CORS │
    │                                                          │
    │  Routes:                                                 │
    │    POST /auth/register  POST /auth/login                 │
    │    POST /notes  GET /notes/{page}  GET /stats  (bearer)  │
    │    GET /health                                           │
    │                                                          │
    │  app.state:                                              │
    │    engine, session_factory                               │
    │    auth_service ─┬─ CredentialService ── BcryptHasher    │
    │                  └─ TokenService ── JoseTokenSigner      │
    │    auth_gate ──── TokenService                           │
    │    note_service                                          │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → create missing tables. If the database
              cannot be reached the lifespan raises and the server never
              starts accepting requests.
    Shutdown: dispose the engine (close pooled connections).
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pagenotes import __version__
from pagenotes.config import Settings, get_settings
from pagenotes.database import build_engine, build_session_factory, dispose_engine, init_models
from pagenotes.exceptions import (
    ConflictError,
    DatabaseError,
    PageNotesError,
    UnauthenticatedError,
    ValidationError,
)
from pagenotes.middleware.logging import RequestLoggingMiddleware
from pagenotes.middleware.rate_limit import AuthRateLimitMiddleware
from pagenotes.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, request_id_var
from pagenotes.routes import auth, health, notes
from pagenotes.services.auth_gate import AuthGate
from pagenotes.services.auth_service import AuthService
from pagenotes.services.credential_service import CredentialService
from pagenotes.services.note_service import NoteService
from pagenotes.services.security import BcryptHasher, JoseTokenSigner
from pagenotes.services.token_service import TokenService, resolve_signing_key

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] pagenotes.access [a1b2c3d4] POST /notes 201 ...
    The request id comes from RequestIDLogFilter ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Configure logging
        2. Create missing tables. DatabaseError propagates: uvicorn reports
           the failed startup and exits instead of serving requests.
    Shutdown:
        1. Dispose the engine
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("PageNotes Backend %s starting up...", __version__)

    try:
        await init_models(app.state.engine)
    except DatabaseError:
        logger.critical("Cannot reach the database; refusing to start.")
        await dispose_engine(app.state.engine)
        raise

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    logger.info("PageNotes Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside RequestIDMiddleware; fall back to state
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        UnauthenticatedError (all subclasses)    → 401 + WWW-Authenticate
        ConflictError                            → 409
        DatabaseError                            → 500 (generic message)
        PageNotesError (base)                    → 500
        Exception (fallback)                     → 500

    Security: responses never contain stack traces, SQL or token details.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input: tell them what's wrong."""
        rid = _request_id(request)
        logger.warning("Validation error: %s", exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Missing or mistyped body fields and path params, reported as 400."""
        rid = _request_id(request)
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.warning("Request validation failed: %s", fields)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request is missing required fields or has invalid values",
                "details": {"fields": fields},
                "request_id": rid,
            },
        )

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        """Missing/malformed/invalid token or bad login credentials."""
        rid = _request_id(request)
        return JSONResponse(
            status_code=401,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "request_id": rid,
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = _request_id(request)
        return JSONResponse(
            status_code=409,
            content={
                "error": "conflict",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Database error: generic message to user, details logged server-side."""
        rid = _request_id(request)
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(PageNotesError)
    async def handle_app_error(request: Request, exc: PageNotesError):
        rid = _request_id(request)
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace in the server log only."""
        rid = _request_id(request)
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_services(app: FastAPI, settings: Settings) -> None:
    """
    Construct the engine and every service once, from settings, onto app.state.

    The signing key is resolved here, so a missing JWT_SECRET is reported
    exactly once per application.
    """
    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    signer = JoseTokenSigner(
        secret=resolve_signing_key(settings.jwt_secret),
        algorithm=settings.jwt_algorithm,
    )
    token_service = TokenService(signer, ttl=timedelta(days=settings.token_ttl_days))
    credential_service = CredentialService(BcryptHasher(rounds=settings.bcrypt_rounds))

    app.state.token_service = token_service
    app.state.credential_service = credential_service
    app.state.auth_service = AuthService(credential_service, token_service)
    app.state.auth_gate = AuthGate(token_service)
    app.state.note_service = NoteService()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build from; defaults to get_settings().
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="PageNotes API",
        description=(
            "Per-page private notebook. Register or log in to obtain a bearer token, "
            "then save and load the content of numbered pages."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    build_services(app, settings)

    # Middleware executes in REVERSE order of addition:
    # RequestID → AuthRateLimit → AccessLog → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        AuthRateLimitMiddleware,
        max_requests=settings.auth_rate_limit_requests,
        window_seconds=settings.auth_rate_limit_window,
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# uvicorn expects `pagenotes.main:app` to be importable
app = create_app()
