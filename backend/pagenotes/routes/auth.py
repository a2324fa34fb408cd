"""
PageNotes Backend — Auth Route Handlers
=========================================

What:  POST /auth/register and POST /auth/login.
How:   Thin handlers: parse the body, delegate to AuthService, return the
       token. Errors are raised as exceptions and mapped by the global
       handlers in main.py (400 / 401 / 409 / 500).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pagenotes.database import get_db_session
from pagenotes.dependencies import get_auth_service
from pagenotes.schemas.auth import CredentialsRequest, TokenResponse
from pagenotes.schemas.note import ErrorResponse
from pagenotes.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={
        400: {"description": "Missing username or password", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
        429: {"description": "Too many auth requests", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Register a new username and return a token for it."""
    return await auth_service.register(db, body.username, body.password)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"description": "Invalid username or password", "model": ErrorResponse},
        429: {"description": "Too many auth requests", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Sign in",
)
async def login(
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Exchange username/password for a token.

    The 401 body is identical whether the username exists or not.
    """
    return await auth_service.login(db, body.username, body.password)
