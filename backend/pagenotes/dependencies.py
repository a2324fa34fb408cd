"""
PageNotes Backend — FastAPI Dependencies
==========================================

What:  Accessors that hand route handlers the service objects built in
       create_app(), plus the auth gate dependency.
Why:   Services live on app.state (constructed from Settings), not in module
       globals. Tests can build an app with other settings or override any
       of these with app.dependency_overrides.

Auth gate usage:
    @router.get("/notes/{page}")
    async def get_note(page: int, user_id: int = Depends(require_user)):
        ...
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from pagenotes.exceptions import UnauthenticatedError
from pagenotes.services.auth_gate import AuthGate
from pagenotes.services.auth_service import AuthService
from pagenotes.services.note_service import NoteService

logger = logging.getLogger(__name__)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    gate: AuthGate = Depends(get_auth_gate),
) -> int:
    """
    Resolve the caller's user id or reject the request with 401.

    On success the id is also bound to request.state.user_id, where the
    access log middleware picks it up.
    """
    try:
        user_id = gate.authenticate(authorization)
    except UnauthenticatedError as e:
        logger.info(
            "Rejected %s %s: %s token%s",
            request.method,
            request.url.path,
            e.reason,
            f" ({e.context['cause']})" if "cause" in e.context else "",
        )
        raise
    request.state.user_id = user_id
    return user_id
