"""
PageNotes Backend — Notes Route Handlers
==========================================

What:  POST /notes, GET /notes/{page} and GET /stats.
Who:   Called by the notebook UI when a page is turned (save) and when a page
       is shown (load).
How:   Every handler depends on require_user, so the auth gate runs before
       the note store is touched, and every store call is scoped to the
       resolved user id.

Page range:
    page must fit the 32-bit notes.page column; anything outside
    [PAGE_MIN, PAGE_MAX] is a 400 before the store is reached.

Caching:
    GET responses are per-user and change on every save: Cache-Control
    no-store.
"""

import logging

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pagenotes.database import get_db_session
from pagenotes.dependencies import get_note_service, require_user
from pagenotes.schemas.note import (
    ErrorResponse,
    NoteContentResponse,
    NoteCreate,
    NoteSavedResponse,
    PAGE_MAX,
    PAGE_MIN,
    StatsResponse,
)
from pagenotes.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

_AUTH_ERRORS = {
    400: {"description": "Malformed body or page out of range", "model": ErrorResponse},
    401: {"description": "Missing, malformed, invalid or expired token", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteSavedResponse,
    responses=_AUTH_ERRORS,
    summary="Save the content of a page",
)
async def save_note(
    body: NoteCreate,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteSavedResponse:
    """Append a new revision of the page for the caller. Latest save wins."""
    await note_service.save(db, owner_id=user_id, page=body.page, content=body.content)
    return NoteSavedResponse(message="Note saved")


@router.get(
    "/notes/{page}",
    response_model=NoteContentResponse,
    responses=_AUTH_ERRORS,
    summary="Load the latest content of a page",
)
async def get_note(
    response: Response,
    page: int = Path(ge=PAGE_MIN, le=PAGE_MAX),
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteContentResponse:
    """Latest content the caller saved for page, or "" if none."""
    content = await note_service.latest(db, owner_id=user_id, page=page)
    response.headers["Cache-Control"] = "no-store"
    return NoteContentResponse(content=content)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses=_AUTH_ERRORS,
    summary="Count the caller's saved notes",
)
async def stats(
    response: Response,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> StatsResponse:
    count = await note_service.count_for(db, owner_id=user_id)
    response.headers["Cache-Control"] = "no-store"
    return StatsResponse(count=count)
