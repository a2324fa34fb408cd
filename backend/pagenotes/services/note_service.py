"""
PageNotes Backend — Note Store
================================

What:  Owner-scoped persistence of per-page notes.
Who:   Called by the /notes and /stats route handlers after the auth gate has
       resolved the caller's user id.

Storage model (latest-wins, append-only):
    save()    → INSERT one row, COMMIT
    latest()  → newest row for (owner, page), "" when there is none
    count_for → COUNT of every row the owner has ever saved

    Ordering is created_at DESC, then id DESC. Two saves landing on the same
    timestamp resolve to the later insert because ids are assigned in insert
    order.

Design Decision:
    NoteService is stateless. It receives the session per call, so each
    request's work runs in that request's own transaction.
"""

import logging

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagenotes.exceptions import DatabaseError
from pagenotes.models.note import Note

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Every query is filtered by owner_id; there is no method that reads
    another owner's rows.
    """

    async def save(self, db: AsyncSession, owner_id: int, page: int, content: str) -> Note:
        """
        Append a new revision of a page.

        Never updates or deletes existing rows. page is stored as given.

        Raises:
            DatabaseError: insert or commit failed (→ 500)
        """
        note = Note(owner_id=owner_id, page=page, content=content)
        try:
            db.add(note)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Database error saving note (owner=%s, page=%s): %s",
                owner_id, page, e, exc_info=True,
            )
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"owner_id": owner_id, "page": page, "error_type": type(e).__name__},
            ) from e

        logger.debug("Note %s saved (owner=%s, page=%s, %d chars)", note.id, owner_id, page, len(content))
        return note

    async def latest(self, db: AsyncSession, owner_id: int, page: int) -> str:
        """
        Content of the newest note for (owner_id, page).

        Returns "" when the owner has never saved that page; that is a normal
        result, not an error.

        Query plan:
            SELECT content FROM notes WHERE owner_id = :u AND page = :p
            ORDER BY created_at DESC, id DESC LIMIT 1
            → idx_notes_owner_page_latest
        """
        query = (
            select(Note.content)
            .where(Note.owner_id == owner_id, Note.page == page)
            .order_by(desc(Note.created_at), desc(Note.id))
            .limit(1)
        )
        try:
            result = await db.execute(query)
            content = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Database error reading note (owner=%s, page=%s): %s",
                owner_id, page, e, exc_info=True,
            )
            raise DatabaseError(
                message="Could not load the note. Please try again.",
                context={"owner_id": owner_id, "page": page, "error_type": type(e).__name__},
            ) from e

        return content if content is not None else ""

    async def count_for(self, db: AsyncSession, owner_id: int) -> int:
        """Total rows ever saved by owner_id, history included."""
        try:
            result = await db.execute(
                select(func.count(Note.id)).where(Note.owner_id == owner_id)
            )
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting notes (owner=%s): %s", owner_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not count notes. Please try again.",
                context={"owner_id": owner_id, "error_type": type(e).__name__},
            ) from e
