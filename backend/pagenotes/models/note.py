"""
PageNotes Backend — Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table.
Why:   Every save on a page appends one row; the newest row per
       (owner_id, page) is the page's current content.

Table Design Rationale:
    - id: autoincrement integer; also the tie-break when two rows share
      created_at (the later insert has the larger id)
    - content: TEXT, may be empty
    - page: plain integer slot, deliberately NOT unique
    - owner_id: NOT NULL foreign key to users.id
    - created_at: UTC, primary ordering key

    Index on (owner_id, page, created_at DESC, id DESC):
        Serves "latest note for this page" with one index seek.
    Index on owner_id:
        Serves COUNT(*) per owner for /stats.

Lifecycle:
    Append-only. Rows are never updated or deleted.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from pagenotes.database import Base


class Note(Base):
    """
    One saved revision of one page for one user.

    Query Patterns:
        - Latest for page: WHERE owner_id = :u AND page = :p
          ORDER BY created_at DESC, id DESC LIMIT 1
        - Count for owner: SELECT COUNT(id) WHERE owner_id = :u
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Free-text page content",
    )

    page: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Logical page slot; one row per save",
    )

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Owning user",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this revision was saved (UTC)",
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, owner_id={self.owner_id}, page={self.page}, "
            f"created_at='{self.created_at}')>"
        )


# Latest-note lookup and per-owner count
Index(
    "idx_notes_owner_page_latest",
    Note.owner_id,
    Note.page,
    Note.created_at.desc(),
    Note.id.desc(),
)
Index("idx_notes_owner", Note.owner_id)
