"""
PageNotes Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Who:   Written by CredentialService.create_user, read by login.

Table Design:
    - id: autoincrement integer, immutable
    - username: UNIQUE, case-sensitive, never renamed. The unique constraint
      is what makes concurrent registrations of the same name safe.
    - password_hash: bcrypt hash string (salt and cost are embedded in it)
    - created_at: UTC
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from pagenotes.database import Base


class User(Base):
    """A registered account. Owns its notes; no cascading delete."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Login name, case-sensitive, unique",
    )

    # Plaintext passwords are never stored
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted one-way password hash",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
