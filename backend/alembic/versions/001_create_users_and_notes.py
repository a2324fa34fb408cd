"""Create users and notes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Accounts table plus the owner-scoped, append-only notes table.
Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "username",
            sa.String(64),
            nullable=False,
            comment="Login name, case-sensitive, unique",
        ),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="Salted one-way password hash",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        # Concurrent registrations of one name: the database picks the winner
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Free-text page content",
        ),
        sa.Column(
            "page",
            sa.Integer(),
            nullable=False,
            comment="Logical page slot; one row per save",
        ),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("users.id"),
            nullable=False,
            comment="Owning user",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this revision was saved (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Latest note for (owner, page): one index seek
    op.create_index(
        "idx_notes_owner_page_latest",
        "notes",
        ["owner_id", "page", sa.text("created_at DESC"), sa.text("id DESC")],
    )
    op.create_index("idx_notes_owner", "notes", ["owner_id"])


def downgrade() -> None:
    op.drop_index("idx_notes_owner", table_name="notes")
    op.drop_index("idx_notes_owner_page_latest", table_name="notes")
    op.drop_table("notes")
    op.drop_table("users")
