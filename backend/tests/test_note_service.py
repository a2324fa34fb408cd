"""
PageNotes Backend — Note Store Tests
======================================

What:  NoteService against a real (SQLite) database; failure paths with a
       mock session.

What we test:
    ✅ latest() returns "" for a page never saved
    ✅ save then latest round trip; second save wins
    ✅ saves are appended, never overwritten (history kept)
    ✅ owners are isolated from each other
    ✅ equal timestamps are broken by insert order
    ✅ count_for counts every save of the owner only
    ✅ store failures become DatabaseError
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from pagenotes.exceptions import DatabaseError
from pagenotes.models.note import Note
from pagenotes.models.user import User
from pagenotes.services.note_service import NoteService


@pytest.fixture
def notes():
    return NoteService()


async def _make_user(db, username: str) -> int:
    user = User(username=username, password_hash="x")
    db.add(user)
    await db.commit()
    return user.id


class TestLatest:

    @pytest.mark.asyncio
    async def test_unsaved_page_is_empty_string(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        assert await notes.latest(db_session, alice, 3) == ""

    @pytest.mark.asyncio
    async def test_save_then_latest(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 5, "hello")
        assert await notes.latest(db_session, alice, 5) == "hello"

    @pytest.mark.asyncio
    async def test_latest_write_wins(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 5, "hello")
        await notes.save(db_session, alice, 5, "world")
        assert await notes.latest(db_session, alice, 5) == "world"

    @pytest.mark.asyncio
    async def test_empty_content_is_a_valid_latest(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 1, "draft")
        await notes.save(db_session, alice, 1, "")
        assert await notes.latest(db_session, alice, 1) == ""

    @pytest.mark.asyncio
    async def test_pages_are_independent(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 1, "one")
        await notes.save(db_session, alice, 2, "two")
        assert await notes.latest(db_session, alice, 1) == "one"
        assert await notes.latest(db_session, alice, 2) == "two"

    @pytest.mark.asyncio
    async def test_owners_are_isolated(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        bob = await _make_user(db_session, "bob")
        await notes.save(db_session, alice, 5, "alice's secret")

        assert await notes.latest(db_session, bob, 5) == ""

    @pytest.mark.asyncio
    async def test_timestamp_tie_resolves_to_later_insert(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        same_instant = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        db_session.add_all([
            Note(owner_id=alice, page=9, content="first", created_at=same_instant),
            Note(owner_id=alice, page=9, content="second", created_at=same_instant),
        ])
        await db_session.commit()

        assert await notes.latest(db_session, alice, 9) == "second"

    @pytest.mark.asyncio
    async def test_page_is_stored_as_given(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 0, "zero")
        await notes.save(db_session, alice, 10_000, "far away")
        assert await notes.latest(db_session, alice, 0) == "zero"
        assert await notes.latest(db_session, alice, 10_000) == "far away"


class TestAppendOnly:

    @pytest.mark.asyncio
    async def test_saves_keep_history(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        await notes.save(db_session, alice, 5, "hello")
        await notes.save(db_session, alice, 5, "world")

        rows = (await db_session.execute(
            select(Note.content).where(Note.owner_id == alice, Note.page == 5).order_by(Note.id)
        )).scalars().all()
        assert rows == ["hello", "world"]


class TestCountFor:

    @pytest.mark.asyncio
    async def test_count_starts_at_zero(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        assert await notes.count_for(db_session, alice) == 0

    @pytest.mark.asyncio
    async def test_count_increments_per_save_and_ignores_others(self, notes, db_session):
        alice = await _make_user(db_session, "alice")
        bob = await _make_user(db_session, "bob")

        for expected, page in enumerate([1, 1, 2], start=1):
            await notes.save(db_session, alice, page, f"v{expected}")
            assert await notes.count_for(db_session, alice) == expected

        await notes.save(db_session, bob, 1, "bob's")
        assert await notes.count_for(db_session, alice) == 3
        assert await notes.count_for(db_session, bob) == 1


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_save_failure(self, notes, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        with pytest.raises(DatabaseError) as exc_info:
            await notes.save(mock_db_session, 1, 5, "hello")

        assert "db down" not in exc_info.value.message
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_latest_failure(self, notes, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        with pytest.raises(DatabaseError):
            await notes.latest(mock_db_session, 1, 5)

    @pytest.mark.asyncio
    async def test_count_failure(self, notes, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        with pytest.raises(DatabaseError):
            await notes.count_for(mock_db_session, 1)
