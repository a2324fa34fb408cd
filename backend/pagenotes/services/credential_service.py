"""
PageNotes Backend — Credential Store
======================================

What:  Creates users, looks them up by username, and checks passwords.
Who:   Called by AuthService (register/login).

Uniqueness:
    No "check then insert". create_user inserts and commits; the UNIQUE
    constraint on users.username decides, and an IntegrityError becomes
    DuplicateUsernameError. Two concurrent registrations of one name yield
    one user and one 409.

Blocking work:
    bcrypt is deliberately slow (~50-100ms at cost 10). Hashing and
    verification run in a worker thread so the event loop keeps serving
    other requests.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagenotes.exceptions import DatabaseError, DuplicateUsernameError
from pagenotes.models.user import User
from pagenotes.services.security import Hasher

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Persistence of users and their password hashes.

    Args:
        hasher: Password hashing capability (BcryptHasher in production).
    """

    def __init__(self, hasher: Hasher):
        self.hasher = hasher
        self._dummy_hash: Optional[str] = None

    async def create_user(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Hash the password and persist a new user.

        Returns:
            The committed User (id assigned).

        Raises:
            DuplicateUsernameError: username already taken (→ 409)
            DatabaseError: any other store failure (→ 500)
        """
        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        user = User(username=username, password_hash=password_hash)

        try:
            db.add(user)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("Registration rejected: username already exists")
            raise DuplicateUsernameError(username)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating user: %s", e, exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User created: id=%s", user.id)
        return user

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup. None when no such user exists."""
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", e, exc_info=True)
            raise DatabaseError(
                message="Could not look up the account. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def verify_password(self, user: User, password: str) -> bool:
        """Check password against the user's stored hash."""
        return await asyncio.to_thread(self.hasher.verify, password, user.password_hash)

    async def burn_verification(self, password: str) -> None:
        """
        Run one verification against a throwaway hash.

        Used when the username does not exist, so a failed login costs the
        same time whether or not the account is real.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(self.hasher.hash, "pagenotes-dummy-password")
        await asyncio.to_thread(self.hasher.verify, password, self._dummy_hash)
