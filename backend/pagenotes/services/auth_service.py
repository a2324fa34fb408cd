"""
PageNotes Backend — Account Service (register / login)
========================================================

What:  Composes the credential store and the token service into the two
       unauthenticated operations of the API.
Who:   Called by the /auth route handlers.

Flows:
    register: validate → create_user → issue token
    login:    find_by_username → verify_password → issue token

Enumeration resistance:
    login raises the same InvalidCredentialsError for an unknown username
    and for a wrong password, and spends one hash verification in both
    cases.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pagenotes.exceptions import InvalidCredentialsError, ValidationError
from pagenotes.schemas.auth import TokenResponse
from pagenotes.services.credential_service import CredentialService
from pagenotes.services.security import MAX_PASSWORD_BYTES
from pagenotes.services.token_service import TokenService

logger = logging.getLogger(__name__)


def _too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


class AuthService:
    """
    Args:
        credentials: User persistence and password checks.
        tokens:      Token issuance.
    """

    def __init__(self, credentials: CredentialService, tokens: TokenService):
        self.credentials = credentials
        self.tokens = tokens

    async def register(self, db: AsyncSession, username: str, password: str) -> TokenResponse:
        """
        Create an account and sign the new user in.

        Raises:
            ValidationError: username or password empty, or password longer
                than MAX_PASSWORD_BYTES (→ 400)
            DuplicateUsernameError: username taken (→ 409)
            DatabaseError: store failure (→ 500)
        """
        missing = []
        if not username or not username.strip():
            missing.append("username")
        if not password:
            missing.append("password")
        if missing:
            raise ValidationError(
                message="Username and password are required",
                context={"missing": missing},
            )
        if _too_long(password):
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

        user = await self.credentials.create_user(db, username, password)
        token = self.tokens.issue(user.id)
        return TokenResponse(token=token, username=user.username)

    async def login(self, db: AsyncSession, username: str, password: str) -> TokenResponse:
        """
        Exchange username/password for a token.

        Raises:
            InvalidCredentialsError: unknown user or wrong password (→ 401)
            DatabaseError: store failure (→ 500)
        """
        # Registration never accepts passwords past the bcrypt limit
        if username and not _too_long(password or ""):
            user = await self.credentials.find_by_username(db, username)
        else:
            user = None

        if user is None:
            await self.credentials.burn_verification(password or "")
            logger.info("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        if not await self.credentials.verify_password(user, password or ""):
            logger.info("Login failed: invalid credentials (user id=%s)", user.id)
            raise InvalidCredentialsError()

        logger.info("Login succeeded: user id=%s", user.id)
        return TokenResponse(token=self.tokens.issue(user.id), username=user.username)
