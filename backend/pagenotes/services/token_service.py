"""
PageNotes Backend — Token Service
===================================

What:  Issues and verifies signed, time-limited identity tokens.
Who:   AuthService calls issue() after register/login; AuthGate calls
       verify() on every protected request.

Token format:
    JWT claims {"sub": "<user id>", "iat": <unix>, "exp": <unix>}.
    'sub' is a string because RFC 7519 defines it as one; verify()
    converts it back to int.

Statelessness:
    There is no revocation list. A token stays valid until 'exp'; logout is
    the client discarding it.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pagenotes.exceptions import InvalidTokenError
from pagenotes.services.security import TokenSigner

logger = logging.getLogger(__name__)

# Used only when JWT_SECRET is unset; resolve_signing_key() warns about it
DEV_SIGNING_KEY = "pagenotes-dev-signing-key-change-me"

DEFAULT_TOKEN_TTL = timedelta(days=7)


def resolve_signing_key(configured_secret: str) -> str:
    """
    What:  Returns the configured secret, or the development fallback.
    When:  Once, while the application is being constructed.
    Why:   A missing secret must never be replaced silently.
    """
    if configured_secret:
        return configured_secret
    logger.warning(
        "JWT_SECRET is not set; signing tokens with the built-in development key. "
        "Tokens are forgeable by anyone who knows this key. Set JWT_SECRET in production."
    )
    return DEV_SIGNING_KEY


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issue/verify wrapper around a TokenSigner.

    Args:
        signer: Signs and checks claim sets (JoseTokenSigner in production).
        ttl:    Lifetime of issued tokens.
        clock:  Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        signer: TokenSigner,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.signer = signer
        self.ttl = ttl
        self._clock = clock or _utcnow

    def issue(self, user_id: int) -> str:
        """Signed token for user_id, expiring ttl from now."""
        issued_at = self._clock()
        expires_at = issued_at + self.ttl
        claims = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return self.signer.encode(claims)

    def verify(self, token: str) -> int:
        """
        Resolve a token to the user id it was issued for.

        Raises:
            InvalidTokenError: bad signature, malformed/truncated token,
                expired, or a subject that is not a positive integer. The
                error is the same in every case.
        """
        if not token:
            raise InvalidTokenError(context={"cause": "empty"})

        claims = self.signer.decode(token)

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject.isdigit():
            raise InvalidTokenError(context={"cause": "bad_subject"})
        user_id = int(subject)
        if user_id <= 0:
            raise InvalidTokenError(context={"cause": "bad_subject"})
        return user_id
