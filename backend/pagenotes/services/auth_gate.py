"""
PageNotes Backend — Auth Gate
===============================

What:  Turns a raw Authorization header into an authenticated user id.
Who:   Called by the require_user dependency (dependencies.py) before any
       protected route body runs. Never touches the note store.

Request states:
    Received → CredentialExtracted → TokenValid → Authorized
                       │                  │
                       └── Missing / Malformed / Invalid → Rejected (401)

Every rejection is an UnauthenticatedError subclass, so all of them become
the same 401 response shape; only the message differs between a missing
header, a malformed header and a bad token.
"""

from typing import Optional

from pagenotes.exceptions import MalformedTokenError, MissingTokenError
from pagenotes.services.token_service import TokenService

BEARER_SCHEME = "bearer"


class AuthGate:
    """Extracts the bearer token and resolves it through the TokenService."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    @staticmethod
    def extract_token(authorization: Optional[str]) -> str:
        """
        Pull the token out of 'Bearer <token>'.

        The scheme is matched case-insensitively; exactly one token must
        follow it.

        Raises:
            MissingTokenError: header absent or blank
            MalformedTokenError: wrong scheme, no token, or extra parts
        """
        if authorization is None or not authorization.strip():
            raise MissingTokenError()

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
            raise MalformedTokenError()
        return parts[1]

    def authenticate(self, authorization: Optional[str]) -> int:
        """
        Resolve the caller's user id from the Authorization header value.

        Raises:
            MissingTokenError, MalformedTokenError, InvalidTokenError
        """
        token = self.extract_token(authorization)
        return self.token_service.verify(token)
