"""
PageNotes Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error the API can report.
Why:   Services raise domain errors; global handlers (main.py) turn them into
       HTTP responses with the right status code and a consistent JSON body.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged server-side but never returned to the client.

Exception Hierarchy:
    PageNotesError (base)
    ├── ValidationError              → 400 Bad Request
    ├── ConflictError                → 409 Conflict
    │   └── DuplicateUsernameError
    ├── UnauthenticatedError         → 401 Unauthorized
    │   ├── MissingTokenError
    │   ├── MalformedTokenError
    │   ├── InvalidTokenError
    │   └── InvalidCredentialsError
    └── DatabaseError                → 500 Internal Server Error

Information leakage:
    InvalidTokenError has a single message for bad signatures, truncated
    tokens and expired tokens. InvalidCredentialsError has a single message
    for unknown usernames and wrong passwords.
"""

from typing import Any, Dict, Optional


class PageNotesError(Exception):
    """
    Base exception for all PageNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PageNotesError):
    """
    Raised when client input fails validation.

    When:    Missing username/password on registration, blank fields.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConflictError(PageNotesError):
    """The request collides with existing state. HTTP 409."""


class DuplicateUsernameError(ConflictError):
    """
    Raised when registering a username that already exists.

    Detected from the database unique constraint, so two racing
    registrations for the same name produce exactly one user.
    """

    def __init__(self, username: str):
        super().__init__(
            message="Username already exists",
            context={"username": username},
        )
        self.username = username


class UnauthenticatedError(PageNotesError):
    """
    Base for every 401 outcome.

    Attributes:
        error_code: Machine-readable code placed in the response body.
        reason:     Specific cause, logged server-side only.
    """

    error_code = "unauthenticated"
    reason = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MissingTokenError(UnauthenticatedError):
    """No Authorization header on a protected request."""

    reason = "missing"

    def __init__(self):
        super().__init__(message="Authorization header missing")


class MalformedTokenError(UnauthenticatedError):
    """Authorization header present but not 'Bearer <token>'."""

    reason = "malformed"

    def __init__(self):
        super().__init__(message="Authorization header must be 'Bearer <token>'")


class InvalidTokenError(UnauthenticatedError):
    """
    Token failed verification.

    Covers bad signature, malformed or truncated token, expired token and
    unusable claims. The cause goes into context for logging only.
    """

    reason = "invalid"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid or expired token", context=context)


class InvalidCredentialsError(UnauthenticatedError):
    """Login failed. Identical for unknown usernames and wrong passwords."""

    error_code = "invalid_credentials"
    reason = "bad_credentials"

    def __init__(self):
        super().__init__(message="Invalid username or password")


class DatabaseError(PageNotesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Details (SQL,
    constraint names, driver errors) go into context and the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
