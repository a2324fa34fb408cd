"""
PageNotes Backend — Auth Request/Response Schemas
===================================================

What:  Bodies for POST /auth/register and POST /auth/login.

Field rules:
    Both fields must be present strings (FastAPI → 400 otherwise). Emptiness
    is checked by AuthService, so "" and a missing field both come back as
    400 validation errors. Usernames are case-sensitive and stored exactly
    as sent. Passwords longer than 72 UTF-8 bytes (the bcrypt limit) are
    rejected by AuthService with 400; max_length only bounds the body.
"""

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Username/password pair sent to register and login."""
    username: str = Field(max_length=64, description="Account name (case-sensitive)")
    password: str = Field(max_length=256, description="Plaintext password, sent over TLS")


class TokenResponse(BaseModel):
    """
    What:  Returned by register (201) and login (200).
    Usage: Client stores token and sends 'Authorization: Bearer <token>'.
    """
    token: str = Field(description="Signed bearer token")
    username: str = Field(description="The authenticated account name")
