"""
PageNotes Backend — Note, Stats & Shared Response Schemas
===========================================================

What:  Pydantic models defining the API contract with the notebook UI.
Why:   Request validation, response serialization and OpenAPI docs.

Design Decision:
    Schemas are separate from SQLAlchemy models: the API never exposes
    owner_id, note ids or timestamps, only what the UI needs.
"""

from typing import Optional

from pydantic import BaseModel, Field

# notes.page is a 32-bit INTEGER column
PAGE_MIN = -(2**31)
PAGE_MAX = 2**31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    What:  Body of POST /notes.
    Why:   content may be empty (a cleared page is a valid save); page is any
           integer the UI uses as a slot number, within the column's range.
    """
    content: str = Field(description="Page text; may be empty")
    page: int = Field(ge=PAGE_MIN, le=PAGE_MAX, description="Page number the text belongs to")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteSavedResponse(BaseModel):
    """Returned by POST /notes with HTTP 201."""
    message: str = Field(default="Note saved", description="Human-readable confirmation")


class NoteContentResponse(BaseModel):
    """
    What:  Returned by GET /notes/{page}.
    Why:   content is "" for a page the caller never saved; the UI renders an
           empty page instead of handling a 404.
    """
    content: str = Field(description="Latest saved text for the page, or empty")


class StatsResponse(BaseModel):
    """Returned by GET /stats: every note the caller ever saved, history included."""
    count: int = Field(ge=0, description="Total saved notes for the caller")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "unauthenticated",
            "message": "Invalid or expired token",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Returned by GET /health for container and load balancer probes.
    Why:   The service is useless without its database, so the probe checks it.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
