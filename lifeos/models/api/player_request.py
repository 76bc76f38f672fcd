# lifeos/models/api/player_request.py
"""
Player Menu API request models.
Used by routes for input validation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from lifeos.features.player.domain import InteractionType


class CreateContactRequest(BaseModel):
    """Request for adding a contact to the Player Menu."""

    name: str = Field(..., min_length=1, max_length=200, description="Contact name")
    title: str | None = Field(default=None, max_length=200, description="Role or title")
    source: str = Field(default="manual", max_length=50, description="Where the contact came from")
    first_met_context: str | None = Field(
        default=None, max_length=1000, description="How and where you met"
    )
    metadata: dict[str, Any] | None = Field(default=None, description="Free-form attributes")


class UpdateContactRequest(BaseModel):
    """Partial update of a contact; omitted fields are left alone."""

    name: str | None = Field(None, min_length=1, max_length=200)
    title: str | None = Field(None, max_length=200)
    first_met_context: str | None = Field(None, max_length=1000)
    metadata: dict[str, Any] | None = None
    is_archived: bool | None = None


class LogInteractionRequest(BaseModel):
    """Request for logging an interaction with a contact."""

    type: InteractionType = Field(..., description="Kind of interaction")
    occurred_at: datetime | None = Field(default=None, description="When it happened (default: now)")
    duration_minutes: int | None = Field(default=None, ge=0, le=24 * 60)
    summary: str | None = Field(default=None, max_length=2000)
    topics: list[str] | None = None
    sentiment: str | None = Field(default=None, max_length=50)
    follow_up_needed: bool = False
    follow_up_note: str | None = Field(default=None, max_length=1000)
    location: str | None = Field(default=None, max_length=200)


class UpdateInteractionRequest(BaseModel):
    """Edit the descriptive fields of an interaction. Timing is immutable."""

    summary: str | None = Field(None, max_length=2000)
    topics: list[str] | None = None
    sentiment: str | None = Field(None, max_length=50)
    follow_up_needed: bool | None = None
    follow_up_note: str | None = Field(None, max_length=1000)


class CreateNoteRequest(BaseModel):
    """A hand-written journal note."""

    content: str = Field(..., min_length=1, max_length=5000)
