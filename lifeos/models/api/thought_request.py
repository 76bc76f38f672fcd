# lifeos/models/api/thought_request.py
"""
Thought API request models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateThoughtRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000, description="Free text, may mention a due date")
    project_id: str | None = None
    tags: list[str] | None = None


class PinThoughtRequest(BaseModel):
    is_pinned: bool = True


class AssignProjectRequest(BaseModel):
    project_id: str | None = Field(None, description="Null removes the thought from its project")


class ExtractDatesRequest(BaseModel):
    text: str = Field(..., max_length=5000)
    now: datetime | None = Field(None, description="Reference instant (default: now)")


class UpdateDueDateRequest(BaseModel):
    due_date: datetime | None = Field(..., description="Null clears the due date")
    due_date_text: str | None = Field(None, max_length=200, description="Phrase shown for the date")
