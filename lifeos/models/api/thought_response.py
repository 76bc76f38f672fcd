# lifeos/models/api/thought_response.py
"""
Thought API response models.
"""

from datetime import datetime

from pydantic import BaseModel

from lifeos.features.thoughts.date_parser import ParsedDate, format_relative_date, is_overdue
from lifeos.features.thoughts.domain import Thought


class ThoughtResponse(BaseModel):
    id: str
    content: str
    project_id: str | None
    tags: list[str] | None
    is_pinned: bool
    is_archived: bool
    due_date: datetime | None
    due_date_text: str | None
    due_label: str | None = None
    is_overdue: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, thought: Thought, now: datetime | None = None) -> "ThoughtResponse":
        due_label = None
        overdue = False
        if thought.due_date is not None:
            due_label = format_relative_date(thought.due_date, now)
            overdue = is_overdue(thought.due_date, now)

        return cls(
            id=thought.id,
            content=thought.content,
            project_id=thought.project_id,
            tags=thought.tags,
            is_pinned=thought.is_pinned,
            is_archived=thought.is_archived,
            due_date=thought.due_date,
            due_date_text=thought.due_date_text,
            due_label=due_label,
            is_overdue=overdue,
            created_at=thought.created_at,
            updated_at=thought.updated_at,
        )


class ThoughtsListResponse(BaseModel):
    thoughts: list[ThoughtResponse]
    total: int


class ExtractedDateResponse(BaseModel):
    date: datetime
    original_text: str
    confidence: float

    @classmethod
    def from_domain(cls, parsed: ParsedDate) -> "ExtractedDateResponse":
        return cls(date=parsed.date, original_text=parsed.original_text, confidence=parsed.confidence)


class ExtractDatesResponse(BaseModel):
    dates: list[ExtractedDateResponse]
