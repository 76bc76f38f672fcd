"""
Domain model for captured thoughts.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Thought:
    id: str
    content: str
    project_id: str | None
    tags: list[str] | None
    is_pinned: bool
    is_archived: bool
    due_date: datetime | None  # parsed from content when the thought is captured
    due_date_text: str | None
    created_at: datetime
    updated_at: datetime
