"""
Domain models for projects.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Project:
    id: str
    name: str
    description: str | None
    color: str
    icon: str
    sort_order: int
    is_archived: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class ProjectWithCount:
    project: Project
    thought_count: int  # unarchived thoughts only
