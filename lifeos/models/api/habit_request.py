# lifeos/models/api/habit_request.py
"""
Habit API request models.
"""

import datetime as dt

from pydantic import BaseModel, Field


class CreateHabitRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Habit name")
    description: str | None = Field(default=None, max_length=500)
    icon: str = Field(default="check", max_length=50)
    color: str = Field(default="#d4a574", pattern=r"^#[0-9a-fA-F]{6}$")


class UpdateHabitRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")


class ToggleCompletionRequest(BaseModel):
    """Day to toggle; validated as a real calendar date before any streak math."""

    date: dt.date | None = Field(default=None, description="YYYY-MM-DD (default: today)")


class ReorderHabitsRequest(BaseModel):
    ordered_ids: list[str] = Field(..., min_length=1)
