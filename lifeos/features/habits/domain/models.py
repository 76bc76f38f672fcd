"""
Domain models for habits.

A habit carries identity and display fields only; all streak state is
derived from its completion rows at read time.
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from lifeos.features.habits.streaks import StreakData


@dataclass(slots=True)
class Habit:
    id: str
    name: str
    description: str | None
    icon: str
    color: str
    sort_order: int
    is_archived: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class HabitCompletion:
    """One row per day a habit was marked done."""

    id: str
    habit_id: str
    completed_date: date
    created_at: datetime


@dataclass(slots=True)
class HabitWithStreak:
    habit: Habit
    streak: StreakData
    completions: list[HabitCompletion] = field(default_factory=list)


@dataclass(slots=True)
class ToggleResult:
    completed: bool
    streak: StreakData


@dataclass(slots=True)
class TodaysSummary:
    completed: int
    total: int
    habits: list[HabitWithStreak]
