# lifeos/models/api/habit_response.py
"""
Habit API response models.
"""

from datetime import date, datetime

from pydantic import BaseModel

from lifeos.features.habits.domain import Habit, HabitCompletion, HabitWithStreak
from lifeos.features.habits.streaks import (
    StreakData,
    format_streak,
    get_streak_intensity,
    get_streak_milestone,
)


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_completed_date: str | None
    is_completed_today: bool
    is_streak_at_risk: bool
    display: str
    intensity: int
    milestone: int | None
    next_milestone: int

    @classmethod
    def from_domain(cls, streak: StreakData) -> "StreakResponse":
        milestone = get_streak_milestone(streak.current_streak)
        return cls(
            **streak.to_dict(),
            display=format_streak(streak.current_streak),
            intensity=get_streak_intensity(streak.current_streak),
            milestone=milestone.milestone,
            next_milestone=milestone.next_milestone,
        )


class HabitResponse(BaseModel):
    id: str
    name: str
    description: str | None
    icon: str
    color: str
    sort_order: int
    is_archived: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, habit: Habit) -> "HabitResponse":
        return cls(
            id=habit.id,
            name=habit.name,
            description=habit.description,
            icon=habit.icon,
            color=habit.color,
            sort_order=habit.sort_order,
            is_archived=habit.is_archived,
            created_at=habit.created_at,
            updated_at=habit.updated_at,
        )


class CompletionResponse(BaseModel):
    id: str
    habit_id: str
    completed_date: date

    @classmethod
    def from_domain(cls, completion: HabitCompletion) -> "CompletionResponse":
        return cls(
            id=completion.id,
            habit_id=completion.habit_id,
            completed_date=completion.completed_date,
        )


class HabitWithStreakResponse(HabitResponse):
    streak: StreakResponse
    completed_dates: list[date]

    @classmethod
    def from_result(cls, result: HabitWithStreak) -> "HabitWithStreakResponse":
        base = HabitResponse.from_domain(result.habit)
        return cls(
            **base.model_dump(),
            streak=StreakResponse.from_domain(result.streak),
            completed_dates=[c.completed_date for c in result.completions],
        )


class ToggleCompletionResponse(BaseModel):
    habit_id: str
    completed: bool
    streak: StreakResponse


class TodaysSummaryResponse(BaseModel):
    completed: int
    total: int
    habits: list[HabitWithStreakResponse]
