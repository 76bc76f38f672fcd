"""
Habit service: CRUD plus streak evaluation over recent completions.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from lifeos.config import settings
from lifeos.features.habits.domain import (
    Habit,
    HabitCompletion,
    HabitWithStreak,
    TodaysSummary,
    ToggleResult,
)
from lifeos.features.habits.repository import HabitRepository
from lifeos.features.habits.streaks import calculate_streak
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.utils.clock import today_local

logger = get_logger(__name__)


class HabitServiceError(Exception):
    """Base exception for habit operations."""


class HabitNotFoundError(HabitServiceError):
    def __init__(self, habit_id: str):
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id


class InvalidHabitError(HabitServiceError):
    """Rejected habit input."""


class HabitService:
    async def list_habits_with_streaks(self, today: date | None = None) -> list[HabitWithStreak]:
        """Active habits in display order, each with its current streak."""
        habits = await HabitRepository.list_active()
        return await self._with_streaks(habits, today or today_local())

    async def get_habit_with_streak(
        self, habit_id: str, today: date | None = None
    ) -> HabitWithStreak:
        habit = await self._require(habit_id)
        [result] = await self._with_streaks([habit], today or today_local())
        return result

    async def create_habit(
        self,
        name: str,
        *,
        description: str | None = None,
        icon: str = "check",
        color: str = "#d4a574",
    ) -> Habit:
        name = (name or "").strip()
        if not name:
            raise InvalidHabitError("Name is required")
        return await HabitRepository.create(name, description=description, icon=icon, color=color)

    async def update_habit(self, habit_id: str, fields: dict[str, Any]) -> Habit:
        habit = await HabitRepository.update(habit_id, fields)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    async def archive_habit(self, habit_id: str) -> None:
        if not await HabitRepository.archive(habit_id):
            raise HabitNotFoundError(habit_id)

    async def delete_habit(self, habit_id: str) -> None:
        await self._require(habit_id)
        await HabitRepository.delete(habit_id)
        logger.info("Habit deleted", habit_id=habit_id)

    async def reorder_habits(self, ordered_ids: list[str]) -> None:
        await HabitRepository.reorder(ordered_ids)

    async def toggle_habit_completion(
        self, habit_id: str, completed_date: date | None = None, today: date | None = None
    ) -> ToggleResult:
        """
        Mark a day done, or undo it if it was already done.

        Args:
            habit_id: Habit to toggle
            completed_date: Day to toggle (default: today); past days backfill,
                future days are rejected
            today: Evaluation date for the returned streak (default: today)

        Returns:
            Whether the day is now completed, and the refreshed streak
        """
        today = today or today_local()
        completed_date = completed_date or today
        if completed_date > today:
            raise InvalidHabitError(
                f"Cannot complete a habit on a future date: {completed_date.isoformat()}"
            )
        await self._require(habit_id)

        if await HabitRepository.remove_completion(habit_id, completed_date):
            completed = False
        else:
            await HabitRepository.add_completion(habit_id, completed_date)
            completed = True

        [refreshed] = await self._with_streaks([await self._require(habit_id)], today)
        logger.info(
            "Habit completion toggled",
            habit_id=habit_id,
            completed_date=completed_date.isoformat(),
            completed=completed,
            current_streak=refreshed.streak.current_streak,
        )
        return ToggleResult(completed=completed, streak=refreshed.streak)

    async def list_completions_in_range(self, start: date, end: date) -> list[HabitCompletion]:
        if end < start:
            raise HabitServiceError("Range end is before its start")
        return await HabitRepository.list_completions_in_range(start, end)

    async def todays_summary(self, today: date | None = None) -> TodaysSummary:
        habits = await self.list_habits_with_streaks(today)
        completed = sum(1 for h in habits if h.streak.is_completed_today)
        return TodaysSummary(completed=completed, total=len(habits), habits=habits)

    async def _require(self, habit_id: str) -> Habit:
        habit = await HabitRepository.get(habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    async def _with_streaks(self, habits: list[Habit], today: date) -> list[HabitWithStreak]:
        since = today - timedelta(days=settings.HABIT_STREAK_LOOKBACK_DAYS)
        completions = await HabitRepository.list_completions([h.id for h in habits], since)

        results = []
        for habit in habits:
            rows = completions.get(habit.id, [])
            streak = calculate_streak((c.completed_date.isoformat() for c in rows), today)
            results.append(HabitWithStreak(habit=habit, streak=streak, completions=rows))
        return results


# Singleton instance for application use
habit_service = HabitService()
