"""
Domain subpackage for the habits feature.
"""

from .models import Habit, HabitCompletion, HabitWithStreak, TodaysSummary, ToggleResult

__all__ = ["Habit", "HabitCompletion", "HabitWithStreak", "TodaysSummary", "ToggleResult"]
