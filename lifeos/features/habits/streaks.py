"""
Habit streak calculation over "YYYY-MM-DD" completion dates.

A streak counts consecutive calendar days with a completion. It stays
alive through today as long as yesterday was completed, so a habit not yet
done today still shows its streak (flagged as at risk).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

MILESTONES = (7, 14, 30, 60, 90, 100, 180, 365)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class StreakData:
    current_streak: int
    longest_streak: int
    last_completed_date: str | None
    is_completed_today: bool
    is_streak_at_risk: bool

    def to_dict(self) -> dict:
        return asdict(self)


EMPTY_STREAK = StreakData(
    current_streak=0,
    longest_streak=0,
    last_completed_date=None,
    is_completed_today=False,
    is_streak_at_risk=False,
)


@dataclass(frozen=True, slots=True)
class StreakMilestone:
    milestone: int | None
    next_milestone: int


def _local_today() -> date:
    return datetime.now().astimezone().date()


def calculate_streak(completion_dates: Iterable[str], today: date | None = None) -> StreakData:
    """
    Calculate current and longest streaks.

    Args:
        completion_dates: ISO "YYYY-MM-DD" strings in any order; duplicates allowed
        today: The evaluator's local date. Defaults to the host's local date.

    Returns:
        StreakData for the habit
    """
    # ISO dates sort chronologically as strings
    sorted_dates = sorted(set(completion_dates), reverse=True)
    if not sorted_dates:
        return EMPTY_STREAK

    if today is None:
        today = _local_today()
    today_str = today.isoformat()
    yesterday_str = (today - _ONE_DAY).isoformat()

    most_recent = sorted_dates[0]
    is_completed_today = most_recent == today_str

    current_streak = 0
    if most_recent in (today_str, yesterday_str):
        expected = today if is_completed_today else today - _ONE_DAY
        for date_str in sorted_dates:
            day = date.fromisoformat(date_str)
            if day == expected:
                current_streak += 1
                expected -= _ONE_DAY
            elif day < expected:
                break

    longest_streak = 1
    run = 1
    previous = date.fromisoformat(sorted_dates[0])
    for date_str in sorted_dates[1:]:
        day = date.fromisoformat(date_str)
        if (previous - day).days == 1:
            run += 1
        else:
            longest_streak = max(longest_streak, run)
            run = 1
        previous = day
    longest_streak = max(longest_streak, run)

    is_streak_at_risk = not is_completed_today and most_recent == yesterday_str and current_streak > 0

    return StreakData(
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_completed_date=most_recent,
        is_completed_today=is_completed_today,
        is_streak_at_risk=is_streak_at_risk,
    )


def format_streak(streak: int) -> str:
    if streak == 0:
        return "No streak"
    if streak == 1:
        return "1 day"
    return f"{streak} days"


def get_streak_milestone(streak: int) -> StreakMilestone:
    """Most recent milestone reached and the one after it."""
    milestone = None
    next_milestone = MILESTONES[0]

    for index, value in enumerate(MILESTONES):
        if streak < value:
            next_milestone = value
            break
        milestone = value
        if index + 1 < len(MILESTONES):
            next_milestone = MILESTONES[index + 1]
        else:
            next_milestone = value * 2

    return StreakMilestone(milestone=milestone, next_milestone=next_milestone)


def get_streak_intensity(streak: int) -> int:
    """
    Intensity level for color coding.
    0 = no streak, 1 = starting (1-7), 2 = building (8-30), 3 = strong (31+)
    """
    if streak <= 0:
        return 0
    if streak <= 7:
        return 1
    if streak <= 30:
        return 2
    return 3


def today_string(today: date | None = None) -> str:
    return (today or _local_today()).isoformat()


def is_today_string(date_str: str, today: date | None = None) -> bool:
    return date_str == today_string(today)
