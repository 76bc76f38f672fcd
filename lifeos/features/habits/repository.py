"""
Persistence for habits and their daily completions.
"""

from collections import defaultdict
from datetime import date
from typing import Any

from psycopg import sql

from lifeos.db.helpers import (
    execute_query,
    execute_transaction,
    fetch_all,
    fetch_one,
    with_db_retry,
)
from lifeos.features.habits.domain import Habit, HabitCompletion
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class HabitRepository:
    """SQL for the habits and habit_completions tables."""

    HABIT_COLUMNS = """
        id, name, description, icon, color, sort_order, is_archived, created_at, updated_at
    """
    COMPLETION_COLUMNS = "id, habit_id, completed_date, created_at"

    UPDATABLE_FIELDS = ("name", "description", "icon", "color")

    @classmethod
    def _row_to_habit(cls, row: dict | None) -> Habit | None:
        if not row:
            return None

        return Habit(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description"),
            icon=row.get("icon") or "check",
            color=row.get("color") or "#d4a574",
            sort_order=row.get("sort_order") or 0,
            is_archived=bool(row.get("is_archived")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    def _row_to_completion(cls, row: dict) -> HabitCompletion:
        return HabitCompletion(
            id=str(row["id"]),
            habit_id=str(row["habit_id"]),
            completed_date=row["completed_date"],
            created_at=row["created_at"],
        )

    # Habits

    @classmethod
    @with_db_retry()
    async def list_active(cls) -> list[Habit]:
        query = f"""
            SELECT {cls.HABIT_COLUMNS}
            FROM habits
            WHERE is_archived = false
            ORDER BY sort_order ASC, created_at DESC
        """
        rows = await fetch_all(query)
        return [cls._row_to_habit(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def get(cls, habit_id: str) -> Habit | None:
        query = f"SELECT {cls.HABIT_COLUMNS} FROM habits WHERE id = %s"
        return cls._row_to_habit(await fetch_one(query, (habit_id,)))

    @classmethod
    async def create(
        cls,
        name: str,
        *,
        description: str | None = None,
        icon: str = "check",
        color: str = "#d4a574",
    ) -> Habit:
        """Insert a habit at the end of the current ordering."""
        query = f"""
            INSERT INTO habits (name, description, icon, color, sort_order)
            VALUES (
                %s, %s, %s, %s,
                (SELECT COALESCE(MAX(sort_order), -1) + 1 FROM habits)
            )
            RETURNING {cls.HABIT_COLUMNS}
        """
        row = await fetch_one(query, (name, description, icon, color))
        logger.info("Habit created", habit_id=str(row["id"]))
        return cls._row_to_habit(row)

    @classmethod
    async def update(cls, habit_id: str, fields: dict[str, Any]) -> Habit | None:
        unknown = set(fields) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update habit fields: {sorted(unknown)}")
        if not fields:
            return await cls.get(habit_id)

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        ]
        query = sql.SQL(
            "UPDATE habits SET {}, updated_at = NOW() WHERE id = %s RETURNING {}"
        ).format(sql.SQL(", ").join(assignments), sql.SQL(cls.HABIT_COLUMNS))
        row = await fetch_one(query, (*fields.values(), habit_id))
        return cls._row_to_habit(row)

    @classmethod
    async def archive(cls, habit_id: str) -> bool:
        query = "UPDATE habits SET is_archived = true, updated_at = NOW() WHERE id = %s"
        return await execute_query(query, (habit_id,)) > 0

    @classmethod
    async def delete(cls, habit_id: str) -> None:
        """Hard delete: completions first, then the habit."""
        await execute_transaction(
            [
                ("DELETE FROM habit_completions WHERE habit_id = %s", (habit_id,)),
                ("DELETE FROM habits WHERE id = %s", (habit_id,)),
            ]
        )

    @classmethod
    async def reorder(cls, ordered_ids: list[str]) -> None:
        await execute_transaction(
            [
                ("UPDATE habits SET sort_order = %s WHERE id = %s", (index, habit_id))
                for index, habit_id in enumerate(ordered_ids)
            ]
        )

    # Completions

    @classmethod
    @with_db_retry()
    async def list_completions(
        cls, habit_ids: list[str], since: date
    ) -> dict[str, list[HabitCompletion]]:
        """Completions on or after ``since`` for each habit, newest first."""
        if not habit_ids:
            return {}

        query = f"""
            SELECT {cls.COMPLETION_COLUMNS}
            FROM habit_completions
            WHERE habit_id = ANY(%s) AND completed_date >= %s
            ORDER BY completed_date DESC
        """
        rows = await fetch_all(query, (habit_ids, since))

        by_habit: dict[str, list[HabitCompletion]] = defaultdict(list)
        for row in rows:
            completion = cls._row_to_completion(row)
            by_habit[completion.habit_id].append(completion)
        return {habit_id: by_habit.get(habit_id, []) for habit_id in habit_ids}

    @classmethod
    @with_db_retry()
    async def list_completions_in_range(cls, start: date, end: date) -> list[HabitCompletion]:
        query = f"""
            SELECT {cls.COMPLETION_COLUMNS}
            FROM habit_completions
            WHERE completed_date BETWEEN %s AND %s
            ORDER BY completed_date ASC
        """
        rows = await fetch_all(query, (start, end))
        return [cls._row_to_completion(row) for row in rows]

    @classmethod
    async def add_completion(cls, habit_id: str, completed_date: date) -> bool:
        """Record a completion; returns False if that day was already recorded."""
        query = """
            INSERT INTO habit_completions (habit_id, completed_date)
            VALUES (%s, %s)
            ON CONFLICT (habit_id, completed_date) DO NOTHING
        """
        return await execute_query(query, (habit_id, completed_date)) > 0

    @classmethod
    async def remove_completion(cls, habit_id: str, completed_date: date) -> bool:
        query = "DELETE FROM habit_completions WHERE habit_id = %s AND completed_date = %s"
        return await execute_query(query, (habit_id, completed_date)) > 0
