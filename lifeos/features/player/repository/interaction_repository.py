"""
Persistence for logged interactions.
"""

from datetime import datetime
from typing import Any

import psycopg
from psycopg import sql

from lifeos.db.helpers import execute_query, fetch_all, fetch_one, with_db_retry
from lifeos.features.player.domain import Interaction, InteractionType
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class InteractionRepository:
    """SQL for the interactions table."""

    SELECT_COLUMNS = """
        id, contact_id, type, occurred_at, duration_minutes, summary, topics,
        sentiment, follow_up_needed, follow_up_note, location, created_at
    """

    # occurred_at and duration_minutes feed the tier score and stay immutable
    UPDATABLE_FIELDS = ("summary", "topics", "sentiment", "follow_up_needed", "follow_up_note")

    @classmethod
    def _row_to_interaction(cls, row: dict | None) -> Interaction | None:
        if not row:
            return None

        return Interaction(
            id=str(row["id"]),
            contact_id=str(row["contact_id"]),
            type=InteractionType(row["type"]),
            occurred_at=row["occurred_at"],
            duration_minutes=row.get("duration_minutes"),
            summary=row.get("summary"),
            topics=row.get("topics"),
            sentiment=row.get("sentiment"),
            follow_up_needed=bool(row.get("follow_up_needed")),
            follow_up_note=row.get("follow_up_note"),
            location=row.get("location"),
            created_at=row["created_at"],
        )

    @classmethod
    async def create(
        cls,
        contact_id: str,
        interaction_type: InteractionType,
        occurred_at: datetime,
        *,
        duration_minutes: int | None = None,
        summary: str | None = None,
        topics: list[str] | None = None,
        sentiment: str | None = None,
        follow_up_needed: bool = False,
        follow_up_note: str | None = None,
        location: str | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> Interaction:
        query = f"""
            INSERT INTO interactions (
                contact_id, type, occurred_at, duration_minutes, summary, topics,
                sentiment, follow_up_needed, follow_up_note, location
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(
            query,
            (
                contact_id,
                InteractionType(interaction_type).value,
                occurred_at,
                duration_minutes,
                summary,
                topics,
                sentiment,
                follow_up_needed,
                follow_up_note,
                location,
            ),
            connection=connection,
        )
        return cls._row_to_interaction(row)

    @classmethod
    @with_db_retry()
    async def get(
        cls, interaction_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> Interaction | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM interactions WHERE id = %s"
        row = await fetch_one(query, (interaction_id,), connection=connection)
        return cls._row_to_interaction(row)

    @classmethod
    @with_db_retry()
    async def list_for_contact(
        cls,
        contact_id: str,
        limit: int | None = None,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> list[Interaction]:
        """Interactions for one contact, newest first; no limit returns the full history."""
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM interactions
            WHERE contact_id = %s
            ORDER BY occurred_at DESC
        """
        params: tuple = (contact_id,)
        if limit is not None:
            query += " LIMIT %s"
            params = (contact_id, limit)

        rows = await fetch_all(query, params, connection=connection)
        return [cls._row_to_interaction(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_recent(
        cls, limit: int = 20, interaction_type: InteractionType | None = None
    ) -> list[Interaction]:
        if interaction_type is None:
            query = f"""
                SELECT {cls.SELECT_COLUMNS} FROM interactions
                ORDER BY occurred_at DESC LIMIT %s
            """
            params: tuple = (limit,)
        else:
            query = f"""
                SELECT {cls.SELECT_COLUMNS} FROM interactions
                WHERE type = %s
                ORDER BY occurred_at DESC LIMIT %s
            """
            params = (InteractionType(interaction_type).value, limit)

        rows = await fetch_all(query, params)
        return [cls._row_to_interaction(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_follow_ups(cls) -> list[Interaction]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS} FROM interactions
            WHERE follow_up_needed = true
            ORDER BY occurred_at DESC
        """
        rows = await fetch_all(query)
        return [cls._row_to_interaction(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_between(cls, start: datetime, end: datetime) -> list[Interaction]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS} FROM interactions
            WHERE occurred_at BETWEEN %s AND %s
            ORDER BY occurred_at DESC
        """
        rows = await fetch_all(query, (start, end))
        return [cls._row_to_interaction(row) for row in rows]

    @classmethod
    async def update(cls, interaction_id: str, fields: dict[str, Any]) -> Interaction | None:
        unknown = set(fields) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update interaction fields: {sorted(unknown)}")
        if not fields:
            return await cls.get(interaction_id)

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        ]
        query = sql.SQL("UPDATE interactions SET {} WHERE id = %s RETURNING {}").format(
            sql.SQL(", ").join(assignments), sql.SQL(cls.SELECT_COLUMNS)
        )
        row = await fetch_one(query, (*fields.values(), interaction_id))
        return cls._row_to_interaction(row)

    @classmethod
    async def delete(
        cls, interaction_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> bool:
        affected = await execute_query(
            "DELETE FROM interactions WHERE id = %s", (interaction_id,), connection=connection
        )
        return affected > 0
