"""
Persistence for the player journal (interaction and tier-change log).
"""

from datetime import datetime
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from lifeos.db.helpers import execute_query, fetch_all, fetch_one, with_db_retry
from lifeos.features.player.domain import JournalEntry


class JournalRepository:
    SELECT_COLUMNS = """
        id, entity_type, entity_id, entry_type, content, metadata, ai_generated, created_at
    """

    @classmethod
    def _row_to_entry(cls, row: dict | None) -> JournalEntry | None:
        if not row:
            return None

        entity_id = row.get("entity_id")
        return JournalEntry(
            id=str(row["id"]),
            entity_type=row["entity_type"],
            entity_id=str(entity_id) if entity_id is not None else None,
            entry_type=row["entry_type"],
            content=row["content"],
            metadata=row.get("metadata"),
            ai_generated=bool(row.get("ai_generated")),
            created_at=row["created_at"],
        )

    @classmethod
    async def create(
        cls,
        entity_type: str,
        entry_type: str,
        content: str,
        *,
        entity_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        ai_generated: bool = False,
        connection: psycopg.AsyncConnection | None = None,
    ) -> JournalEntry:
        query = f"""
            INSERT INTO journal_entries (
                entity_type, entity_id, entry_type, content, metadata, ai_generated
            )
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(
            query,
            (
                entity_type,
                entity_id,
                entry_type,
                content,
                Jsonb(metadata) if metadata is not None else None,
                ai_generated,
            ),
            connection=connection,
        )
        return cls._row_to_entry(row)

    @classmethod
    @with_db_retry()
    async def list_recent(
        cls,
        limit: int = 50,
        entry_type: str | None = None,
        entity_type: str | None = None,
    ) -> list[JournalEntry]:
        conditions = []
        params: list[Any] = []
        if entry_type:
            conditions.append("entry_type = %s")
            params.append(entry_type)
        if entity_type:
            conditions.append("entity_type = %s")
            params.append(entity_type)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM journal_entries
            {where}
            ORDER BY created_at DESC
            LIMIT %s
        """
        params.append(limit)
        rows = await fetch_all(query, tuple(params))
        return [cls._row_to_entry(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_between(cls, start: datetime, end: datetime) -> list[JournalEntry]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM journal_entries
            WHERE created_at BETWEEN %s AND %s
            ORDER BY created_at DESC
        """
        rows = await fetch_all(query, (start, end))
        return [cls._row_to_entry(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def count_by_entry_type(cls) -> dict[str, int]:
        query = """
            SELECT entry_type, COUNT(*) AS entry_count
            FROM journal_entries
            GROUP BY entry_type
        """
        rows = await fetch_all(query)
        return {row["entry_type"]: row["entry_count"] for row in rows}

    @classmethod
    async def delete(cls, entry_id: str) -> bool:
        affected = await execute_query("DELETE FROM journal_entries WHERE id = %s", (entry_id,))
        return affected > 0
