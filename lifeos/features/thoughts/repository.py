"""
Persistence for thoughts.
"""

from datetime import datetime
from typing import Any

from lifeos.db.helpers import execute_query, fetch_all, fetch_one, with_db_retry
from lifeos.features.thoughts.domain import Thought


class ThoughtRepository:
    SELECT_COLUMNS = """
        id, content, project_id, tags, is_pinned, is_archived,
        due_date, due_date_text, created_at, updated_at
    """

    @classmethod
    def _row_to_thought(cls, row: dict | None) -> Thought | None:
        if not row:
            return None

        project_id = row.get("project_id")
        return Thought(
            id=str(row["id"]),
            content=row["content"],
            project_id=str(project_id) if project_id is not None else None,
            tags=row.get("tags"),
            is_pinned=bool(row.get("is_pinned")),
            is_archived=bool(row.get("is_archived")),
            due_date=row.get("due_date"),
            due_date_text=row.get("due_date_text"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    async def create(
        cls,
        content: str,
        *,
        project_id: str | None = None,
        tags: list[str] | None = None,
        due_date: datetime | None = None,
        due_date_text: str | None = None,
    ) -> Thought:
        query = f"""
            INSERT INTO thoughts (content, project_id, tags, due_date, due_date_text)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(query, (content, project_id, tags, due_date, due_date_text))
        return cls._row_to_thought(row)

    @classmethod
    @with_db_retry()
    async def get(cls, thought_id: str) -> Thought | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM thoughts WHERE id = %s"
        return cls._row_to_thought(await fetch_one(query, (thought_id,)))

    @classmethod
    @with_db_retry()
    async def list_recent(cls, limit: int = 10) -> list[Thought]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM thoughts
            WHERE is_archived = false
            ORDER BY is_pinned DESC, created_at DESC
            LIMIT %s
        """
        rows = await fetch_all(query, (limit,))
        return [cls._row_to_thought(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_due_between(cls, start: datetime, end: datetime) -> list[Thought]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM thoughts
            WHERE is_archived = false AND due_date BETWEEN %s AND %s
            ORDER BY due_date ASC
        """
        rows = await fetch_all(query, (start, end))
        return [cls._row_to_thought(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def list_due_before(cls, moment: datetime) -> list[Thought]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM thoughts
            WHERE is_archived = false AND due_date IS NOT NULL AND due_date < %s
            ORDER BY due_date ASC
        """
        rows = await fetch_all(query, (moment,))
        return [cls._row_to_thought(row) for row in rows]

    @classmethod
    async def set_pinned(cls, thought_id: str, is_pinned: bool) -> bool:
        query = "UPDATE thoughts SET is_pinned = %s, updated_at = NOW() WHERE id = %s"
        return await execute_query(query, (is_pinned, thought_id)) > 0

    @classmethod
    async def archive(cls, thought_id: str) -> bool:
        query = "UPDATE thoughts SET is_archived = true, updated_at = NOW() WHERE id = %s"
        return await execute_query(query, (thought_id,)) > 0

    @classmethod
    async def set_project(cls, thought_id: str, project_id: str | None) -> bool:
        query = "UPDATE thoughts SET project_id = %s, updated_at = NOW() WHERE id = %s"
        return await execute_query(query, (project_id, thought_id)) > 0

    @classmethod
    async def delete(cls, thought_id: str) -> bool:
        return await execute_query("DELETE FROM thoughts WHERE id = %s", (thought_id,)) > 0

    @classmethod
    @with_db_retry()
    async def list_for_project(cls, project_id: str) -> list[Thought]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM thoughts
            WHERE project_id = %s AND is_archived = false
            ORDER BY is_pinned DESC, created_at DESC
        """
        rows = await fetch_all(query, (project_id,))
        return [cls._row_to_thought(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def search(
        cls,
        term: str | None = None,
        *,
        project_id: str | None = None,
        unfiled_only: bool = False,
        include_archived: bool = False,
        limit: int = 50,
    ) -> list[Thought]:
        conditions = []
        params: list[Any] = []

        if term:
            conditions.append("content ILIKE %s")
            params.append(f"%{term}%")
        if unfiled_only:
            conditions.append("project_id IS NULL")
        elif project_id is not None:
            conditions.append("project_id = %s")
            params.append(project_id)
        if not include_archived:
            conditions.append("is_archived = false")

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM thoughts
            {where}
            ORDER BY is_pinned DESC, created_at DESC
            LIMIT %s
        """
        params.append(limit)
        rows = await fetch_all(query, tuple(params))
        return [cls._row_to_thought(row) for row in rows]

    @classmethod
    async def set_due_date(
        cls, thought_id: str, due_date: datetime | None, due_date_text: str | None
    ) -> Thought | None:
        query = f"""
            UPDATE thoughts
            SET due_date = %s, due_date_text = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(query, (due_date, due_date_text, thought_id))
        return cls._row_to_thought(row)
