"""
Persistence for projects.
"""

from typing import Any

from psycopg import sql

from lifeos.db.helpers import (
    execute_query,
    execute_transaction,
    fetch_all,
    fetch_one,
    with_db_retry,
)
from lifeos.features.projects.domain import Project, ProjectWithCount
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ProjectRepository:
    """SQL for the projects table."""

    SELECT_COLUMNS = """
        id, name, description, color, icon, sort_order, is_archived, created_at, updated_at
    """

    UPDATABLE_FIELDS = ("name", "description", "color", "icon")

    @classmethod
    def _row_to_project(cls, row: dict | None) -> Project | None:
        if not row:
            return None

        return Project(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description"),
            color=row.get("color") or "#d4a574",
            icon=row.get("icon") or "folder",
            sort_order=row.get("sort_order") or 0,
            is_archived=bool(row.get("is_archived")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    @with_db_retry()
    async def list_active_with_counts(cls) -> list[ProjectWithCount]:
        """Unarchived projects in display order, each with its open thought count."""
        query = """
            SELECT p.id, p.name, p.description, p.color, p.icon, p.sort_order,
                   p.is_archived, p.created_at, p.updated_at,
                   COUNT(t.id) AS thought_count
            FROM projects p
            LEFT JOIN thoughts t ON t.project_id = p.id AND t.is_archived = false
            WHERE p.is_archived = false
            GROUP BY p.id
            ORDER BY p.sort_order ASC, p.created_at DESC
        """
        rows = await fetch_all(query)
        return [
            ProjectWithCount(project=cls._row_to_project(row), thought_count=row["thought_count"])
            for row in rows
        ]

    @classmethod
    @with_db_retry()
    async def get(cls, project_id: str) -> Project | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM projects WHERE id = %s"
        return cls._row_to_project(await fetch_one(query, (project_id,)))

    @classmethod
    async def create(
        cls,
        name: str,
        *,
        description: str | None = None,
        color: str = "#d4a574",
        icon: str = "folder",
    ) -> Project:
        """Insert a project at the end of the current ordering."""
        query = f"""
            INSERT INTO projects (name, description, color, icon, sort_order)
            VALUES (
                %s, %s, %s, %s,
                (SELECT COALESCE(MAX(sort_order), -1) + 1 FROM projects)
            )
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(query, (name, description, color, icon))
        logger.info("Project created", project_id=str(row["id"]))
        return cls._row_to_project(row)

    @classmethod
    async def update(cls, project_id: str, fields: dict[str, Any]) -> Project | None:
        unknown = set(fields) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update project fields: {sorted(unknown)}")
        if not fields:
            return await cls.get(project_id)

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        ]
        query = sql.SQL(
            "UPDATE projects SET {}, updated_at = NOW() WHERE id = %s RETURNING {}"
        ).format(sql.SQL(", ").join(assignments), sql.SQL(cls.SELECT_COLUMNS))
        row = await fetch_one(query, (*fields.values(), project_id))
        return cls._row_to_project(row)

    @classmethod
    async def archive(cls, project_id: str) -> bool:
        query = "UPDATE projects SET is_archived = true, updated_at = NOW() WHERE id = %s"
        return await execute_query(query, (project_id,)) > 0

    @classmethod
    async def delete(cls, project_id: str) -> None:
        """Hard delete; its thoughts stay, unfiled."""
        await execute_transaction(
            [
                (
                    "UPDATE thoughts SET project_id = NULL, updated_at = NOW() WHERE project_id = %s",
                    (project_id,),
                ),
                ("DELETE FROM projects WHERE id = %s", (project_id,)),
            ]
        )

    @classmethod
    async def reorder(cls, ordered_ids: list[str]) -> None:
        await execute_transaction(
            [
                ("UPDATE projects SET sort_order = %s WHERE id = %s", (index, project_id))
                for index, project_id in enumerate(ordered_ids)
            ]
        )
