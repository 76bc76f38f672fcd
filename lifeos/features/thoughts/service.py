"""
Thought service: capture notes and derive their due dates from free text.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from lifeos.features.projects.repository import ProjectRepository
from lifeos.features.thoughts.date_parser import (
    ParsedDate,
    extract_all_dates,
    parse_natural_date,
)
from lifeos.features.thoughts.domain import Thought
from lifeos.features.thoughts.repository import ThoughtRepository
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.utils.clock import now_local

logger = get_logger(__name__)

UPCOMING_DAYS = 7


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


class ThoughtServiceError(Exception):
    """Base exception for thought operations."""


class ThoughtNotFoundError(ThoughtServiceError):
    def __init__(self, thought_id: str):
        super().__init__(f"Thought not found: {thought_id}")
        self.thought_id = thought_id


class InvalidThoughtError(ThoughtServiceError):
    """Rejected thought input, e.g. empty content."""


class ThoughtService:
    async def create_thought(
        self,
        content: str,
        *,
        project_id: str | None = None,
        tags: list[str] | None = None,
        now: datetime | None = None,
    ) -> Thought:
        """Store a thought, filling its due date from any date expression in the text."""
        content = (content or "").strip()
        if not content:
            raise InvalidThoughtError("Content is required")

        if project_id is not None:
            await self._require_project(project_id)

        parsed = parse_natural_date(content, now or now_local())

        thought = await ThoughtRepository.create(
            content,
            project_id=project_id,
            tags=tags,
            due_date=parsed.date if parsed else None,
            due_date_text=parsed.original_text if parsed else None,
        )
        logger.info(
            "Thought captured",
            thought_id=thought.id,
            has_due_date=parsed is not None,
            due_date_text=parsed.original_text if parsed else None,
        )
        return thought

    async def list_recent_thoughts(self, limit: int = 10) -> list[Thought]:
        return await ThoughtRepository.list_recent(limit)

    async def list_thoughts_due_between(self, start: datetime, end: datetime) -> list[Thought]:
        if end < start:
            raise ThoughtServiceError("Range end is before its start")
        return await ThoughtRepository.list_due_between(start, end)

    async def list_overdue_thoughts(self, now: datetime | None = None) -> list[Thought]:
        return await ThoughtRepository.list_due_before(now or now_local())

    async def list_thoughts_due_today(self, now: datetime | None = None) -> list[Thought]:
        start = _start_of_day(now or now_local())
        return await ThoughtRepository.list_due_between(start, start + timedelta(days=1))

    async def list_upcoming_thoughts(
        self, now: datetime | None = None, days: int = UPCOMING_DAYS
    ) -> list[Thought]:
        """Thoughts due from the start of today through the next ``days`` days."""
        if days < 1:
            raise ThoughtServiceError("days must be at least 1")
        start = _start_of_day(now or now_local())
        return await ThoughtRepository.list_due_between(start, start + timedelta(days=days))

    async def search_thoughts(
        self,
        query: str | None = None,
        *,
        project_id: str | None = None,
        unfiled_only: bool = False,
        include_archived: bool = False,
        limit: int = 50,
    ) -> list[Thought]:
        """
        Substring search over thought content, pinned first.

        Args:
            query: Case-insensitive substring; blank matches everything
            project_id: Only thoughts filed under this project
            unfiled_only: Only thoughts without a project; wins over project_id
            include_archived: Also return archived thoughts
            limit: Maximum number of results
        """
        return await ThoughtRepository.search(
            (query or "").strip() or None,
            project_id=project_id,
            unfiled_only=unfiled_only,
            include_archived=include_archived,
            limit=limit,
        )

    async def update_thought_due_date(
        self,
        thought_id: str,
        due_date: datetime | None,
        due_date_text: str | None = None,
    ) -> Thought:
        """Set or clear a thought's due date by hand."""
        thought = await ThoughtRepository.set_due_date(
            thought_id, due_date, due_date_text if due_date is not None else None
        )
        if thought is None:
            raise ThoughtNotFoundError(thought_id)
        return thought

    async def pin_thought(self, thought_id: str, is_pinned: bool = True) -> None:
        if not await ThoughtRepository.set_pinned(thought_id, is_pinned):
            raise ThoughtNotFoundError(thought_id)

    async def archive_thought(self, thought_id: str) -> None:
        if not await ThoughtRepository.archive(thought_id):
            raise ThoughtNotFoundError(thought_id)

    async def assign_thought_to_project(self, thought_id: str, project_id: str | None) -> None:
        """File a thought under a project, or unfile it with None."""
        if project_id is not None:
            await self._require_project(project_id)
        if not await ThoughtRepository.set_project(thought_id, project_id):
            raise ThoughtNotFoundError(thought_id)

    async def delete_thought(self, thought_id: str) -> None:
        if not await ThoughtRepository.delete(thought_id):
            raise ThoughtNotFoundError(thought_id)

    def extract_dates(self, text: str, now: datetime | None = None) -> list[ParsedDate]:
        return extract_all_dates(text, now or now_local())

    async def _require_project(self, project_id: str) -> None:
        if await ProjectRepository.get(project_id) is None:
            raise InvalidThoughtError(f"Project not found: {project_id}")


# Singleton instance for application use
thought_service = ThoughtService()
