"""
Project service: CRUD, ordering and the thoughts filed under each project.
"""

from __future__ import annotations

from typing import Any

from lifeos.features.projects.domain import Project, ProjectWithCount
from lifeos.features.projects.repository import ProjectRepository
from lifeos.features.thoughts.domain import Thought
from lifeos.features.thoughts.repository import ThoughtRepository
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ProjectServiceError(Exception):
    """Base exception for project operations."""


class ProjectNotFoundError(ProjectServiceError):
    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class InvalidProjectError(ProjectServiceError):
    """Rejected project input, e.g. a blank name."""


class ProjectService:
    async def list_projects(self) -> list[ProjectWithCount]:
        return await ProjectRepository.list_active_with_counts()

    async def get_project(self, project_id: str) -> Project:
        project = await ProjectRepository.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def create_project(
        self,
        name: str,
        *,
        description: str | None = None,
        color: str = "#d4a574",
        icon: str = "folder",
    ) -> Project:
        name = (name or "").strip()
        if not name:
            raise InvalidProjectError("Name is required")
        return await ProjectRepository.create(
            name, description=description, color=color, icon=icon
        )

    async def update_project(self, project_id: str, fields: dict[str, Any]) -> Project:
        if "name" in fields:
            name = (fields["name"] or "").strip()
            if not name:
                raise InvalidProjectError("Name cannot be blank")
            fields = {**fields, "name": name}

        project = await ProjectRepository.update(project_id, fields)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def archive_project(self, project_id: str) -> None:
        if not await ProjectRepository.archive(project_id):
            raise ProjectNotFoundError(project_id)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project; its thoughts are kept and become unfiled."""
        await self.get_project(project_id)
        await ProjectRepository.delete(project_id)
        logger.info("Project deleted", project_id=project_id)

    async def reorder_projects(self, ordered_ids: list[str]) -> None:
        if len(set(ordered_ids)) != len(ordered_ids):
            raise InvalidProjectError("Project order contains duplicates")
        await ProjectRepository.reorder(ordered_ids)

    async def list_project_thoughts(self, project_id: str) -> list[Thought]:
        await self.get_project(project_id)
        return await ThoughtRepository.list_for_project(project_id)


# Singleton instance for application use
project_service = ProjectService()
