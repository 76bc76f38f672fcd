# lifeos/models/api/project_response.py
"""
Project API response models.
"""

from datetime import datetime

from pydantic import BaseModel

from lifeos.features.projects.domain import Project, ProjectWithCount


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str | None
    color: str
    icon: str
    sort_order: int
    is_archived: bool
    thought_count: int | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, project: Project, thought_count: int | None = None) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            color=project.color,
            icon=project.icon,
            sort_order=project.sort_order,
            is_archived=project.is_archived,
            thought_count=thought_count,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )

    @classmethod
    def from_counted(cls, item: ProjectWithCount) -> "ProjectResponse":
        return cls.from_domain(item.project, item.thought_count)


class ProjectsListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int
