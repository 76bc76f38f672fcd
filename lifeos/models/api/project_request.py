# lifeos/models/api/project_request.py
"""
Project API request models.
"""

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Project name")
    description: str | None = Field(default=None, max_length=1000)
    color: str = Field(default="#d4a574", pattern=r"^#[0-9a-fA-F]{6}$")
    icon: str = Field(default="folder", max_length=50)


class UpdateProjectRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    icon: str | None = Field(None, max_length=50)


class ReorderProjectsRequest(BaseModel):
    ordered_ids: list[str] = Field(..., min_length=1)
