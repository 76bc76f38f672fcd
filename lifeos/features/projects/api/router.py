"""
Project routes: CRUD, ordering and each project's thoughts.
"""

from fastapi import APIRouter, HTTPException, status

from lifeos.db.helpers import DatabaseError
from lifeos.features.projects.service import (
    InvalidProjectError,
    ProjectNotFoundError,
    project_service,
)
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.models.api.project_request import (
    CreateProjectRequest,
    ReorderProjectsRequest,
    UpdateProjectRequest,
)
from lifeos.models.api.project_response import ProjectResponse, ProjectsListResponse
from lifeos.models.api.thought_response import ThoughtResponse, ThoughtsListResponse
from lifeos.utils.clock import now_local

logger = get_logger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


def _database_failure(action: str, error: DatabaseError) -> HTTPException:
    logger.error(f"Failed to {action}", error=str(error), operation=error.operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")


@router.get("", response_model=ProjectsListResponse)
async def list_projects():
    """Active projects in display order with their open thought counts."""
    try:
        projects = await project_service.list_projects()
    except DatabaseError as e:
        raise _database_failure("list projects", e)

    responses = [ProjectResponse.from_counted(item) for item in projects]
    return ProjectsListResponse(projects=responses, total=len(responses))


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(request: CreateProjectRequest):
    try:
        project = await project_service.create_project(
            request.name,
            description=request.description,
            color=request.color,
            icon=request.icon,
        )
    except InvalidProjectError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("create project", e)

    return ProjectResponse.from_domain(project, thought_count=0)


@router.put("/order", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_projects(request: ReorderProjectsRequest):
    try:
        await project_service.reorder_projects(request.ordered_ids)
    except InvalidProjectError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("reorder projects", e)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str):
    try:
        project = await project_service.get_project(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("get project", e)

    return ProjectResponse.from_domain(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: str, request: UpdateProjectRequest):
    try:
        project = await project_service.update_project(
            project_id, request.model_dump(exclude_unset=True)
        )
    except InvalidProjectError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProjectNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("update project", e)

    return ProjectResponse.from_domain(project)


@router.post("/{project_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
async def archive_project(project_id: str):
    try:
        await project_service.archive_project(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("archive project", e)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str):
    """Delete a project; its thoughts are kept without a project."""
    try:
        await project_service.delete_project(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("delete project", e)


@router.get("/{project_id}/thoughts", response_model=ThoughtsListResponse)
async def list_project_thoughts(project_id: str):
    try:
        thoughts = await project_service.list_project_thoughts(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("list project thoughts", e)

    now = now_local()
    return ThoughtsListResponse(
        thoughts=[ThoughtResponse.from_domain(t, now) for t in thoughts],
        total=len(thoughts),
    )
