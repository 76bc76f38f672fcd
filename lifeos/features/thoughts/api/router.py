"""
Thought routes: capture, due dates and pinning.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from lifeos.db.helpers import DatabaseError
from lifeos.features.thoughts.service import (
    InvalidThoughtError,
    ThoughtNotFoundError,
    ThoughtServiceError,
    thought_service,
)
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.models.api.thought_request import (
    AssignProjectRequest,
    CreateThoughtRequest,
    ExtractDatesRequest,
    PinThoughtRequest,
    UpdateDueDateRequest,
)
from lifeos.models.api.thought_response import (
    ExtractDatesResponse,
    ExtractedDateResponse,
    ThoughtResponse,
    ThoughtsListResponse,
)
from lifeos.utils.clock import now_local

logger = get_logger(__name__)

router = APIRouter(prefix="/thoughts", tags=["thoughts"])


def _database_failure(action: str, error: DatabaseError) -> HTTPException:
    logger.error(f"Failed to {action}", error=str(error), operation=error.operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thought not found")


def _list_response(thoughts) -> ThoughtsListResponse:
    now = now_local()
    return ThoughtsListResponse(
        thoughts=[ThoughtResponse.from_domain(t, now) for t in thoughts],
        total=len(thoughts),
    )


@router.post("", response_model=ThoughtResponse, status_code=status.HTTP_201_CREATED)
async def create_thought(request: CreateThoughtRequest):
    """Capture a thought; a date mentioned in the text becomes its due date."""
    now = now_local()
    try:
        thought = await thought_service.create_thought(
            request.content,
            project_id=request.project_id,
            tags=request.tags,
            now=now,
        )
    except InvalidThoughtError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("create thought", e)

    return ThoughtResponse.from_domain(thought, now)


@router.get("", response_model=ThoughtsListResponse)
async def list_recent_thoughts(limit: int = Query(10, ge=1, le=100)):
    """Recent unarchived thoughts, pinned first."""
    try:
        thoughts = await thought_service.list_recent_thoughts(limit)
    except DatabaseError as e:
        raise _database_failure("list thoughts", e)

    return _list_response(thoughts)


@router.get("/due", response_model=ThoughtsListResponse)
async def list_thoughts_due_between(start: datetime = Query(...), end: datetime = Query(...)):
    try:
        thoughts = await thought_service.list_thoughts_due_between(start, end)
    except ThoughtServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("list due thoughts", e)

    return _list_response(thoughts)


@router.get("/overdue", response_model=ThoughtsListResponse)
async def list_overdue_thoughts():
    try:
        thoughts = await thought_service.list_overdue_thoughts()
    except DatabaseError as e:
        raise _database_failure("list overdue thoughts", e)

    return _list_response(thoughts)


@router.get("/today", response_model=ThoughtsListResponse)
async def list_thoughts_due_today():
    try:
        thoughts = await thought_service.list_thoughts_due_today(now_local())
    except DatabaseError as e:
        raise _database_failure("list thoughts due today", e)

    return _list_response(thoughts)


@router.get("/upcoming", response_model=ThoughtsListResponse)
async def list_upcoming_thoughts(days: int = Query(7, ge=1, le=90)):
    """Thoughts due between the start of today and `days` days out."""
    try:
        thoughts = await thought_service.list_upcoming_thoughts(now_local(), days)
    except DatabaseError as e:
        raise _database_failure("list upcoming thoughts", e)

    return _list_response(thoughts)


@router.get("/search", response_model=ThoughtsListResponse)
async def search_thoughts(
    q: str | None = Query(None, max_length=200),
    project_id: str | None = Query(None),
    unfiled: bool = Query(False, description="Only thoughts without a project"),
    include_archived: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
):
    try:
        thoughts = await thought_service.search_thoughts(
            q,
            project_id=project_id,
            unfiled_only=unfiled,
            include_archived=include_archived,
            limit=limit,
        )
    except DatabaseError as e:
        raise _database_failure("search thoughts", e)

    return _list_response(thoughts)


@router.post("/extract-dates", response_model=ExtractDatesResponse)
async def extract_dates(request: ExtractDatesRequest):
    """Every date expression found in a piece of text."""
    dates = thought_service.extract_dates(request.text, request.now)
    return ExtractDatesResponse(dates=[ExtractedDateResponse.from_domain(d) for d in dates])


@router.post("/{thought_id}/pin", status_code=status.HTTP_204_NO_CONTENT)
async def pin_thought(thought_id: str, request: PinThoughtRequest | None = None):
    is_pinned = request.is_pinned if request else True
    try:
        await thought_service.pin_thought(thought_id, is_pinned)
    except ThoughtNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("pin thought", e)


@router.post("/{thought_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
async def archive_thought(thought_id: str):
    try:
        await thought_service.archive_thought(thought_id)
    except ThoughtNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("archive thought", e)


@router.put("/{thought_id}/project", status_code=status.HTTP_204_NO_CONTENT)
async def assign_thought_to_project(thought_id: str, request: AssignProjectRequest):
    try:
        await thought_service.assign_thought_to_project(thought_id, request.project_id)
    except ThoughtNotFoundError:
        raise _not_found()
    except InvalidThoughtError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("assign thought", e)


@router.delete("/{thought_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_thought(thought_id: str):
    try:
        await thought_service.delete_thought(thought_id)
    except ThoughtNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("delete thought", e)


@router.put("/{thought_id}/due-date", response_model=ThoughtResponse)
async def update_thought_due_date(thought_id: str, request: UpdateDueDateRequest):
    try:
        thought = await thought_service.update_thought_due_date(
            thought_id, request.due_date, request.due_date_text
        )
    except ThoughtNotFoundError:
        raise _not_found()
    except DatabaseError as e:
        raise _database_failure("update due date", e)

    return ThoughtResponse.from_domain(thought, now_local())
