"""
Habit routes: daily habits, completion toggling and streaks.
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from lifeos.db.helpers import DatabaseError
from lifeos.features.habits.service import (
    HabitNotFoundError,
    HabitServiceError,
    InvalidHabitError,
    habit_service,
)
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.models.api.habit_request import (
    CreateHabitRequest,
    ReorderHabitsRequest,
    ToggleCompletionRequest,
    UpdateHabitRequest,
)
from lifeos.models.api.habit_response import (
    CompletionResponse,
    HabitResponse,
    HabitWithStreakResponse,
    StreakResponse,
    TodaysSummaryResponse,
    ToggleCompletionResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/habits", tags=["habits"])


def _database_failure(action: str, error: DatabaseError) -> HTTPException:
    logger.error(f"Failed to {action}", error=str(error), operation=error.operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


@router.get("", response_model=list[HabitWithStreakResponse])
async def list_habits():
    """Active habits with their streaks."""
    try:
        habits = await habit_service.list_habits_with_streaks()
    except DatabaseError as e:
        raise _database_failure("list habits", e)

    return [HabitWithStreakResponse.from_result(h) for h in habits]


@router.post("", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
async def create_habit(request: CreateHabitRequest):
    try:
        habit = await habit_service.create_habit(
            request.name,
            description=request.description,
            icon=request.icon,
            color=request.color,
        )
    except HabitServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("create habit", e)

    return HabitResponse.from_domain(habit)


@router.get("/today", response_model=TodaysSummaryResponse)
async def get_todays_summary():
    """How many habits are done today out of the active total."""
    try:
        summary = await habit_service.todays_summary()
    except DatabaseError as e:
        raise _database_failure("summarize habits", e)

    return TodaysSummaryResponse(
        completed=summary.completed,
        total=summary.total,
        habits=[HabitWithStreakResponse.from_result(h) for h in summary.habits],
    )


@router.get("/completions", response_model=list[CompletionResponse])
async def list_completions_in_range(
    start: date = Query(..., description="First day, YYYY-MM-DD"),
    end: date = Query(..., description="Last day, YYYY-MM-DD"),
):
    """Completions across all habits for a calendar range."""
    try:
        completions = await habit_service.list_completions_in_range(start, end)
    except HabitServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("list completions", e)

    return [CompletionResponse.from_domain(c) for c in completions]


@router.put("/order", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_habits(request: ReorderHabitsRequest):
    try:
        await habit_service.reorder_habits(request.ordered_ids)
    except DatabaseError as e:
        raise _database_failure("reorder habits", e)


@router.get("/{habit_id}", response_model=HabitWithStreakResponse)
async def get_habit(habit_id: str):
    try:
        result = await habit_service.get_habit_with_streak(habit_id)
    except HabitNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    except DatabaseError as e:
        raise _database_failure("get habit", e)

    return HabitWithStreakResponse.from_result(result)


@router.patch("/{habit_id}", response_model=HabitResponse)
async def update_habit(habit_id: str, request: UpdateHabitRequest):
    try:
        habit = await habit_service.update_habit(habit_id, request.model_dump(exclude_unset=True))
    except HabitNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    except DatabaseError as e:
        raise _database_failure("update habit", e)

    return HabitResponse.from_domain(habit)


@router.post("/{habit_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
async def archive_habit(habit_id: str):
    try:
        await habit_service.archive_habit(habit_id)
    except HabitNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    except DatabaseError as e:
        raise _database_failure("archive habit", e)


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_habit(habit_id: str):
    """Delete a habit and all of its completions."""
    try:
        await habit_service.delete_habit(habit_id)
    except HabitNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    except DatabaseError as e:
        raise _database_failure("delete habit", e)


@router.post("/{habit_id}/toggle", response_model=ToggleCompletionResponse)
async def toggle_completion(habit_id: str, request: ToggleCompletionRequest | None = None):
    """Toggle a day's completion (today unless a date is given)."""
    completed_date = request.date if request else None
    try:
        result = await habit_service.toggle_habit_completion(habit_id, completed_date)
    except HabitNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    except InvalidHabitError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("toggle habit", e)

    return ToggleCompletionResponse(
        habit_id=habit_id,
        completed=result.completed,
        streak=StreakResponse.from_domain(result.streak),
    )
