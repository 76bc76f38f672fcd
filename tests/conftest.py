from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from lifeos.features.habits.domain import Habit, HabitCompletion
from lifeos.features.player.domain import Interaction, InteractionType, PlayerContact
from lifeos.features.player.tier_calculator import ContactTier
from lifeos.features.projects.domain import Project
from lifeos.features.thoughts.domain import Thought

# Wednesday, mid-morning, fixed UTC-4 offset
EASTERN = timezone(timedelta(hours=-4))
FIXED_NOW = datetime(2026, 10, 14, 10, 30, tzinfo=EASTERN)
FIXED_TODAY = date(2026, 10, 14)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_today() -> date:
    return FIXED_TODAY


@pytest.fixture
def make_contact():
    def _make(**overrides) -> PlayerContact:
        now = datetime.now(UTC)
        values = {
            "id": "contact-1",
            "name": "Ana Souza",
            "title": "Founder",
            "source": "manual",
            "first_met_context": "Demo day",
            "metadata": None,
            "tier": ContactTier.DORMANT,
            "tier_score": 0,
            "interaction_count": 0,
            "total_interaction_minutes": 0,
            "last_interaction_at": None,
            "is_archived": False,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return PlayerContact(**values)

    return _make


@pytest.fixture
def make_interaction():
    def _make(**overrides) -> Interaction:
        values = {
            "id": "interaction-1",
            "contact_id": "contact-1",
            "type": InteractionType.COFFEE,
            "occurred_at": FIXED_NOW,
            "duration_minutes": 60,
            "summary": None,
            "topics": None,
            "sentiment": None,
            "follow_up_needed": False,
            "follow_up_note": None,
            "location": None,
            "created_at": FIXED_NOW,
        }
        values.update(overrides)
        return Interaction(**values)

    return _make


@pytest.fixture
def make_habit():
    def _make(**overrides) -> Habit:
        now = datetime.now(UTC)
        values = {
            "id": "habit-1",
            "name": "Read",
            "description": None,
            "icon": "book",
            "color": "#d4a574",
            "sort_order": 0,
            "is_archived": False,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Habit(**values)

    return _make


@pytest.fixture
def make_completion():
    def _make(habit_id: str, completed_date: date) -> HabitCompletion:
        return HabitCompletion(
            id=f"{habit_id}-{completed_date.isoformat()}",
            habit_id=habit_id,
            completed_date=completed_date,
            created_at=datetime.now(UTC),
        )

    return _make


@pytest.fixture
def make_thought():
    def _make(**overrides) -> Thought:
        values = {
            "id": "thought-1",
            "content": "Send Ana the deck tomorrow",
            "project_id": None,
            "tags": None,
            "is_pinned": False,
            "is_archived": False,
            "due_date": None,
            "due_date_text": None,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        values.update(overrides)
        return Thought(**values)

    return _make


@pytest.fixture
def make_project():
    def _make(**overrides) -> Project:
        values = {
            "id": "project-1",
            "name": "Launch",
            "description": None,
            "color": "#d4a574",
            "icon": "folder",
            "sort_order": 0,
            "is_archived": False,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        values.update(overrides)
        return Project(**values)

    return _make
