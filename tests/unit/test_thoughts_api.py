"""
Tests for the thought routes with the service patched out.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from lifeos.features.thoughts.date_parser import end_of_day
from lifeos.features.thoughts.service import (
    InvalidThoughtError,
    ThoughtNotFoundError,
    thought_service,
)
from lifeos.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def frozen_router_clock(fixed_now):
    with patch("lifeos.features.thoughts.api.router.now_local", return_value=fixed_now):
        yield


def test_create_thought_returns_due_label(make_thought, fixed_now):
    thought = make_thought(
        due_date=end_of_day(fixed_now + timedelta(days=1)),
        due_date_text="tomorrow",
    )
    with patch.object(
        thought_service, "create_thought", AsyncMock(return_value=thought)
    ) as create_mock:
        response = client.post(
            "/thoughts", json={"content": "Send Ana the deck tomorrow", "tags": ["work"]}
        )

    assert response.status_code == 201
    data = response.json()
    assert data["due_date_text"] == "tomorrow"
    assert data["due_label"] == "Tomorrow"
    assert data["is_overdue"] is False
    create_mock.assert_awaited_once_with(
        "Send Ana the deck tomorrow", project_id=None, tags=["work"], now=fixed_now
    )


def test_create_thought_rejects_empty_content():
    response = client.post("/thoughts", json={"content": ""})

    assert response.status_code == 422


def test_create_thought_blank_content():
    with patch.object(
        thought_service, "create_thought", AsyncMock(side_effect=InvalidThoughtError("Content is required"))
    ):
        response = client.post("/thoughts", json={"content": "   "})

    assert response.status_code == 400


def test_list_recent_thoughts(make_thought, fixed_now):
    thoughts = [
        make_thought(id="pinned", is_pinned=True),
        make_thought(id="late", due_date=fixed_now - timedelta(days=2), due_date_text="monday"),
    ]
    with patch.object(
        thought_service, "list_recent_thoughts", AsyncMock(return_value=thoughts)
    ) as list_mock:
        response = client.get("/thoughts", params={"limit": 5})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [t["id"] for t in data["thoughts"]] == ["pinned", "late"]
    assert data["thoughts"][0]["due_label"] is None
    assert data["thoughts"][1]["is_overdue"] is True
    list_mock.assert_awaited_once_with(5)


def test_list_overdue_thoughts():
    with patch.object(thought_service, "list_overdue_thoughts", AsyncMock(return_value=[])):
        response = client.get("/thoughts/overdue")

    assert response.status_code == 200
    assert response.json() == {"thoughts": [], "total": 0}


def test_list_due_between_parses_range():
    with patch.object(
        thought_service, "list_thoughts_due_between", AsyncMock(return_value=[])
    ) as due_mock:
        response = client.get(
            "/thoughts/due",
            params={"start": "2026-10-14T00:00:00+00:00", "end": "2026-10-21T00:00:00+00:00"},
        )

    assert response.status_code == 200
    start, end = due_mock.await_args.args
    assert isinstance(start, datetime)
    assert end - start == timedelta(days=7)


def test_extract_dates_endpoint():
    response = client.post(
        "/thoughts/extract-dates",
        json={"text": "lunch friday, call mom tomorrow", "now": "2026-10-14T10:30:00-04:00"},
    )

    assert response.status_code == 200
    dates = response.json()["dates"]
    assert [d["original_text"] for d in dates] == ["tomorrow", "friday"]
    assert [d["confidence"] for d in dates] == [0.9, 0.85]


def test_pin_thought_defaults_to_pinned():
    with patch.object(thought_service, "pin_thought", AsyncMock(return_value=None)) as pin_mock:
        response = client.post("/thoughts/t-1/pin")

    assert response.status_code == 204
    pin_mock.assert_awaited_once_with("t-1", True)


def test_unpin_thought():
    with patch.object(thought_service, "pin_thought", AsyncMock(return_value=None)) as pin_mock:
        response = client.post("/thoughts/t-1/pin", json={"is_pinned": False})

    assert response.status_code == 204
    pin_mock.assert_awaited_once_with("t-1", False)


def test_assign_project():
    with patch.object(
        thought_service, "assign_thought_to_project", AsyncMock(return_value=None)
    ) as assign_mock:
        response = client.put("/thoughts/t-1/project", json={"project_id": "p-1"})

    assert response.status_code == 204
    assign_mock.assert_awaited_once_with("t-1", "p-1")


def test_archive_missing_thought():
    with patch.object(
        thought_service, "archive_thought", AsyncMock(side_effect=ThoughtNotFoundError("missing"))
    ):
        response = client.post("/thoughts/missing/archive")

    assert response.status_code == 404
    assert response.json()["detail"] == "Thought not found"


def test_delete_thought():
    with patch.object(thought_service, "delete_thought", AsyncMock(return_value=None)):
        response = client.delete("/thoughts/t-1")

    assert response.status_code == 204


def test_assign_unknown_project():
    with patch.object(
        thought_service,
        "assign_thought_to_project",
        AsyncMock(side_effect=InvalidThoughtError("Project not found: gone")),
    ):
        response = client.put("/thoughts/t-1/project", json={"project_id": "gone"})

    assert response.status_code == 400


def test_list_thoughts_due_today(make_thought, fixed_now):
    with patch.object(
        thought_service, "list_thoughts_due_today", AsyncMock(return_value=[make_thought()])
    ) as today_mock:
        response = client.get("/thoughts/today")

    assert response.status_code == 200
    assert response.json()["total"] == 1
    today_mock.assert_awaited_once_with(fixed_now)


def test_list_upcoming_thoughts(fixed_now):
    with patch.object(
        thought_service, "list_upcoming_thoughts", AsyncMock(return_value=[])
    ) as upcoming_mock:
        response = client.get("/thoughts/upcoming", params={"days": 3})

    assert response.status_code == 200
    upcoming_mock.assert_awaited_once_with(fixed_now, 3)


def test_list_upcoming_rejects_zero_days():
    response = client.get("/thoughts/upcoming", params={"days": 0})

    assert response.status_code == 422


def test_search_thoughts_passes_filters(make_thought):
    with patch.object(
        thought_service, "search_thoughts", AsyncMock(return_value=[make_thought()])
    ) as search_mock:
        response = client.get("/thoughts/search", params={"q": "deck", "unfiled": "true"})

    assert response.status_code == 200
    assert response.json()["thoughts"][0]["id"] == "thought-1"
    search_mock.assert_awaited_once_with(
        "deck", project_id=None, unfiled_only=True, include_archived=False, limit=50
    )


def test_update_due_date(make_thought, fixed_now):
    due = fixed_now + timedelta(days=2)
    with patch.object(
        thought_service,
        "update_thought_due_date",
        AsyncMock(return_value=make_thought(due_date=due, due_date_text="friday")),
    ) as update_mock:
        response = client.put(
            "/thoughts/t-1/due-date",
            json={"due_date": due.isoformat(), "due_date_text": "friday"},
        )

    assert response.status_code == 200
    assert response.json()["due_date_text"] == "friday"
    thought_id, sent_due, sent_text = update_mock.await_args.args
    assert (thought_id, sent_due, sent_text) == ("t-1", due, "friday")


def test_clear_due_date_on_missing_thought():
    with patch.object(
        thought_service,
        "update_thought_due_date",
        AsyncMock(side_effect=ThoughtNotFoundError("missing")),
    ):
        response = client.put("/thoughts/missing/due-date", json={"due_date": None})

    assert response.status_code == 404
