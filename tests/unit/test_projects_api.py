"""
Tests for the project routes with the service patched out.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from lifeos.db.helpers import DatabaseError
from lifeos.features.projects.domain import ProjectWithCount
from lifeos.features.projects.service import (
    InvalidProjectError,
    ProjectNotFoundError,
    project_service,
)
from lifeos.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def frozen_router_clock(fixed_now):
    with patch("lifeos.features.projects.api.router.now_local", return_value=fixed_now):
        yield


def test_list_projects(make_project):
    counted = [
        ProjectWithCount(project=make_project(id="a"), thought_count=3),
        ProjectWithCount(project=make_project(id="b", sort_order=1), thought_count=0),
    ]
    with patch.object(project_service, "list_projects", AsyncMock(return_value=counted)):
        response = client.get("/projects")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [(p["id"], p["thought_count"]) for p in data["projects"]] == [("a", 3), ("b", 0)]


def test_create_project(make_project):
    with patch.object(
        project_service, "create_project", AsyncMock(return_value=make_project())
    ) as create_mock:
        response = client.post("/projects", json={"name": "Launch", "color": "#336699"})

    assert response.status_code == 201
    assert response.json()["thought_count"] == 0
    create_mock.assert_awaited_once_with(
        "Launch", description=None, color="#336699", icon="folder"
    )


def test_create_project_rejects_bad_color():
    response = client.post("/projects", json={"name": "Launch", "color": "teal"})

    assert response.status_code == 422


def test_create_project_blank_name():
    with patch.object(
        project_service, "create_project", AsyncMock(side_effect=InvalidProjectError("Name is required"))
    ):
        response = client.post("/projects", json={"name": "  "})

    assert response.status_code == 400


def test_get_missing_project():
    with patch.object(
        project_service, "get_project", AsyncMock(side_effect=ProjectNotFoundError("missing"))
    ):
        response = client.get("/projects/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Project not found"


def test_update_project_sends_only_set_fields(make_project):
    with patch.object(
        project_service, "update_project", AsyncMock(return_value=make_project(icon="star"))
    ) as update_mock:
        response = client.patch("/projects/project-1", json={"icon": "star"})

    assert response.status_code == 200
    assert response.json()["icon"] == "star"
    update_mock.assert_awaited_once_with("project-1", {"icon": "star"})


def test_reorder_projects():
    with patch.object(
        project_service, "reorder_projects", AsyncMock(return_value=None)
    ) as reorder_mock:
        response = client.put("/projects/order", json={"ordered_ids": ["b", "a"]})

    assert response.status_code == 204
    reorder_mock.assert_awaited_once_with(["b", "a"])


def test_reorder_duplicates():
    with patch.object(
        project_service,
        "reorder_projects",
        AsyncMock(side_effect=InvalidProjectError("Project order contains duplicates")),
    ):
        response = client.put("/projects/order", json={"ordered_ids": ["a", "a"]})

    assert response.status_code == 400


def test_delete_project():
    with patch.object(project_service, "delete_project", AsyncMock(return_value=None)) as delete_mock:
        response = client.delete("/projects/project-1")

    assert response.status_code == 204
    delete_mock.assert_awaited_once_with("project-1")


def test_archive_project_database_failure():
    with patch.object(
        project_service,
        "archive_project",
        AsyncMock(side_effect=DatabaseError("boom", operation="archive")),
    ):
        response = client.post("/projects/project-1/archive")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to archive project"


def test_list_project_thoughts(make_thought):
    with patch.object(
        project_service,
        "list_project_thoughts",
        AsyncMock(return_value=[make_thought(project_id="project-1")]),
    ):
        response = client.get("/projects/project-1/thoughts")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["thoughts"][0]["project_id"] == "project-1"
