"""Tests for /tasks routes.

Tests cover:
- Title validation (missing, blank)
- Create defaults
- Status filter
- Partial update and non-nullable fields
- Cross-owner isolation
"""

import pytest

from tests.support import USER_B, as_user


@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "   "}, {"title": None}])
async def test_create_task_requires_title(client, body):
    response = await client.post("/tasks", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


async def test_create_task_applies_defaults(client):
    response = await client.post(
        "/tasks", json={"title": "  Edit vlog  ", "description": "   ", "category": ""}
    )

    assert response.status_code == 201
    task = response.json()["task"]
    assert task["title"] == "Edit vlog"
    assert task["status"] == "todo"
    assert task["progress"] == 0
    assert task["tags"] == []
    assert task["assignees"] == []
    assert task["description"] is None
    assert task["category"] is None
    assert task["due_date"] is None


async def test_create_task_with_all_fields(client):
    response = await client.post(
        "/tasks",
        json={
            "title": "Record intro",
            "description": "Two takes",
            "status": "in_review",
            "category": "Filming",
            "tags": ["intro", "camera"],
            "progress": 40,
            "due_date": "2026-11-02",
            "assignees": ["Sam", "Alex"],
        },
    )

    task = response.json()["task"]
    assert task["status"] == "in_review"
    assert task["tags"] == ["intro", "camera"]
    assert task["assignees"] == ["Sam", "Alex"]
    assert task["due_date"] == "2026-11-02"
    assert task["progress"] == 40


async def test_invalid_status_is_400(client):
    response = await client.post("/tasks", json={"title": "x", "status": "blocked"})

    assert response.status_code == 400
    assert "error" in response.json()


async def test_progress_out_of_range_is_400(client):
    response = await client.post("/tasks", json={"title": "x", "progress": 150})

    assert response.status_code == 400


async def test_list_tasks_filters_by_status(client):
    await client.post("/tasks", json={"title": "a", "status": "todo"})
    await client.post("/tasks", json={"title": "b", "status": "done"})
    await client.post("/tasks", json={"title": "c", "status": "done"})

    response = await client.get("/tasks", params={"status": "done"})

    assert response.status_code == 200
    assert [task["title"] for task in response.json()["tasks"]] == ["c", "b"]


async def test_update_task_partial(client):
    task_id = (
        await client.post("/tasks", json={"title": "Draft", "tags": ["a"], "progress": 10})
    ).json()["task"]["id"]

    response = await client.put(f"/tasks/{task_id}", json={"status": "in_progress"})

    task = response.json()["task"]
    assert task["status"] == "in_progress"
    assert task["title"] == "Draft"
    assert task["tags"] == ["a"]
    assert task["progress"] == 10


async def test_update_task_clears_nullable_field(client):
    task_id = (
        await client.post("/tasks", json={"title": "Draft", "due_date": "2026-12-01"})
    ).json()["task"]["id"]

    response = await client.put(f"/tasks/{task_id}", json={"due_date": None})

    assert response.json()["task"]["due_date"] is None


async def test_update_task_rejects_blank_title(client):
    task_id = (await client.post("/tasks", json={"title": "Draft"})).json()["task"]["id"]

    response = await client.put(f"/tasks/{task_id}", json={"title": " "})

    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


async def test_update_task_rejects_null_status(client):
    task_id = (await client.post("/tasks", json={"title": "Draft"})).json()["task"]["id"]

    response = await client.put(f"/tasks/{task_id}", json={"status": None})

    assert response.status_code == 400


async def test_other_users_task_is_not_found(client):
    task_id = (await client.post("/tasks", json={"title": "Mine"})).json()["task"]["id"]

    for method in ("get", "put", "delete"):
        kwargs = {"json": {"title": "x"}} if method == "put" else {}
        response = await getattr(client, method)(
            f"/tasks/{task_id}", headers=as_user(USER_B), **kwargs
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    assert (await client.get(f"/tasks/{task_id}")).json()["task"]["title"] == "Mine"


async def test_delete_task(client):
    task_id = (await client.post("/tasks", json={"title": "Temp"})).json()["task"]["id"]

    response = await client.delete(f"/tasks/{task_id}")

    assert response.json() == {"success": True}
    assert (await client.get("/tasks")).json() == {"tasks": []}
