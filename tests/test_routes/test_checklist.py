"""Tests for /video-projects/{id}/checklist routes.

Tests cover:
- Required fields and trimming
- Idempotent create (201 then 200, concurrent creates, lost race)
- display_order numbering and list ordering
- Update and delete scoping
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from planner.models import ChecklistItem
from planner.services import checklist as checklist_service
from tests.support import USER_B, as_user


@pytest_asyncio.fixture
async def project_id(client) -> int:
    response = await client.post("/video-projects", json={"title": "Cold brew at home"})
    return response.json()["project"]["id"]


def checklist_url(project_id: int) -> str:
    return f"/video-projects/{project_id}/checklist"


async def count_items(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(ChecklistItem))


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"text": "Title Drafted"},
        {"category": "Ideation"},
        {"text": " ", "category": "Ideation"},
    ],
)
async def test_create_requires_text_and_category(client, project_id, body):
    response = await client.post(checklist_url(project_id), json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "text and category are required"}


async def test_create_is_idempotent(client, project_id, session_factory):
    body = {"text": "Title Drafted", "category": "Ideation"}

    first = await client.post(checklist_url(project_id), json=body)
    second = await client.post(
        checklist_url(project_id), json={"text": "  Title Drafted ", "category": "Ideation"}
    )

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["item"]["id"] == first.json()["item"]["id"]
    assert first.json()["item"]["text"] == "Title Drafted"
    assert await count_items(session_factory) == 1


async def test_display_order_counts_up_within_category(client, project_id):
    orders = []
    for text in ("Title Drafted", "Research Completed", "3-Sec HOOK"):
        response = await client.post(
            checklist_url(project_id), json={"text": text, "category": "Ideation"}
        )
        orders.append(response.json()["item"]["display_order"])
    other = await client.post(
        checklist_url(project_id), json={"text": "Equipment Check", "category": "Filming"}
    )

    assert orders == [0, 1, 2]
    assert other.json()["item"]["display_order"] == 0


async def test_explicit_display_order_is_kept(client, project_id):
    response = await client.post(
        checklist_url(project_id),
        json={"text": "Sound Cleanup", "category": "Video Editing", "display_order": 14},
    )

    assert response.json()["item"]["display_order"] == 14


async def test_list_orders_by_category_then_display_order(client, project_id):
    for text, category, order in [
        ("Thumbnail Design", "Publish/Market", 0),
        ("B", "Ideation", 1),
        ("A", "Ideation", 0),
    ]:
        await client.post(
            checklist_url(project_id),
            json={"text": text, "category": category, "display_order": order},
        )

    response = await client.get(checklist_url(project_id))

    items = response.json()["items"]
    assert [(item["category"], item["text"]) for item in items] == [
        ("Ideation", "A"),
        ("Ideation", "B"),
        ("Publish/Market", "Thumbnail Design"),
    ]


async def test_concurrent_creates_store_one_row(client, project_id, session_factory):
    body = {"text": "Title Drafted", "category": "Ideation"}

    responses = await asyncio.gather(
        *(client.post(checklist_url(project_id), json=body) for _ in range(5))
    )

    statuses = sorted(response.status_code for response in responses)
    assert statuses == [200, 200, 200, 200, 201]
    assert len({response.json()["item"]["id"] for response in responses}) == 1
    assert await count_items(session_factory) == 1


async def test_lost_race_returns_existing_row(client, project_id, monkeypatch):
    body = {"text": "Title Drafted", "category": "Ideation"}
    first = await client.post(checklist_url(project_id), json=body)

    real_find = checklist_service.find_checklist_item
    calls = []

    async def stale_first_lookup(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return None
        return await real_find(*args, **kwargs)

    monkeypatch.setattr(checklist_service, "find_checklist_item", stale_first_lookup)

    response = await client.post(checklist_url(project_id), json=body)

    assert response.status_code == 200
    assert response.json()["item"]["id"] == first.json()["item"]["id"]
    assert len(calls) == 2


async def test_create_on_foreign_project_is_not_found(client, project_id):
    response = await client.post(
        checklist_url(project_id),
        json={"text": "Title Drafted", "category": "Ideation"},
        headers=as_user(USER_B),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Video project not found"}


async def test_update_item(client, project_id):
    created = await client.post(
        checklist_url(project_id), json={"text": "Title Drafted", "category": "Ideation"}
    )
    item_id = created.json()["item"]["id"]

    response = await client.put(
        checklist_url(project_id), json={"item_id": item_id, "completed": True}
    )

    assert response.status_code == 200
    item = response.json()["item"]
    assert item["completed"] is True
    assert item["text"] == "Title Drafted"


async def test_update_requires_item_id(client, project_id):
    response = await client.put(checklist_url(project_id), json={"completed": True})

    assert response.status_code == 400
    assert response.json() == {"error": "item_id is required"}


async def test_update_other_users_item_is_not_found(client, project_id):
    created = await client.post(
        checklist_url(project_id), json={"text": "Title Drafted", "category": "Ideation"}
    )

    response = await client.put(
        checklist_url(project_id),
        json={"item_id": created.json()["item"]["id"], "completed": True},
        headers=as_user(USER_B),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Checklist item not found"}


async def test_update_into_duplicate_is_rejected(client, project_id):
    await client.post(
        checklist_url(project_id), json={"text": "Title Drafted", "category": "Ideation"}
    )
    other = await client.post(
        checklist_url(project_id), json={"text": "Intro Stated", "category": "Ideation"}
    )

    response = await client.put(
        checklist_url(project_id),
        json={"item_id": other.json()["item"]["id"], "text": "Title Drafted"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Checklist item already exists"}


async def test_delete_item(client, project_id, session_factory):
    created = await client.post(
        checklist_url(project_id), json={"text": "Title Drafted", "category": "Ideation"}
    )

    response = await client.delete(
        f"{checklist_url(project_id)}/{created.json()['item']['id']}"
    )

    assert response.json() == {"success": True}
    assert await count_items(session_factory) == 0


async def test_delete_other_users_item_is_not_found(client, project_id, session_factory):
    created = await client.post(
        checklist_url(project_id), json={"text": "Title Drafted", "category": "Ideation"}
    )

    response = await client.delete(
        f"{checklist_url(project_id)}/{created.json()['item']['id']}",
        headers=as_user(USER_B),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Checklist item not found"}
    assert await count_items(session_factory) == 1
