"""Tests for PlannerAPIClient against the in-process app and stub transports."""

import httpx
import pytest
import pytest_asyncio

from planner.client import PlannerAPIClient, PlannerAPIError
from tests.support import USER_B, as_user


@pytest_asyncio.fixture
async def api(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    http_client = httpx.AsyncClient(transport=transport, base_url="http://test")
    client = PlannerAPIClient(http_client=http_client)
    yield client
    await client.close()


def stub_client(handler) -> PlannerAPIClient:
    transport = httpx.MockTransport(handler)
    return PlannerAPIClient(http_client=httpx.AsyncClient(transport=transport, base_url="http://t"))


async def test_note_round_trip(api):
    note = await api.create_note({"title": "Ideas"})
    await api.update_note(note["id"], {"content": "Cold brew"})

    notes = await api.list_notes()

    assert [(row["title"], row["content"]) for row in notes] == [("Ideas", "Cold brew")]
    await api.delete_note(note["id"])
    assert await api.list_notes() == []


async def test_task_status_filter(api):
    await api.create_task({"title": "Edit", "status": "in_progress"})
    await api.create_task({"title": "Shoot"})

    tasks = await api.list_tasks("in_progress")

    assert [task["title"] for task in tasks] == ["Edit"]


async def test_checklist_create_reports_existing_item(api):
    project = await api.create_video_project({"title": "Cold brew"})

    first = await api.create_checklist_item(project["id"], "Title Drafted", "Ideation")
    again = await api.create_checklist_item(project["id"], "Title Drafted", "Ideation")
    updated = await api.update_checklist_item(project["id"], first["id"], {"completed": True})

    assert again["id"] == first["id"]
    assert updated["completed"] is True


async def test_server_error_message_is_surfaced(api):
    with pytest.raises(PlannerAPIError) as exc_info:
        await api.create_video_project({"title": ""})

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Title is required"


async def test_not_found_for_other_users_project(api, client):
    created = await client.post(
        "/video-projects", json={"title": "Theirs"}, headers=as_user(USER_B)
    )

    with pytest.raises(PlannerAPIError) as exc_info:
        await api.get_video_project(created.json()["project"]["id"])

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Video project not found"


async def test_non_json_error_uses_fallback():
    api = stub_client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

    with pytest.raises(PlannerAPIError) as exc_info:
        await api.list_notes()

    assert exc_info.value.message == "Failed to fetch notes"
    assert exc_info.value.status_code == 502
    await api.close()


async def test_network_failure_uses_fallback():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = stub_client(refuse)

    with pytest.raises(PlannerAPIError) as exc_info:
        await api.update_settings("AIza-key")

    assert exc_info.value.message == "Failed to update settings"
    assert exc_info.value.status_code is None
    await api.close()


async def test_access_token_sent_as_bearer():
    api = PlannerAPIClient("http://t", access_token="tok-1")

    assert api.client.headers["Authorization"] == "Bearer tok-1"
    await api.close()
