"""Async HTTP client for the planner API.

Thin data accessors over httpx: each method issues one request, unwraps
the response envelope ({"note": ...}, {"tasks": [...]}) and raises
PlannerAPIError with the server's ``error`` message on failure.

Rows are returned as plain dicts exactly as serialized by the server.

Usage:
    client = PlannerAPIClient("http://localhost:8000", access_token=token)
    project = await client.create_video_project({"title": "Morning routine"})
    await client.close()
"""

from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)

Row = dict[str, Any]


class PlannerAPIError(Exception):
    """Raised when the planner API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the response (None for network errors).
        message: Server-provided ``error`` message, or a generic fallback.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback


class PlannerAPIClient:
    """Client for the planner HTTP API.

    Args:
        base_url: API root, e.g. "http://localhost:8000".
        access_token: Identity provider access token sent as a Bearer token.
        http_client: Optional pre-built httpx client (tests pass one backed
            by ASGITransport or MockTransport).
    """

    def __init__(
        self,
        base_url: str = "",
        access_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self.client = http_client or httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=30.0
        )

    async def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning("planner_api_unreachable", method=method, path=path)
            raise PlannerAPIError(fallback) from e

        if response.status_code >= 400:
            raise PlannerAPIError(
                _error_message(response, fallback), status_code=response.status_code
            )
        return response.json()  # type: ignore[no-any-return]

    # Notes

    async def list_notes(self) -> list[Row]:
        data = await self._request("GET", "/notes", "Failed to fetch notes")
        return data.get("notes") or []

    async def get_note(self, note_id: int) -> Row:
        data = await self._request("GET", f"/notes/{note_id}", "Failed to fetch note")
        return data["note"]

    async def create_note(self, note: dict[str, Any] | None = None) -> Row:
        data = await self._request("POST", "/notes", "Failed to create note", json=note or {})
        return data["note"]

    async def update_note(self, note_id: int, updates: dict[str, Any]) -> Row:
        data = await self._request(
            "PUT", f"/notes/{note_id}", "Failed to update note", json=updates
        )
        return data["note"]

    async def delete_note(self, note_id: int) -> None:
        await self._request("DELETE", f"/notes/{note_id}", "Failed to delete note")

    # Tasks

    async def list_tasks(self, status: str | None = None) -> list[Row]:
        params = {"status": status} if status else None
        data = await self._request("GET", "/tasks", "Failed to fetch tasks", params=params)
        return data.get("tasks") or []

    async def get_task(self, task_id: int) -> Row:
        data = await self._request("GET", f"/tasks/{task_id}", "Failed to fetch task")
        return data["task"]

    async def create_task(self, task: dict[str, Any]) -> Row:
        data = await self._request("POST", "/tasks", "Failed to create task", json=task)
        return data["task"]

    async def update_task(self, task_id: int, updates: dict[str, Any]) -> Row:
        data = await self._request(
            "PUT", f"/tasks/{task_id}", "Failed to update task", json=updates
        )
        return data["task"]

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{task_id}", "Failed to delete task")

    # Video projects

    async def list_video_projects(self) -> list[Row]:
        data = await self._request("GET", "/video-projects", "Failed to fetch video projects")
        return data.get("projects") or []

    async def get_video_project(self, project_id: int) -> Row:
        data = await self._request(
            "GET", f"/video-projects/{project_id}", "Failed to fetch video project"
        )
        return data["project"]

    async def create_video_project(self, project: dict[str, Any]) -> Row:
        data = await self._request(
            "POST", "/video-projects", "Failed to create video project", json=project
        )
        return data["project"]

    async def update_video_project(self, project_id: int, updates: dict[str, Any]) -> Row:
        data = await self._request(
            "PUT",
            f"/video-projects/{project_id}",
            "Failed to update video project",
            json=updates,
        )
        return data["project"]

    async def delete_video_project(self, project_id: int) -> None:
        await self._request(
            "DELETE", f"/video-projects/{project_id}", "Failed to delete video project"
        )

    async def generate_concept(
        self,
        project_id: int,
        title: str,
        hook: str | None = None,
        rough_sketch: str | None = None,
    ) -> dict[str, Any]:
        """Trigger script generation; returns {"concept": ..., "project": ...}."""
        return await self._request(
            "POST",
            "/video-projects/generate-concept",
            "Failed to generate concept",
            json={
                "video_project_id": project_id,
                "title": title,
                "hook": hook,
                "rough_sketch": rough_sketch,
            },
        )

    async def get_suggestions(self, title: str) -> dict[str, Any]:
        """Return {"hooks": [...], "related_videos": [...]} for ``title``."""
        return await self._request(
            "POST",
            "/video-projects/suggestions",
            "Failed to generate suggestions",
            json={"title": title},
        )

    # Checklist

    async def list_checklist(self, project_id: int) -> list[Row]:
        data = await self._request(
            "GET",
            f"/video-projects/{project_id}/checklist",
            "Failed to fetch checklist items",
        )
        return data.get("items") or []

    async def create_checklist_item(
        self,
        project_id: int,
        text: str,
        category: str,
        completed: bool = False,
        display_order: int | None = None,
    ) -> Row:
        body: dict[str, Any] = {"text": text, "category": category, "completed": completed}
        if display_order is not None:
            body["display_order"] = display_order
        data = await self._request(
            "POST",
            f"/video-projects/{project_id}/checklist",
            "Failed to create checklist item",
            json=body,
        )
        return data["item"]

    async def update_checklist_item(
        self, project_id: int, item_id: int, updates: dict[str, Any]
    ) -> Row:
        data = await self._request(
            "PUT",
            f"/video-projects/{project_id}/checklist",
            "Failed to update checklist item",
            json={"item_id": item_id, **updates},
        )
        return data["item"]

    async def delete_checklist_item(self, project_id: int, item_id: int) -> None:
        await self._request(
            "DELETE",
            f"/video-projects/{project_id}/checklist/{item_id}",
            "Failed to delete checklist item",
        )

    # Settings

    async def get_settings(self) -> Row:
        data = await self._request("GET", "/settings", "Failed to fetch settings")
        return data["settings"]

    async def update_settings(self, gemini_api_key: str | None) -> Row:
        data = await self._request(
            "PUT",
            "/settings",
            "Failed to update settings",
            json={"gemini_api_key": gemini_api_key},
        )
        return data["settings"]

    async def close(self) -> None:
        """Close the underlying HTTP connections."""
        await self.client.aclose()
