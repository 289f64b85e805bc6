"""Production checklist state for one video project.

A project opened for the first time has no checklist. The default taxonomy
(planner.models.CHECKLIST_CATEGORIES) is then created with one concurrent
request per item. Creation is idempotent on the server, so seeding twice,
or from two windows at once, yields a single copy.

Toggling and removing items are optimistic: the local list changes first
and is restored if the server rejects the change.
"""

import asyncio
from typing import Any

import structlog

from planner.client.api import PlannerAPIClient
from planner.client.optimistic import optimistic_mutation
from planner.models import CHECKLIST_CATEGORIES

log = structlog.get_logger(__name__)

Row = dict[str, Any]


async def seed_default_checklist(
    api: PlannerAPIClient,
    project_id: int,
    categories: dict[str, list[str]] | None = None,
) -> list[Row]:
    """Create the default items for ``project_id`` unless it already has some.

    Items are numbered in taxonomy order across all categories.

    Returns:
        The project's checklist as listed by the server.

    Raises:
        PlannerAPIError: Any create or list request failed.
    """
    existing = await api.list_checklist(project_id)
    if existing:
        return existing

    categories = categories or CHECKLIST_CATEGORIES
    defaults = [
        (text, category)
        for category, texts in categories.items()
        for text in texts
    ]
    await asyncio.gather(
        *(
            api.create_checklist_item(project_id, text, category, display_order=position)
            for position, (text, category) in enumerate(defaults)
        )
    )
    items = await api.list_checklist(project_id)
    log.info("checklist_seeded", project_id=project_id, items=len(items))
    return items


def group_by_category(items: list[Row]) -> dict[str, list[Row]]:
    """Group listed items by category, keeping server order within each."""
    grouped: dict[str, list[Row]] = {}
    for item in items:
        grouped.setdefault(item["category"], []).append(item)
    return grouped


def completion_percent(items: list[Row]) -> int:
    """Percentage of completed items, rounded down; 0 for an empty list."""
    if not items:
        return 0
    done = sum(1 for item in items if item.get("completed"))
    return done * 100 // len(items)


class ChecklistState:
    """Local copy of a project's checklist.

    Attributes:
        items: Items in server order.
        error: Message of the last failed mutation.
    """

    def __init__(self, api: PlannerAPIClient, project_id: int):
        self.api = api
        self.project_id = project_id
        self.items: list[Row] = []
        self.error: str | None = None

    async def load(self, seed: bool = True) -> None:
        """Fetch the checklist, seeding the defaults when it is empty."""
        if seed:
            self.items = await seed_default_checklist(self.api, self.project_id)
        else:
            self.items = await self.api.list_checklist(self.project_id)

    def _index(self, item_id: int) -> int:
        for index, item in enumerate(self.items):
            if item["id"] == item_id:
                return index
        raise KeyError(item_id)

    def _replace(self, item_id: int, row: Row) -> None:
        # Positions can shift while a request is in flight; gone rows stay gone
        for index, item in enumerate(self.items):
            if item["id"] == item_id:
                self.items[index] = row
                return

    async def toggle(self, item_id: int) -> Row:
        """Flip ``completed`` on one item."""
        completed = not self.items[self._index(item_id)]["completed"]

        def apply() -> Row:
            index = self._index(item_id)
            previous = self.items[index]
            self.items[index] = {**previous, "completed": completed}
            return previous

        return await self._mutate(
            apply,
            lambda: self.api.update_checklist_item(
                self.project_id, item_id, {"completed": completed}
            ),
            lambda previous: self._replace(item_id, previous),
            lambda saved: self._replace(item_id, saved),
        )

    async def add(self, text: str, category: str) -> Row:
        """Append an item; an identical existing item is returned instead."""
        item = await self.api.create_checklist_item(self.project_id, text, category)
        if all(existing["id"] != item["id"] for existing in self.items):
            self.items.append(item)
        return item

    async def remove(self, item_id: int) -> None:
        """Delete one item."""

        def apply() -> tuple[int, Row]:
            index = self._index(item_id)
            return index, self.items.pop(index)

        def restore(removed: tuple[int, Row]) -> None:
            index, row = removed
            if all(item["id"] != item_id for item in self.items):
                self.items.insert(min(index, len(self.items)), row)

        await self._mutate(
            apply,
            lambda: self.api.delete_checklist_item(self.project_id, item_id),
            restore,
        )

    async def _mutate(self, apply, request, restore, reconcile=None):
        try:
            result = await optimistic_mutation(apply, request, restore, reconcile)
        except Exception as e:
            self.error = getattr(e, "message", None) or str(e)
            raise
        self.error = None
        return result
