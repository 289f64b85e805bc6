"""Task persistence and input normalization.

Create defaults:
    status todo, progress 0, tags and assignees empty lists.
    Blank description/category are stored as null.

Updates are partial. ``title`` may be changed but never blanked; list and
status fields cannot be set to null.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from planner.models import Task, TaskStatus
from planner.schemas import TaskCreate
from planner.services.crud import OwnedRepository, clean_text, reject_nulls, require_title

tasks = OwnedRepository(Task, "Task")

NON_NULLABLE_FIELDS = ("status", "tags", "progress", "assignees")


async def list_tasks(
    session: AsyncSession,
    user_id: str,
    status: TaskStatus | None = None,
) -> list[Task]:
    """Return the caller's tasks, optionally restricted to one status."""
    return await tasks.list(session, user_id, status=status)


async def create_task(session: AsyncSession, user_id: str, data: TaskCreate) -> Task:
    """Validate ``data`` and insert a task.

    Raises:
        ValidationError: Title missing or blank.
    """
    title = require_title(data.title)
    return await tasks.create(
        session,
        user_id,
        {
            "title": title,
            "description": clean_text(data.description),
            "status": data.status or TaskStatus.TODO,
            "category": clean_text(data.category),
            "tags": data.tags or [],
            "progress": data.progress if data.progress is not None else 0,
            "due_date": data.due_date,
            "assignees": data.assignees or [],
        },
    )


async def update_task(
    session: AsyncSession,
    user_id: str,
    task_id: int,
    changes: Mapping[str, Any],
) -> Task:
    """Apply a partial update to a task.

    Raises:
        ValidationError: Title blanked, or a non-nullable field set to null.
        NotFound: Task absent or owned by someone else.
    """
    values = dict(changes)
    if "title" in values:
        values["title"] = require_title(values["title"])
    reject_nulls(values, NON_NULLABLE_FIELDS)
    for field in ("description", "category"):
        if field in values:
            values[field] = clean_text(values[field])
    return await tasks.update(session, user_id, task_id, values)
