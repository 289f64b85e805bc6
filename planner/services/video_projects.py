"""Video project persistence.

Deleting a project removes its checklist items in the same transaction.
The foreign key carries no database cascade, so the items go first.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from planner.models import ChecklistItem, VideoProject, VideoStatus
from planner.schemas import VideoProjectCreate
from planner.services.crud import OwnedRepository, clean_text, reject_nulls, require_title

log = structlog.get_logger(__name__)

video_projects = OwnedRepository(VideoProject, "Video project")

TRIMMED_FIELDS = ("hook", "rough_sketch", "notes")
NON_NULLABLE_FIELDS = ("status", "progress")


async def create_video_project(
    session: AsyncSession,
    user_id: str,
    data: VideoProjectCreate,
) -> VideoProject:
    """Validate ``data`` and insert a project in the ideation stage by default.

    Raises:
        ValidationError: Title missing or blank.
    """
    values: dict[str, Any] = {
        "title": require_title(data.title),
        "status": data.status or VideoStatus.IDEATION,
        "progress": data.progress if data.progress is not None else 0,
        "production_date": data.production_date,
        "release_date": data.release_date,
    }
    for field in TRIMMED_FIELDS:
        values[field] = clean_text(getattr(data, field))
    return await video_projects.create(session, user_id, values)


async def update_video_project(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    changes: Mapping[str, Any],
) -> VideoProject:
    """Apply a partial update to a project.

    Raises:
        ValidationError: Title blanked, or status/progress set to null.
        NotFound: Project absent or owned by someone else.
    """
    values = dict(changes)
    if "title" in values:
        values["title"] = require_title(values["title"])
    reject_nulls(values, NON_NULLABLE_FIELDS)
    for field in TRIMMED_FIELDS:
        if field in values:
            values[field] = clean_text(values[field])
    return await video_projects.update(session, user_id, project_id, values)


async def set_generated_concept(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    concept: str,
) -> VideoProject:
    """Store a generated script on the caller's project."""
    return await video_projects.update(
        session, user_id, project_id, {"generated_concept": concept}
    )


async def delete_video_project(session: AsyncSession, user_id: str, project_id: int) -> None:
    """Delete a project together with its checklist items.

    Raises:
        NotFound: Project absent or owned by someone else.
    """
    await video_projects.get(session, user_id, project_id)
    items = await session.execute(
        delete(ChecklistItem).where(
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
        )
    )
    await video_projects.delete(session, user_id, project_id)
    log.info(
        "video_project_deleted",
        user_id=user_id,
        project_id=project_id,
        checklist_items_deleted=items.rowcount,
    )
