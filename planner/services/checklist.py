"""Video checklist items with idempotent creation.

The client seeds the default taxonomy by firing one create per item
concurrently, so creation must never produce duplicates or fail on a
race. Creation:
    1. Return the existing (project, owner, text, category) row if any
    2. Otherwise compute the next display_order within the category
    3. Insert with ON CONFLICT DO NOTHING (PostgreSQL, SQLite) or a
       savepoint-guarded insert (other dialects)
    4. On conflict, return the row that won the race

Text is stored trimmed; the uniqueness constraint applies to the
trimmed value.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from planner.exceptions import NotFound, ValidationError
from planner.models import ChecklistItem, utcnow
from planner.schemas import ChecklistItemCreate
from planner.services.crud import clean_text, reject_nulls
from planner.services.video_projects import video_projects

log = structlog.get_logger(__name__)

CONFLICT_COLUMNS = ("video_project_id", "user_id", "text", "category")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def list_checklist_items(
    session: AsyncSession,
    user_id: str,
    project_id: int,
) -> list[ChecklistItem]:
    """Return a project's items grouped by category, then display order."""
    result = await session.execute(
        select(ChecklistItem)
        .where(
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
        )
        .order_by(
            ChecklistItem.category.asc(),
            ChecklistItem.display_order.asc(),
            ChecklistItem.created_at.asc(),
        )
    )
    return list(result.scalars().all())


async def find_checklist_item(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    text: str,
    category: str,
) -> ChecklistItem | None:
    """Look up an item by its natural key."""
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
            ChecklistItem.text == text,
            ChecklistItem.category == category,
        )
    )
    return result.scalar_one_or_none()


async def next_display_order(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    category: str,
) -> int:
    """Return one more than the highest display_order in the category, or 0."""
    result = await session.execute(
        select(func.max(ChecklistItem.display_order)).where(
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
            ChecklistItem.category == category,
        )
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def _insert_ignoring_conflict(
    session: AsyncSession,
    values: dict[str, Any],
) -> int | None:
    """Insert a row; return its id, or None if the natural key already exists."""
    dialect = session.get_bind().dialect.name
    dialect_insert = _DIALECT_INSERTS.get(dialect)

    if dialect_insert is not None:
        now = utcnow()
        statement = (
            dialect_insert(ChecklistItem)
            .values(created_at=now, updated_at=now, **values)
            .on_conflict_do_nothing(index_elements=list(CONFLICT_COLUMNS))
            .returning(ChecklistItem.id)
        )
        result = await session.execute(statement)
        return result.scalar_one_or_none()

    item = ChecklistItem(**values)
    try:
        async with session.begin_nested():
            session.add(item)
    except IntegrityError:
        return None
    return item.id


async def create_checklist_item(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    data: ChecklistItemCreate,
) -> tuple[ChecklistItem, bool]:
    """Create an item, or return the existing one with the same text and category.

    Returns:
        Tuple of (item, created). ``created`` is False when an existing
        row was returned.

    Raises:
        ValidationError: Text or category missing.
        NotFound: Project absent or owned by someone else.
    """
    text = clean_text(data.text)
    category = clean_text(data.category)
    if text is None or category is None:
        raise ValidationError("text and category are required")

    await video_projects.get(session, user_id, project_id)

    existing = await find_checklist_item(session, user_id, project_id, text, category)
    if existing is not None:
        return existing, False

    display_order = data.display_order
    if display_order is None:
        display_order = await next_display_order(session, user_id, project_id, category)

    item_id = await _insert_ignoring_conflict(
        session,
        {
            "user_id": user_id,
            "video_project_id": project_id,
            "text": text,
            "category": category,
            "completed": bool(data.completed),
            "display_order": display_order,
        },
    )

    if item_id is None:
        existing = await find_checklist_item(session, user_id, project_id, text, category)
        if existing is None:
            # Conflicting row vanished before the re-read
            raise NotFound("Checklist item not found")
        log.info(
            "checklist_item_conflict_resolved",
            user_id=user_id,
            project_id=project_id,
            item_id=existing.id,
        )
        return existing, False

    item = await session.get(ChecklistItem, item_id, populate_existing=True)
    if item is None:
        raise NotFound("Checklist item not found")
    log.info(
        "checklist_item_created",
        user_id=user_id,
        project_id=project_id,
        item_id=item_id,
        category=category,
        display_order=display_order,
    )
    return item, True


async def update_checklist_item(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    item_id: int | None,
    changes: Mapping[str, Any],
) -> ChecklistItem:
    """Apply a partial update to one item of the caller's project.

    Raises:
        ValidationError: ``item_id`` missing, blank text/category, or the
            change collides with another item.
        NotFound: Item absent, in another project, or owned by someone else.
    """
    if item_id is None:
        raise ValidationError("item_id is required")

    values = dict(changes)
    reject_nulls(values, ("completed", "display_order"))
    for field in ("text", "category"):
        if field in values:
            values[field] = clean_text(values[field])
            if values[field] is None:
                raise ValidationError(f"{field} cannot be empty")

    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.id == item_id,
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFound("Checklist item not found")

    for field, value in values.items():
        setattr(item, field, value)
    item.updated_at = utcnow()
    try:
        await session.flush()
    except IntegrityError as e:
        raise ValidationError("Checklist item already exists") from e
    await session.refresh(item)

    log.info(
        "checklist_item_updated",
        user_id=user_id,
        project_id=project_id,
        item_id=item_id,
        fields=sorted(values),
    )
    return item


async def delete_checklist_item(
    session: AsyncSession,
    user_id: str,
    project_id: int,
    item_id: int,
) -> None:
    """Delete one item of the caller's project.

    Raises:
        NotFound: Item absent, in another project, or owned by someone else.
    """
    result = await session.execute(
        delete(ChecklistItem).where(
            ChecklistItem.id == item_id,
            ChecklistItem.video_project_id == project_id,
            ChecklistItem.user_id == user_id,
        )
    )
    log.info(
        "checklist_item_deleted",
        user_id=user_id,
        project_id=project_id,
        item_id=item_id,
        deleted=result.rowcount,
    )
    if not result.rowcount:
        raise NotFound("Checklist item not found")
