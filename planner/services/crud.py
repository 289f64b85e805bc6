"""Owner-scoped CRUD shared by every resource.

Every statement issued here is filtered on ``user_id``. A row that exists
but belongs to another user is indistinguishable from a missing row: both
raise NotFound with the same message.

Architecture:
- Repositories never commit; the request session (planner.database.get_session)
  commits on success and rolls back on error
- Updates are partial: only keys present in ``changes`` are written
- ``updated_at`` is refreshed on every update, even an empty one
"""

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from planner.exceptions import NotFound, ValidationError
from planner.models import Base, utcnow

log = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def clean_text(value: str | None) -> str | None:
    """Trim ``value``; blank strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_title(value: str | None, message: str = "Title is required") -> str:
    """Return the trimmed title or raise ValidationError if blank."""
    title = clean_text(value)
    if title is None:
        raise ValidationError(message)
    return title


def reject_nulls(changes: Mapping[str, Any], fields: tuple[str, ...]) -> None:
    """Raise ValidationError if any non-nullable field is explicitly null."""
    for field in fields:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")


class OwnedRepository(Generic[ModelT]):
    """List/get/create/update/delete for one owner-scoped model.

    Args:
        model: Mapped class with ``id``, ``user_id`` and ``created_at`` columns.
        label: Human-readable name used in error messages ("Note", "Task").
    """

    def __init__(self, model: type[ModelT], label: str):
        self.model = model
        self.label = label

    async def list(
        self,
        session: AsyncSession,
        user_id: str,
        **filters: Any,
    ) -> list[ModelT]:
        """Return the caller's rows, newest first.

        Keyword arguments add equality filters; None values are ignored.
        """
        model: Any = self.model
        query = select(self.model).where(model.user_id == user_id)
        for field, value in filters.items():
            if value is not None:
                query = query.where(getattr(model, field) == value)
        query = query.order_by(model.created_at.desc(), model.id.desc())

        result = await session.execute(query)
        return list(result.scalars().all())

    async def find(self, session: AsyncSession, user_id: str, row_id: int) -> ModelT | None:
        """Return the row matching id AND owner, or None."""
        model: Any = self.model
        result = await session.execute(
            select(self.model).where(model.id == row_id, model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get(self, session: AsyncSession, user_id: str, row_id: int) -> ModelT:
        """Return the row matching id AND owner.

        Raises:
            NotFound: No such row for this caller.
        """
        row = await self.find(session, user_id, row_id)
        if row is None:
            raise NotFound(f"{self.label} not found")
        return row

    async def create(
        self,
        session: AsyncSession,
        user_id: str,
        values: Mapping[str, Any],
    ) -> ModelT:
        """Insert a row owned by the caller and return it with id and timestamps."""
        row = self.model(user_id=user_id, **values)
        session.add(row)
        await session.flush()
        await session.refresh(row)
        log.info(
            "row_created",
            table=self.model.__tablename__,
            user_id=user_id,
            row_id=row.id,  # type: ignore[attr-defined]
        )
        return row

    async def update(
        self,
        session: AsyncSession,
        user_id: str,
        row_id: int,
        changes: Mapping[str, Any],
    ) -> ModelT:
        """Apply a partial update to the caller's row.

        Raises:
            NotFound: No such row for this caller.
        """
        row = await self.get(session, user_id, row_id)
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = utcnow()  # type: ignore[attr-defined]
        await session.flush()
        await session.refresh(row)
        log.info(
            "row_updated",
            table=self.model.__tablename__,
            user_id=user_id,
            row_id=row_id,
            fields=sorted(changes),
        )
        return row

    async def delete(self, session: AsyncSession, user_id: str, row_id: int) -> None:
        """Delete the caller's row.

        Raises:
            NotFound: No such row for this caller.
        """
        model: Any = self.model
        result = await session.execute(
            delete(self.model).where(model.id == row_id, model.user_id == user_id)
        )
        log.info(
            "row_deleted",
            table=self.model.__tablename__,
            user_id=user_id,
            row_id=row_id,
            deleted=result.rowcount,
        )
        if not result.rowcount:
            raise NotFound(f"{self.label} not found")
