"""Note persistence.

Notes have no required fields: a missing or blank title falls back to
"Untitled Note" and missing content to an empty string.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from planner.models import Note
from planner.services.crud import OwnedRepository, clean_text

DEFAULT_NOTE_TITLE = "Untitled Note"

notes = OwnedRepository(Note, "Note")


async def create_note(
    session: AsyncSession,
    user_id: str,
    title: str | None = None,
    content: str | None = None,
) -> Note:
    """Create a note, applying the title and content defaults."""
    return await notes.create(
        session,
        user_id,
        {
            "title": clean_text(title) or DEFAULT_NOTE_TITLE,
            "content": content or "",
        },
    )


async def update_note(
    session: AsyncSession,
    user_id: str,
    note_id: int,
    changes: Mapping[str, Any],
) -> Note:
    """Apply a partial update; null or blank title and null content become the defaults."""
    values = dict(changes)
    if "title" in values:
        values["title"] = clean_text(values["title"]) or DEFAULT_NOTE_TITLE
    if "content" in values and values["content"] is None:
        values["content"] = ""
    return await notes.update(session, user_id, note_id, values)
