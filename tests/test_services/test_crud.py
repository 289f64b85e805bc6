"""Tests for owner-scoped CRUD helpers."""

import pytest

from planner.exceptions import NotFound, ValidationError
from planner.models import Note
from planner.services.crud import OwnedRepository, clean_text, reject_nulls, require_title
from tests.support import USER_A, USER_B

notes = OwnedRepository(Note, "Note")


@pytest.mark.parametrize(
    "value, expected",
    [(None, None), ("", None), ("   ", None), ("  Plan  ", "Plan")],
)
def test_clean_text(value, expected):
    assert clean_text(value) == expected


def test_require_title_uses_custom_message():
    with pytest.raises(ValidationError, match="Name please"):
        require_title("  ", "Name please")


def test_reject_nulls_only_checks_present_fields():
    reject_nulls({"title": None}, ("status",))

    with pytest.raises(ValidationError, match="status cannot be null"):
        reject_nulls({"status": None}, ("status",))


async def test_get_hides_other_users_rows(async_session):
    note = await notes.create(async_session, USER_A, {"title": "Mine"})

    with pytest.raises(NotFound, match="Note not found"):
        await notes.get(async_session, USER_B, note.id)
    assert (await notes.get(async_session, USER_A, note.id)).title == "Mine"


async def test_list_ignores_none_filters(async_session):
    await notes.create(async_session, USER_A, {"title": "One"})
    await notes.create(async_session, USER_A, {"title": "Two"})

    rows = await notes.list(async_session, USER_A, title=None)

    assert [row.title for row in rows] == ["Two", "One"]


async def test_list_applies_equality_filters(async_session):
    await notes.create(async_session, USER_A, {"title": "One"})
    await notes.create(async_session, USER_A, {"title": "Two"})

    rows = await notes.list(async_session, USER_A, title="One")

    assert [row.title for row in rows] == ["One"]


async def test_update_refreshes_updated_at(async_session):
    note = await notes.create(async_session, USER_A, {"title": "Draft"})
    created_at = note.created_at

    updated = await notes.update(async_session, USER_A, note.id, {})

    assert updated.updated_at >= created_at
    assert updated.title == "Draft"


async def test_update_other_users_row_raises(async_session):
    note = await notes.create(async_session, USER_A, {"title": "Draft"})

    with pytest.raises(NotFound):
        await notes.update(async_session, USER_B, note.id, {"title": "Stolen"})


async def test_delete_is_owner_scoped(async_session):
    note = await notes.create(async_session, USER_A, {"title": "Draft"})

    with pytest.raises(NotFound):
        await notes.delete(async_session, USER_B, note.id)
    await notes.delete(async_session, USER_A, note.id)
    assert await notes.find(async_session, USER_A, note.id) is None
