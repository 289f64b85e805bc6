"""Tests for the debounced autosave editor.

Tests cover:
- A burst of edits producing one save with the final values
- flush() bypassing the debounce
- Failed saves reverting the fields they carried
- Edits made while a save is in flight
- select() flushing the outgoing row, close() cancelling the timer
"""

import asyncio

import pytest
import pytest_asyncio

from planner.client import AutosaveEditor, PlannerAPIError, SaveState

DEBOUNCE = 0.05


class FakeNotes:
    """Records saves and answers like PUT /notes/{id}."""

    def __init__(self):
        self.rows = {
            1: {"id": 1, "title": "Plan", "content": ""},
            2: {"id": 2, "title": "Ideas", "content": ""},
        }
        self.calls = []
        self.fail_with = None
        self.gate = None
        self.started = asyncio.Event()

    async def save(self, row_id, changes):
        self.calls.append((row_id, dict(changes)))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.rows[row_id] = {**self.rows[row_id], **changes}
        return dict(self.rows[row_id])


@pytest.fixture
def backend() -> FakeNotes:
    return FakeNotes()


@pytest_asyncio.fixture
async def editor(backend):
    autosave = AutosaveEditor(backend.save, debounce=DEBOUNCE)
    await autosave.select(backend.rows[1])
    yield autosave
    await autosave.close()


async def test_burst_of_edits_saves_once_with_final_value(editor, backend):
    for title in ("P", "Pl", "Pla", "Plan B"):
        editor.edit(title=title)
    assert editor.state is SaveState.DIRTY

    await asyncio.sleep(DEBOUNCE * 4)

    assert backend.calls == [(1, {"title": "Plan B"})]
    assert editor.state is SaveState.CLEAN
    assert editor.server_item["title"] == "Plan B"


async def test_flush_saves_immediately(editor, backend):
    editor.edit(content="Cold brew")

    assert await editor.flush() is True

    assert backend.calls == [(1, {"content": "Cold brew"})]
    assert editor.pending == {}


async def test_flush_without_edits_does_nothing(editor, backend):
    assert await editor.flush() is True
    assert backend.calls == []


async def test_failed_save_reverts_fields(editor, backend):
    backend.fail_with = PlannerAPIError("Failed to update note", status_code=500)
    editor.edit(title="Lost")

    assert await editor.flush() is False

    assert editor.item["title"] == "Plan"
    assert editor.error == "Failed to update note"
    assert editor.state is SaveState.DIRTY


async def test_next_success_clears_error(editor, backend):
    backend.fail_with = PlannerAPIError("Failed to update note")
    editor.edit(title="Lost")
    await editor.flush()

    backend.fail_with = None
    editor.edit(title="Kept")
    assert await editor.flush() is True

    assert editor.error is None
    assert editor.item["title"] == "Kept"
    assert editor.state is SaveState.CLEAN


async def test_edits_during_save_are_sent_next(editor, backend):
    backend.gate = asyncio.Event()
    editor.edit(title="First")
    flushing = asyncio.create_task(editor.flush())
    await backend.started.wait()

    editor.edit(content="typed while saving")
    assert editor.state is SaveState.SAVING
    backend.gate.set()
    await flushing

    assert editor.item["content"] == "typed while saving"
    assert editor.state is SaveState.DIRTY

    await asyncio.sleep(DEBOUNCE * 4)

    assert backend.calls == [
        (1, {"title": "First"}),
        (1, {"content": "typed while saving"}),
    ]
    assert editor.state is SaveState.CLEAN


async def test_failed_save_keeps_fields_edited_meanwhile(editor, backend):
    backend.gate = asyncio.Event()
    backend.fail_with = PlannerAPIError("Failed to update note")
    editor.edit(title="First")
    flushing = asyncio.create_task(editor.flush())
    await backend.started.wait()

    editor.edit(title="Second")
    backend.gate.set()
    await flushing

    assert editor.item["title"] == "Second"
    assert editor.pending == {"title": "Second"}


async def test_select_flushes_outgoing_row(editor, backend):
    editor.edit(title="Unsaved")

    await editor.select(backend.rows[2])

    assert backend.calls == [(1, {"title": "Unsaved"})]
    assert editor.item_id == 2
    assert editor.state is SaveState.CLEAN


async def test_close_cancels_pending_save(editor, backend):
    editor.edit(title="Dropped")

    await editor.close()
    await asyncio.sleep(DEBOUNCE * 4)

    assert backend.calls == []


async def test_edit_without_selection_is_an_error(backend):
    autosave = AutosaveEditor(backend.save, debounce=DEBOUNCE)

    with pytest.raises(RuntimeError):
        autosave.edit(title="x")
