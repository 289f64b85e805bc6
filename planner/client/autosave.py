"""Debounced autosave for a single selected row (note, video project).

State machine:
    clean  --edit-->          dirty
    dirty  --debounce/flush--> saving
    saving --success-->        clean (or dirty if edits were queued)
    saving --failure-->        dirty with ``error`` recorded

Rules:
- Every edit restarts the debounce timer (1 s by default)
- At most one save is in flight; edits made while saving are queued and
  sent by the next cycle
- A successful save adopts the server row (queued edits stay on top)
- A failed save reverts the fields it carried to the last server value
- Selecting another row flushes the outgoing one first
- close() cancels the timer

Usage:
    editor = AutosaveEditor(api.update_note)
    await editor.select(note)
    editor.edit(title="Draft")
    await editor.flush()
"""

import asyncio
import enum
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

log = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0

Row = dict[str, Any]
SaveFunc = Callable[[int, Row], Awaitable[Row]]


class SaveState(enum.Enum):
    """Save status shown next to the editor."""

    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class AutosaveEditor:
    """Holds the displayed copy of one row and saves edits in the background.

    Args:
        save: Coroutine function ``(row_id, changes) -> server row``.
        debounce: Seconds of inactivity before a save starts.

    Attributes:
        item: Row as currently displayed (server row plus unsaved edits).
        server_item: Last row confirmed by the server.
        state: Current SaveState.
        error: Message of the last failed save, cleared by the next success.
    """

    def __init__(self, save: SaveFunc, debounce: float = DEFAULT_DEBOUNCE_SECONDS):
        self._save = save
        self.debounce = debounce
        self.item: Row | None = None
        self.server_item: Row | None = None
        self.state = SaveState.CLEAN
        self.error: str | None = None
        self._pending: Row = {}
        self._timer: asyncio.TimerHandle | None = None
        self._save_task: asyncio.Task[None] | None = None

    @property
    def item_id(self) -> int | None:
        return self.item["id"] if self.item else None

    @property
    def pending(self) -> Row:
        """Edits not yet sent to the server."""
        return dict(self._pending)

    async def select(self, row: Row) -> None:
        """Show ``row``, flushing unsaved edits of the current row first."""
        if self.item is not None and row.get("id") == self.item_id:
            return
        if self.item is not None:
            await self.flush()
        self.item = dict(row)
        self.server_item = dict(row)
        self._pending = {}
        self.error = None
        self.state = SaveState.CLEAN

    def edit(self, **changes: Any) -> None:
        """Apply ``changes`` locally and (re)start the debounce timer."""
        if self.item is None:
            raise RuntimeError("No row selected")
        self.item.update(changes)
        self._pending.update(changes)
        if self.state is not SaveState.SAVING:
            self.state = SaveState.DIRTY
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(self.debounce, self._on_timer)

    async def flush(self) -> bool:
        """Save pending edits now, bypassing the debounce.

        Returns:
            True if everything was saved, False if a save failed.
        """
        self._cancel_timer()
        if self._save_task is None or self._save_task.done():
            if not self._pending:
                return self.error is None
            self._save_task = asyncio.create_task(self._run_save())
        await self._save_task
        return self.error is None

    async def close(self) -> None:
        """Cancel the timer and wait for an in-flight save; drops unsent edits."""
        self._cancel_timer()
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        self._pending = {}

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self._save_task is None or self._save_task.done():
            self._save_task = asyncio.create_task(self._run_save())
        # Otherwise the in-flight save picks the pending edits up when it returns

    async def _run_save(self) -> None:
        failed = False
        while self._pending and self._timer is None and self.item is not None:
            row_id = self.item["id"]
            changes = self._pending
            self._pending = {}
            self.state = SaveState.SAVING
            try:
                saved = await self._save(row_id, changes)
            except Exception as e:
                failed = True
                self.error = getattr(e, "message", None) or str(e) or "Failed to save"
                self._revert(changes)
                log.warning(
                    "autosave_failed",
                    row_id=row_id,
                    fields=sorted(changes),
                    error_type=type(e).__name__,
                )
            else:
                failed = False
                self.error = None
                self.server_item = dict(saved)
                self.item = {**saved, **self._pending}
        self.state = SaveState.DIRTY if self._pending or failed else SaveState.CLEAN

    def _revert(self, changes: Row) -> None:
        if self.item is None or self.server_item is None:
            return
        for field in changes:
            if field not in self._pending:
                self.item[field] = self.server_item.get(field)
