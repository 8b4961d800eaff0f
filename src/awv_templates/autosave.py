"""AutoSaver — debounced, last-writer-wins saving of editor snapshots.

Each call to :meth:`AutoSaver.schedule` replaces the pending snapshot and
restarts the timer; the save fires once the editor has been quiet for
``delay`` seconds.  A save that has already started is never awaited or
cancelled by later edits: its snapshot simply gets overwritten by the
next one at the store.

Usage::

    saver = AutoSaver(lambda t: service.save_draft(store, template_id, t))
    editor = TemplateEditor(template, on_change=saver.schedule)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from awv_templates.constants import AUTOSAVE_DELAY_SECONDS
from awv_templates.models.template import Template

logger = logging.getLogger(__name__)

SaveFn = Callable[[Template], Awaitable[Any]]


def is_saveable(snapshot: Template) -> bool:
    """Drafts without a name or without sections are not worth saving."""
    return bool(snapshot.name.strip()) and bool(snapshot.sections)


class AutoSaver:
    """Debounces snapshot saves on the running event loop."""

    def __init__(self, save: SaveFn, delay: float = AUTOSAVE_DELAY_SECONDS) -> None:
        self._save = save
        self._delay = delay
        self._pending: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()
        self.last_saved: Optional[Template] = None
        self.last_error: Optional[BaseException] = None
        # Sequence numbers of started saves and of the one last recorded
        self._started = 0
        self._recorded = 0

    @property
    def pending(self) -> bool:
        """True while a save is waiting for its timer."""
        return self._pending is not None and not self._pending.done()

    def schedule(self, snapshot: Template) -> None:
        """Replace the pending snapshot and restart the timer.

        Must be called from inside a running event loop.
        """
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(
            self._save_later(snapshot)
        )

    def cancel(self) -> None:
        """Abandon the pending save, if any.  In-flight saves keep running."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def flush(self) -> None:
        """Wait for every save that has already started."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _save_later(self, snapshot: Template) -> None:
        await asyncio.sleep(self._delay)

        # From here on the save is in flight and no longer cancellable
        task = asyncio.current_task()
        if self._pending is task:
            self._pending = None
        if task is not None:
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

        if not is_saveable(snapshot):
            logger.debug("Auto-save skipped: draft has no name or no sections")
            return

        self._started += 1
        sequence = self._started
        try:
            await self._save(snapshot)
        except Exception as exc:
            # Runs detached from any caller; record the failure for the UI
            logger.exception("Auto-save failed for template %s", snapshot.id)
            if self._record(sequence):
                self.last_error = exc
            return
        if self._record(sequence):
            self.last_saved = snapshot
            self.last_error = None
        logger.debug("Auto-saved template %s", snapshot.id)

    def _record(self, sequence: int) -> bool:
        """Claim the status fields unless a newer save already reported."""
        if sequence < self._recorded:
            return False
        self._recorded = sequence
        return True
