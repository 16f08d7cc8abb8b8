"""Use case: close a finished thought with a paragraph break after a short silence."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable

from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer

log = logging.getLogger('lsc.silence')


class CommitState(enum.Enum):
    OPEN = 'open'
    COMMITTED = 'committed'


class SilenceCommitter:
    """Arms a timer whenever the buffer is open and no interim text is pending.

    Any new interim or final text cancels and re-arms it. When it fires the
    buffer's tail is trimmed and a single line break appended.
    """

    def __init__(
        self,
        buffer: Callable[[], TranscriptBuffer],
        on_commit: Callable[[], None],
        delay: float = 0.4,
    ) -> None:
        self._buffer = buffer
        self._on_commit = on_commit
        self._delay = delay
        self._active = False
        self._pending_interim = ''
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> CommitState:
        return CommitState.OPEN if self._buffer().needs_paragraph_break else CommitState.COMMITTED

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending_interim(self) -> str:
        return self._pending_interim

    def set_active(self, active: bool) -> None:
        self._active = active
        if active:
            self.rearm()
        else:
            self._pending_interim = ''
            self.cancel()

    def on_interim(self, text: str) -> None:
        self._pending_interim = text
        self.rearm()

    def on_final(self) -> None:
        self._pending_interim = ''
        self.rearm()

    def rearm(self) -> None:
        self.cancel()
        if not self._active or self._pending_interim:
            return
        if self.state is CommitState.OPEN:
            self._task = asyncio.create_task(self._wait(), name='silence-commit')

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _wait(self) -> None:
        await asyncio.sleep(self._delay)
        self._task = None
        if self._buffer().commit_paragraph():
            log.debug('Silence commit: paragraph break appended')
            self._on_commit()
