"""Gateway: text replay speech provider — implements SpeechProvider port.

Plays back a script of already-recognized lines as if a live recognizer
produced them. Each line is emitted once as an interim partial and then as
a final result. A blank line is a pause in speech. A line of the form
``!error <code>`` simulates the recognizer failing with that code.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from live_scribe.l1_entities.recognition import RecognitionEvent, RecognizedSegment

log = logging.getLogger('lsc.speech')

_ERROR_PREFIX = '!error'


class TextReplaySpeechProvider:
    """Feeds scripted lines to the bound callbacks on the running event loop."""

    def __init__(self, lines: list[str], *, pace: float = 0.5, pause: float = 1.0) -> None:
        self._lines = lines
        self._pace = pace
        self._pause = pause
        self._position = 0
        self._task: asyncio.Task | None = None
        self._on_result: Callable[[RecognitionEvent], None] | None = None
        self._on_error: Callable[[str], None] = _ignore
        self._on_end: Callable[[], None] = _ignore
        self.finished = asyncio.Event()
        self.starts = 0

    @property
    def remaining(self) -> int:
        return len(self._lines) - self._position

    def bind(
        self,
        on_result: Callable[[RecognitionEvent], None],
        on_error: Callable[[str], None],
        on_end: Callable[[], None],
    ) -> None:
        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end

    def start(self) -> None:
        if self._on_result is None:
            raise RuntimeError('TextReplaySpeechProvider.start() called before bind()')
        if self._task is not None:
            return
        self.starts += 1
        self._task = asyncio.create_task(self._play(), name='replay-speech')

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        self._on_end()

    async def _play(self) -> None:
        while self._position < len(self._lines):
            line = self._lines[self._position].strip()
            self._position += 1

            if not line:
                await asyncio.sleep(self._pause)
                continue

            if line.startswith(_ERROR_PREFIX):
                code = line[len(_ERROR_PREFIX) :].strip() or 'aborted'
                log.debug('Replaying recognizer error %r', code)
                self._task = None
                self._on_error(code)
                self._on_end()
                return

            words = line.split()
            if len(words) > 1:
                partial = ' '.join(words[: len(words) // 2])
                self._on_result(_event(partial, is_final=False))
                await asyncio.sleep(self._pace / 2)
            self._on_result(_event(line + ' ', is_final=True))
            await asyncio.sleep(self._pace)

        self._task = None
        self.finished.set()


def _ignore(*_args) -> None:
    pass


def _event(text: str, *, is_final: bool) -> RecognitionEvent:
    return RecognitionEvent(segments=[RecognizedSegment(alternatives=[text], is_final=is_final)])
