"""TranslateStage — cadence-polled, rate-limited, single-flight scheduler for translate calls."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from live_scribe.l1_entities.config import TranslateConfig
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer, TranslationBuffer, TranslationSpan
from live_scribe.l2_use_cases.stage_result import StageResult
from live_scribe.l2_use_cases.translate_use_case import RunTranslateUseCase, should_trigger_translate
from live_scribe.l2_use_cases.utils.cadence import remaining_spacing, translate_interval
from live_scribe.l3_interface_adapters.controllers.events import StageState

log = logging.getLogger('lsc.translate')


class TranslateStage:
    """Drains ``[translated_upto, refined_upto)`` into the translation buffer.

    While running, a cadence loop evaluates the trigger every 50/100 ms
    depending on velocity. Calls are spaced at least ``min_spacing`` apart; an
    early trigger is rescheduled for the remaining wait instead of dropped.
    """

    def __init__(
        self,
        use_case: RunTranslateUseCase,
        config: TranslateConfig,
        *,
        buffer: Callable[[], TranscriptBuffer],
        output: Callable[[], TranslationBuffer],
        context: Callable[[], SessionContext],
        velocity: Callable[[], int],
        on_dispatch: Callable[[], None],
        on_settled: Callable[[StageResult, str], None],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._use_case = use_case
        self._config = config
        self._buffer = buffer
        self._output = output
        self._context = context
        self._velocity = velocity
        self._on_dispatch = on_dispatch
        self._on_settled = on_settled
        self._clock = clock

        self._state = StageState.IDLE
        self._generation = 0
        self._last_dispatch: float | None = None
        self._last_result: StageResult | None = None
        self._loop_task: asyncio.Task | None = None
        self._spacing_task: asyncio.Task | None = None
        self._call_task: asyncio.Task | None = None
        self.calls_dispatched = 0

    @property
    def state(self) -> StageState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state is StageState.IN_FLIGHT

    @property
    def running(self) -> bool:
        return self._loop_task is not None

    @property
    def interval(self) -> float:
        cfg = self._config
        return translate_interval(self._velocity(), cfg.slow_interval, cfg.fast_interval, cfg.fast_velocity)

    def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._cadence_loop(), name='translate-cadence')

    def stop(self) -> None:
        """Stop polling. An in-flight call is left to settle."""
        for task in (self._loop_task, self._spacing_task):
            if task is not None:
                task.cancel()
        self._loop_task = None
        self._spacing_task = None

    async def _cadence_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.evaluate()

    def evaluate(self) -> bool:
        """Dispatch if there is certified text to translate. Returns True if a call started."""
        if self.in_flight:
            return False
        buffer = self._buffer()
        if not should_trigger_translate(buffer):
            return False
        wait = remaining_spacing(self._clock(), self._last_dispatch, self._config.min_spacing)
        if wait > 0:
            if self._spacing_task is None:
                self._spacing_task = asyncio.create_task(self._after_spacing(wait), name='translate-spacing')
            return False
        return self._dispatch(buffer, buffer.translation_span())

    async def _after_spacing(self, wait: float) -> None:
        await asyncio.sleep(wait)
        self._spacing_task = None
        self.evaluate()

    def _dispatch(self, buffer: TranscriptBuffer, span: TranslationSpan) -> bool:
        if self.in_flight or span.end <= span.start:
            return False
        if not span.source.strip():
            buffer.advance_translated(span)  # whitespace only
            return False
        self._state = StageState.IN_FLIGHT
        self._last_dispatch = self._clock()
        self.calls_dispatched += 1
        self._call_task = asyncio.create_task(
            self._run(buffer, self._output(), span, self._generation), name='translate-call'
        )
        self._on_dispatch()
        return True

    async def _run(
        self,
        buffer: TranscriptBuffer,
        output: TranslationBuffer,
        span: TranslationSpan,
        generation: int,
    ) -> None:
        cfg = self._config
        paragraph = ''
        try:
            result = await self._use_case.execute(
                span,
                self._context(),
                cfg.model,
                source_language=cfg.source_language,
                target_language=cfg.target_language,
                temperature=cfg.temperature,
                reference_chars=cfg.reference_chars,
            )
            if generation != self._generation or buffer is not self._buffer():
                log.info('Translation discarded: session changed during the call')
                return
            if result.data is not None:
                if buffer.advance_translated(span):
                    output.append_paragraph(result.data)
                    paragraph = result.data
                else:
                    log.info('Translation discarded: transcript edited during the call')
                    result = StageResult(error='Translation discarded: transcript was edited')
        finally:
            if generation == self._generation:
                self._state = StageState.IDLE
                self._call_task = None
        self._last_result = result
        self._on_settled(result, paragraph)

    async def wait_idle(self) -> None:
        task = self._call_task
        if task is not None:
            await asyncio.wait({task})

    async def flush(self) -> StageResult | None:
        """Translate everything already certified right now, ignoring cadence and spacing.

        Single-flight still holds: an outstanding call is awaited first. The
        caller certifies the remainder beforehand. Returns None if there was
        nothing to translate.
        """
        while self.in_flight:
            await self.wait_idle()
        buffer = self._buffer()
        if not self._dispatch(buffer, buffer.translation_span()):
            return None
        await self.wait_idle()
        return self._last_result

    def cancel(self) -> list[asyncio.Task]:
        """Cancel polling, spacing and any in-flight call; a late completion can no longer apply."""
        self._generation += 1
        tasks = [t for t in (self._loop_task, self._spacing_task, self._call_task) if t is not None]
        for task in tasks:
            task.cancel()
        self._loop_task = None
        self._spacing_task = None
        self._call_task = None
        self._state = StageState.IDLE
        return tasks
