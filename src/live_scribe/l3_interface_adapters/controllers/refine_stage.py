"""RefineStage — debounced, single-flight scheduler for refine calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from live_scribe.l1_entities.config import RefineConfig
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TailClaim, TranscriptBuffer
from live_scribe.l2_use_cases.refine_use_case import RunRefineUseCase, should_trigger_refine
from live_scribe.l2_use_cases.stage_result import StageResult
from live_scribe.l3_interface_adapters.controllers.events import StageState

log = logging.getLogger('lsc.refine')


class RefineStage:
    """IDLE -> DEBOUNCING -> IN_FLIGHT -> IDLE.

    Buffer growth re-arms the debounce so only a quiescent tail is sent.
    Growth while a call is outstanding is dropped, not queued; the pipeline
    re-notifies once the call settles.
    """

    def __init__(
        self,
        use_case: RunRefineUseCase,
        config: RefineConfig,
        *,
        buffer: Callable[[], TranscriptBuffer],
        context: Callable[[], SessionContext],
        velocity: Callable[[], int],
        on_dispatch: Callable[[], None],
        on_settled: Callable[[StageResult], None],
        language: str = 'English',
    ) -> None:
        self._use_case = use_case
        self._config = config
        self._buffer = buffer
        self._context = context
        self._velocity = velocity
        self._on_dispatch = on_dispatch
        self._on_settled = on_settled
        self._language = language

        self._state = StageState.IDLE
        self._generation = 0
        self._debounce_task: asyncio.Task | None = None
        self._call_task: asyncio.Task | None = None
        self._claim: tuple[TranscriptBuffer, TailClaim] | None = None
        self.calls_dispatched = 0

    @property
    def state(self) -> StageState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state is StageState.IN_FLIGHT

    def should_trigger(self) -> bool:
        cfg = self._config
        return should_trigger_refine(
            self._buffer(),
            self._velocity(),
            min_chars=cfg.min_chars,
            fast_min_chars=cfg.fast_min_chars,
            fast_velocity=cfg.fast_velocity,
        )

    def notify_growth(self) -> None:
        """Re-evaluate after the buffer changed."""
        if self.in_flight:
            log.debug('Refine trigger dropped: call in flight')
            return
        self._cancel_debounce()
        if not self.should_trigger():
            self._state = StageState.IDLE
            return
        self._state = StageState.DEBOUNCING
        self._debounce_task = asyncio.create_task(self._debounce(), name='refine-debounce')

    async def _debounce(self) -> None:
        await asyncio.sleep(self._config.debounce)
        self._debounce_task = None
        self._state = StageState.IDLE
        self.dispatch()

    def dispatch(self) -> bool:
        """Claim the unrefined tail and start a call. Returns False if nothing was sent."""
        if self.in_flight or not self.should_trigger():
            return False
        buffer = self._buffer()
        claim = buffer.claim_tail()
        self._claim = (buffer, claim)
        self._state = StageState.IN_FLIGHT
        self.calls_dispatched += 1
        self._call_task = asyncio.create_task(self._run(buffer, claim, self._generation), name='refine-call')
        self._on_dispatch()
        return True

    async def _run(self, buffer: TranscriptBuffer, claim: TailClaim, generation: int) -> None:
        cfg = self._config
        try:
            result = await self._use_case.execute(
                claim,
                self._context(),
                cfg.model,
                temperature=cfg.temperature,
                reference_chars=cfg.reference_chars,
                language=self._language,
            )
            if generation != self._generation or buffer is not self._buffer():
                log.info('Refine result discarded: session changed during the call')
                return
            if result.data is not None and not buffer.apply_refinement(claim, result.data):
                log.info('Refine result discarded: transcript edited during the call')
                result = StageResult(error='Refinement discarded: transcript was edited')
        finally:
            if self._claim is not None and self._claim[1] is claim:
                self._release_claim()
            if generation == self._generation:
                self._state = StageState.IDLE
                self._call_task = None
        self._on_settled(result)

    async def wait_idle(self) -> None:
        """Wait for an outstanding call to settle (success, failure or cancellation)."""
        task = self._call_task
        if task is not None:
            await asyncio.wait({task})

    def cancel_pending(self) -> None:
        """Drop a pending debounce without touching an in-flight call."""
        self._cancel_debounce()
        if self._state is StageState.DEBOUNCING:
            self._state = StageState.IDLE

    def cancel(self) -> list[asyncio.Task]:
        """Cancel every timer and call; a late completion can no longer apply."""
        self._generation += 1
        self._release_claim()
        tasks = [t for t in (self._debounce_task, self._call_task) if t is not None]
        for task in tasks:
            task.cancel()
        self._debounce_task = None
        self._call_task = None
        self._state = StageState.IDLE
        return tasks

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    def _release_claim(self) -> None:
        # A call cancelled before its first step never reaches its own finally.
        if self._claim is not None:
            buffer, claim = self._claim
            self._claim = None
            buffer.release(claim)
