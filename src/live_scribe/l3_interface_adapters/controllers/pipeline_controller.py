"""PipelineController — owns the session buffers and drives the segment/refine/translate stages."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from live_scribe.l1_entities.config import AppConfig
from live_scribe.l1_entities.session import SessionContext, SessionSnapshot
from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer, TranslationBuffer
from live_scribe.l2_use_cases.ports.completion_client import CompletionClient
from live_scribe.l2_use_cases.ports.persistence import SessionStore
from live_scribe.l2_use_cases.refine_use_case import RunRefineUseCase
from live_scribe.l2_use_cases.silence_commit_use_case import SilenceCommitter
from live_scribe.l2_use_cases.stage_result import StageResult
from live_scribe.l2_use_cases.translate_use_case import RunTranslateUseCase
from live_scribe.l2_use_cases.utils.retry import Sleep
from live_scribe.l2_use_cases.utils.segmenter import segment_chunk
from live_scribe.l2_use_cases.velocity_estimator import VelocityEstimator
from live_scribe.l3_interface_adapters.controllers.events import (
    Advisory,
    AdvisoryCleared,
    BufferChanged,
    EventSink,
    InterimChanged,
    StageActivity,
    TranslationAppended,
)
from live_scribe.l3_interface_adapters.controllers.refine_stage import RefineStage
from live_scribe.l3_interface_adapters.controllers.translate_stage import TranslateStage

log = logging.getLogger('lsc.pipeline')

TRANSLATE_LAG = 'Interpretation lag detected.'
TRANSLATE_OVERLOADED = 'Interpretation service is overloaded; untranslated text will catch up.'
REFINE_OVERLOADED = 'Refinement service is overloaded; the raw transcript is kept for now.'


class PipelineController:
    """Central orchestrator for one active session at a time.

    The transcript buffer is the only shared mutable state. It is written by
    the segmenter (append), the silence committer, user edits and the refine
    stage, all on the event loop thread. Switching sessions cancels every
    timer and call so that no completion lands in the new session's buffer.
    """

    def __init__(
        self,
        config: AppConfig,
        completion_client: CompletionClient,
        store: SessionStore,
        *,
        on_event: EventSink | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._store = store
        self._on_event = on_event
        self._clock = clock

        self.session_id: str | None = None
        self.buffer = TranscriptBuffer()
        self.translation = TranslationBuffer()
        self.context = SessionContext()
        self.velocity = VelocityEstimator()
        self.advisories: dict[str, str] = {}
        self.recording = False
        self._recorded = 0.0
        self._recording_since: float | None = None

        tc = config.translate
        self.refine = RefineStage(
            RunRefineUseCase(
                completion_client,
                max_retries=tc.max_retries,
                backoff_base=tc.backoff_base,
                sleep=sleep,
            ),
            config.refine,
            buffer=lambda: self.buffer,
            context=lambda: self.context,
            velocity=lambda: self.velocity.velocity,
            on_dispatch=lambda: self.emit(StageActivity('refine', True)),
            on_settled=self._on_refine_settled,
            language=tc.source_language,
        )
        self.translate = TranslateStage(
            RunTranslateUseCase(
                completion_client,
                max_retries=tc.max_retries,
                backoff_base=tc.backoff_base,
                sleep=sleep,
            ),
            tc,
            buffer=lambda: self.buffer,
            output=lambda: self.translation,
            context=lambda: self.context,
            velocity=lambda: self.velocity.velocity,
            on_dispatch=lambda: self.emit(StageActivity('translate', True)),
            on_settled=self._on_translate_settled,
            clock=clock,
        )
        self.silence = SilenceCommitter(
            lambda: self.buffer,
            self._on_buffer_changed,
            delay=config.recognition.silence_commit,
        )

        self._velocity_task: asyncio.Task | None = None
        self._autosave_task: asyncio.Task | None = None

    # --- events ---

    def emit(self, event: object) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def advise(self, source: str, message: str) -> None:
        self.advisories[source] = message
        self.emit(Advisory(source, message))

    def clear_advisory(self, source: str) -> None:
        if self.advisories.pop(source, None) is not None:
            self.emit(AdvisoryCleared(source))

    # --- speech input ---

    def on_final_text(self, chunk: str) -> list[str]:
        """Segment a finalized chunk and append its fragments. Returns the fragments."""
        fragments = segment_chunk(chunk, self._config.segmenter.max_chars, self._config.segmenter.min_split)
        self.silence.on_final()
        self.emit(InterimChanged(''))
        if fragments:
            self.buffer.append_fragments(fragments)
            self._on_buffer_changed()
        return fragments

    def on_interim_text(self, text: str) -> None:
        self.silence.on_interim(text)
        self.emit(InterimChanged(text))

    # --- user actions ---

    def edit_text(self, new_text: str) -> None:
        """Apply a user edit to the transcript."""
        self.buffer.replace_text(new_text)
        self._on_buffer_changed()

    def clear(self) -> None:
        """Empty both buffers and reset the cursors together."""
        self.refine.cancel()
        self.translate.cancel()
        self.buffer.reset()
        self.translation.reset()
        self.velocity.reset()
        for source in list(self.advisories):
            self.clear_advisory(source)
        if self.recording:
            self.translate.start()
        self._on_buffer_changed()

    def set_context(
        self,
        description: str | None = None,
        reference_name: str | None = None,
        reference_text: str | None = None,
    ) -> None:
        updates = {
            k: v
            for k, v in (
                ('description', description),
                ('reference_name', reference_name),
                ('reference_text', reference_text),
            )
            if v is not None
        }
        self.context = self.context.model_copy(update=updates)
        self._schedule_autosave()

    def set_recording(self, recording: bool) -> None:
        """Start or stop the recording-only loops: velocity, translate cadence, silence commit."""
        if recording == self.recording:
            return
        self.recording = recording
        if recording:
            self._recording_since = self._clock()
            self._velocity_task = asyncio.create_task(self._velocity_loop(), name='velocity')
            self.translate.start()
            self.silence.set_active(True)
        else:
            if self._velocity_task is not None:
                self._velocity_task.cancel()
                self._velocity_task = None
            self._stop_stopwatch()
            self.velocity.idle()
            self.translate.stop()
            self.silence.set_active(False)

    async def force_sync(self) -> StageResult | None:
        """Translate the entire untranslated remainder now (end-of-session flush).

        Waits out in-flight calls, certifies the unrefined tail as-is and
        sends one translate call regardless of cadence and spacing.
        """
        while True:
            self.refine.cancel_pending()
            await self.refine.wait_idle()
            await self.translate.wait_idle()
            if not (self.refine.in_flight or self.translate.in_flight):
                break
        self.refine.cancel_pending()
        self.buffer.certify_all()
        self._on_buffer_changed()
        return await self.translate.flush()

    # --- sessions ---

    @property
    def duration_seconds(self) -> float:
        """Seconds spent recording in the current session, paused time excluded."""
        if self._recording_since is None:
            return self._recorded
        return self._recorded + self._clock() - self._recording_since

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            text=self.buffer.text,
            translated_text=self.translation.text,
            refined_upto=self.buffer.refined_upto,
            translated_upto=self.buffer.translated_upto,
            context=self.context.model_copy(),
            duration_seconds=self.duration_seconds,
        )

    def save(self) -> None:
        if self.session_id is None:
            return
        self._store.save(self.session_id, self.snapshot())
        log.debug('Saved session %s (%d chars)', self.session_id, self.buffer.length)

    def open_session(self, session_id: str) -> None:
        """Switch to *session_id*, restoring its buffers and cursors if it was saved before."""
        self._cancel_all()
        self.save()

        snapshot = self._store.load(session_id)
        self.session_id = session_id
        self.buffer = TranscriptBuffer()
        self.translation = TranslationBuffer()
        if snapshot is not None:
            self.buffer.restore(snapshot.text, snapshot.refined_upto, snapshot.translated_upto)
            self.translation.text = snapshot.translated_text
            self.context = snapshot.context.model_copy()
        else:
            self.context = SessionContext()
        self._recorded = snapshot.duration_seconds if snapshot is not None else 0.0
        self._recording_since = self._clock() if self.recording else None
        self.velocity.reset(self.buffer.length)
        for source in list(self.advisories):
            self.clear_advisory(source)
        log.info('Opened session %s (restored=%s, %d chars)', session_id, snapshot is not None, self.buffer.length)

        if self.recording:
            self._velocity_task = asyncio.create_task(self._velocity_loop(), name='velocity')
            self.translate.start()
            self.silence.set_active(True)
        self.emit(BufferChanged(self.buffer.text, self.buffer.refined_upto, self.buffer.translated_upto))

    async def close(self) -> None:
        """Cancel every timer and call, wait for them to unwind, then save."""
        tasks = self._cancel_all()
        self.set_recording(False)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.save()

    def _cancel_all(self) -> list[asyncio.Task]:
        tasks = self.refine.cancel() + self.translate.cancel()
        self.silence.cancel()
        for task in (self._velocity_task, self._autosave_task):
            if task is not None:
                task.cancel()
                tasks.append(task)
        self._velocity_task = None
        self._autosave_task = None
        return tasks

    # --- internals ---

    def _on_buffer_changed(self) -> None:
        self.refine.notify_growth()
        self.silence.rearm()
        self._schedule_autosave()
        self.emit(BufferChanged(self.buffer.text, self.buffer.refined_upto, self.buffer.translated_upto))

    def _on_refine_settled(self, result: StageResult) -> None:
        self.emit(StageActivity('refine', False))
        if result.ok:
            self.clear_advisory('refine')
            self._on_buffer_changed()
        elif result.rate_limited:
            self.advise('refine', REFINE_OVERLOADED)
        else:
            self.advise('refine', result.error)

    def _on_translate_settled(self, result: StageResult, paragraph: str) -> None:
        self.emit(StageActivity('translate', False))
        if result.ok:
            self.clear_advisory('translate')
            self.emit(TranslationAppended(paragraph, self.translation.text))
            self._schedule_autosave()
        else:
            self.advise('translate', TRANSLATE_OVERLOADED if result.rate_limited else TRANSLATE_LAG)
            log.warning('Translate failed: %s', result.error)

    async def _velocity_loop(self) -> None:
        window = self._config.recognition.velocity_window
        while True:
            await asyncio.sleep(window)
            velocity = self.velocity.sample(self.buffer.length)
            if velocity:
                log.debug('Velocity: %d chars/s', velocity)

    def _stop_stopwatch(self) -> None:
        if self._recording_since is not None:
            self._recorded += self._clock() - self._recording_since
            self._recording_since = None

    def _schedule_autosave(self) -> None:
        if self.session_id is None:
            return
        if self._autosave_task is not None:
            self._autosave_task.cancel()
        self._autosave_task = asyncio.create_task(self._autosave(), name='autosave')

    async def _autosave(self) -> None:
        await asyncio.sleep(self._config.output.autosave_delay)
        self._autosave_task = None
        self.save()
