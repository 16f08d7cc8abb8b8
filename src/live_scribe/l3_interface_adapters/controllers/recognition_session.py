"""RecognitionSession — supervises the speech provider connection and feeds the pipeline."""

from __future__ import annotations

import asyncio
import logging

from live_scribe.l1_entities.config import RecognitionConfig
from live_scribe.l1_entities.recognition import RecognitionEvent
from live_scribe.l1_entities.recognition_error import SessionErrorState, classify_error
from live_scribe.l1_entities.session import RecordingStatus
from live_scribe.l2_use_cases.ports.speech_provider import SpeechProvider
from live_scribe.l3_interface_adapters.controllers.events import StatusChanged
from live_scribe.l3_interface_adapters.controllers.pipeline_controller import PipelineController

log = logging.getLogger('lsc.speech')


class RecognitionSession:
    """IDLE -> RECORDING <-> PAUSED -> STOPPED.

    Errors while recording schedule a reconnect after ``restart_delay``, up
    to ``max_restarts`` consecutive attempts; any recognized result resets the
    count. An unexpected end of stream while recording reconnects at once.
    Past the cap the session pauses itself and waits for the user to resume.
    """

    def __init__(
        self,
        provider: SpeechProvider,
        pipeline: PipelineController,
        config: RecognitionConfig,
    ) -> None:
        self._provider = provider
        self._pipeline = pipeline
        self._config = config

        self.status = RecordingStatus.IDLE
        self.error_state = SessionErrorState()
        self.interim_text = ''
        self.reconnect_attempts = 0
        self._error_pending = False
        self._restart_task: asyncio.Task | None = None

        provider.bind(self.on_result, self.on_error, self.on_end)

    @property
    def recording(self) -> bool:
        return self.status is RecordingStatus.RECORDING

    # --- user controls ---

    def start(self) -> None:
        """Begin (or resume) recording."""
        if self.recording:
            return
        self.error_state.consecutive_restarts = 0
        self._pipeline.clear_advisory('speech')
        self._set_status(RecordingStatus.RECORDING)
        self._connect()

    def pause(self) -> None:
        self._close(RecordingStatus.PAUSED)

    def stop(self) -> None:
        self._close(RecordingStatus.STOPPED)

    # --- provider callbacks ---

    def on_result(self, event: RecognitionEvent) -> None:
        self.error_state.consecutive_restarts = 0
        self._pipeline.clear_advisory('speech')
        final = event.final_text
        if final:
            self.interim_text = ''
            self._pipeline.on_final_text(final)
        else:
            self.interim_text = event.interim_text
            self._pipeline.on_interim_text(self.interim_text)

    def on_error(self, code: str) -> None:
        info = classify_error(code)
        self.error_state.last_error_kind = info.kind
        self.error_state.last_error_code = code
        self._error_pending = True
        log.warning('Speech provider error %r (%s)', code, info.kind.value)
        self._pipeline.advise('speech', info.advisory)

        if not self.recording or self._restart_task is not None:
            return
        if self.error_state.consecutive_restarts >= self._config.max_restarts:
            log.error('Speech provider restart limit (%d) reached; pausing', self._config.max_restarts)
            self._close(RecordingStatus.PAUSED)
            self._pipeline.advise('speech', f'{info.message} Restart limit reached; resume recording manually.')
            return
        self.error_state.consecutive_restarts += 1
        self._restart_task = asyncio.create_task(self._restart_after_delay(), name='speech-restart')

    def on_end(self) -> None:
        if self._error_pending:
            # the error path owns this reconnect
            self._error_pending = False
            return
        if self.recording:
            log.info('Speech provider ended unexpectedly; restarting')
            self._connect()

    # --- internals ---

    async def _restart_after_delay(self) -> None:
        await asyncio.sleep(self._config.restart_delay)
        self._restart_task = None
        if self.recording:
            self.reconnect_attempts += 1
            log.info(
                'Reconnecting speech provider (attempt %d/%d)',
                self.error_state.consecutive_restarts,
                self._config.max_restarts,
            )
            self._connect()

    def _connect(self) -> None:
        self._error_pending = False
        try:
            self._provider.start()
        except Exception as e:
            log.warning('Speech provider start failed: %s', e)
            self.on_error('aborted')

    def _close(self, status: RecordingStatus) -> None:
        if self._restart_task is not None:
            self._restart_task.cancel()
            self._restart_task = None
        was_recording = self.recording
        self._set_status(status)
        self.error_state.consecutive_restarts = 0
        self.interim_text = ''
        if was_recording:
            self._provider.stop()

    def _set_status(self, status: RecordingStatus) -> None:
        self.status = status
        self._pipeline.set_recording(status is RecordingStatus.RECORDING)
        self._pipeline.emit(StatusChanged(status))
