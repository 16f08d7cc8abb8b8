"""Use case: polish the unrefined tail of the transcript via the completion service."""

from __future__ import annotations

import asyncio
import logging

from live_scribe.l1_entities.errors import RateLimitedError
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TailClaim, TranscriptBuffer
from live_scribe.l2_use_cases.ports.completion_client import CompletionClient, CompletionRequest
from live_scribe.l2_use_cases.stage_result import StageResult
from live_scribe.l2_use_cases.utils.cadence import refine_threshold
from live_scribe.l2_use_cases.utils.prompt_builder import build_refine_instruction, build_refine_prompt, clean_response
from live_scribe.l2_use_cases.utils.retry import Sleep, call_with_backoff

log = logging.getLogger('lsc.refine')


class RunRefineUseCase:
    """Runs one refine call for a claimed tail. Never touches the buffer itself."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._sleep = sleep

    async def execute(
        self,
        claim: TailClaim,
        context: SessionContext,
        model: str,
        *,
        temperature: float = 0.1,
        reference_chars: int = 1500,
        language: str = 'English',
    ) -> StageResult:
        """Refine ``claim.source``. Returns the polished text or the failure reason."""
        tail = claim.source.strip()
        if not tail:
            return StageResult(error='Nothing to refine')

        log.info('Refine request: span [%d, %d), %d chars', claim.start, claim.end, len(tail))
        request = CompletionRequest(
            model=model,
            prompt=build_refine_prompt(tail),
            system_instruction=build_refine_instruction(context, reference_chars=reference_chars, language=language),
            temperature=temperature,
        )

        try:
            raw = await call_with_backoff(
                lambda: self._client.complete(request),
                retries=self._max_retries,
                base_delay=self._backoff_base,
                sleep=self._sleep,
            )
        except RateLimitedError as e:
            err = f'Refine rate limited: {e}'
            log.warning(err)
            return StageResult(error=err, rate_limited=True)
        except Exception as e:
            err = f'Refine error: {type(e).__name__}: {e}'
            log.error(err, exc_info=True)
            return StageResult(error=err)

        refined = clean_response(raw)
        if not refined:
            err = 'Empty response from refine'
            log.warning(err)
            return StageResult(error=err)

        log.debug('Refined (%d chars): %s', len(refined), refined[:200])
        return StageResult(data=refined)


def should_trigger_refine(
    buffer: TranscriptBuffer,
    velocity: int,
    min_chars: int = 5,
    fast_min_chars: int = 10,
    fast_velocity: int = 30,
) -> bool:
    """Check if the unrefined tail is long enough to send.

    The threshold rises from *min_chars* to *fast_min_chars* when velocity
    exceeds *fast_velocity*, so fast speech is batched into fewer calls.
    """
    if buffer.has_claim:
        return False
    threshold = refine_threshold(velocity, min_chars, fast_min_chars, fast_velocity)
    if buffer.unrefined_length <= threshold:
        return False
    return bool(buffer.read(buffer.refined_upto).strip())
