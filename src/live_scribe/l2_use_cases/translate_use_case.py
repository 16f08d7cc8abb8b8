"""Use case: translate the refined-but-untranslated span via the completion service."""

from __future__ import annotations

import asyncio
import logging

from live_scribe.l1_entities.errors import RateLimitedError
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer, TranslationSpan
from live_scribe.l2_use_cases.ports.completion_client import CompletionClient, CompletionRequest
from live_scribe.l2_use_cases.stage_result import StageResult
from live_scribe.l2_use_cases.utils.prompt_builder import (
    build_translate_instruction,
    build_translate_prompt,
    clean_response,
)
from live_scribe.l2_use_cases.utils.retry import Sleep, call_with_backoff

log = logging.getLogger('lsc.translate')


class RunTranslateUseCase:
    """Runs one translate call for a captured span.

    Overload failures are retried with exponential backoff (1s, 2s, 4s by
    default); any other failure is returned immediately so the next natural
    trigger can resend the same span.
    """

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
        span: TranslationSpan,
        context: SessionContext,
        model: str,
        *,
        source_language: str = 'English',
        target_language: str = 'Vietnamese',
        temperature: float = 0.1,
        reference_chars: int = 4000,
    ) -> StageResult:
        log.info('Translate request: span [%d, %d), %d chars', span.start, span.end, len(span.source))
        request = CompletionRequest(
            model=model,
            prompt=build_translate_prompt(span.source.strip(), target_language=target_language),
            system_instruction=build_translate_instruction(
                context,
                source_language=source_language,
                target_language=target_language,
                reference_chars=reference_chars,
            ),
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
            err = f'Translation rate limited after {self._max_retries} retries: {e}'
            log.warning(err)
            return StageResult(error=err, rate_limited=True)
        except Exception as e:
            err = f'Translation error: {type(e).__name__}: {e}'
            log.error(err, exc_info=True)
            return StageResult(error=err)

        translated = clean_response(raw)
        if not translated:
            err = 'Empty response from translation'
            log.warning(err)
            return StageResult(error=err)

        return StageResult(data=translated)


def should_trigger_translate(buffer: TranscriptBuffer) -> bool:
    """Translation may only consume text the refine stage has certified."""
    return buffer.refined_upto > buffer.translated_upto
