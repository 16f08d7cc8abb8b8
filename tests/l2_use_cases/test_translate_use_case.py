"""Tests for the translate use case — retry policy and trigger."""

from __future__ import annotations

import pytest

from live_scribe.l1_entities.errors import CompletionFailedError, RateLimitedError
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer
from live_scribe.l2_use_cases.translate_use_case import RunTranslateUseCase, should_trigger_translate
from tests.conftest import FakeCompletionClient


def _span(text: str):
    buf = TranscriptBuffer()
    buf.restore(text, len(text), 0)
    return buf.translation_span()


class _RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestRunTranslateUseCase:
    @pytest.mark.asyncio
    async def test_success(self):
        client = FakeCompletionClient()
        client.queue('Xin chào.')
        uc = RunTranslateUseCase(client, sleep=_RecordingSleep())

        result = await uc.execute(_span('Hello.\n'), SessionContext(reference_text='glossary'), 'm')

        assert result.data == 'Xin chào.'
        req = client.calls[0]
        assert req.prompt == 'Interpret to Vietnamese: "Hello."'
        assert 'TECHNICAL GLOSSARY: glossary' in req.system_instruction

    @pytest.mark.asyncio
    async def test_three_rate_limits_then_success(self):
        client = FakeCompletionClient()
        client.queue(RateLimitedError('429'), RateLimitedError('429'), RateLimitedError('429'), 'Xin chào.')
        sleep = _RecordingSleep()
        uc = RunTranslateUseCase(client, sleep=sleep)

        result = await uc.execute(_span('Hello.'), SessionContext(), 'm')

        assert result.data == 'Xin chào.'
        assert len(client.calls) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_fourth_rate_limit_fails(self):
        client = FakeCompletionClient()
        client.queue(*[RateLimitedError('429')] * 4)
        sleep = _RecordingSleep()
        uc = RunTranslateUseCase(client, sleep=sleep)

        result = await uc.execute(_span('Hello.'), SessionContext(), 'm')

        assert not result.ok
        assert result.rate_limited is True
        assert len(client.calls) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_rate_limit_failure_is_not_retried(self):
        client = FakeCompletionClient()
        client.queue(CompletionFailedError('bad gateway'))
        sleep = _RecordingSleep()
        uc = RunTranslateUseCase(client, sleep=sleep)

        result = await uc.execute(_span('Hello.'), SessionContext(), 'm')

        assert not result.ok
        assert result.rate_limited is False
        assert len(client.calls) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_configured_languages(self):
        client = FakeCompletionClient()
        uc = RunTranslateUseCase(client)

        await uc.execute(_span('Hola.'), SessionContext(), 'm', source_language='Spanish', target_language='German')

        req = client.calls[0]
        assert req.prompt.startswith('Interpret to German:')
        assert '(Spanish -> German)' in req.system_instruction


class TestShouldTriggerTranslate:
    def test_nothing_certified(self):
        assert should_trigger_translate(TranscriptBuffer(text='unrefined')) is False

    def test_certified_untranslated(self):
        buf = TranscriptBuffer()
        buf.restore('Hello.', 6, 0)
        assert should_trigger_translate(buf) is True

    def test_all_translated(self):
        buf = TranscriptBuffer()
        buf.restore('Hello.', 6, 6)
        assert should_trigger_translate(buf) is False
