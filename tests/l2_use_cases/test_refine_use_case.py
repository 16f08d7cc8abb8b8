"""Tests for the refine use case and its trigger."""

from __future__ import annotations

import pytest

from live_scribe.l1_entities.errors import CompletionFailedError, RateLimitedError
from live_scribe.l1_entities.session import SessionContext
from live_scribe.l1_entities.transcript_buffer import TranscriptBuffer
from live_scribe.l2_use_cases.refine_use_case import RunRefineUseCase, should_trigger_refine
from tests.conftest import FakeCompletionClient, no_sleep


def _claim(text: str):
    return TranscriptBuffer(text=text).claim_tail()


class TestRunRefineUseCase:
    @pytest.mark.asyncio
    async def test_success(self):
        client = FakeCompletionClient()
        client.queue('"Hello there."')
        uc = RunRefineUseCase(client, sleep=no_sleep)

        result = await uc.execute(_claim('hello there '), SessionContext(description='demo'), 'model-x')

        assert result.ok
        assert result.data == 'Hello there.'
        req = client.calls[0]
        assert req.model == 'model-x'
        assert req.prompt == 'Refine: "hello there"'
        assert 'CONTEXT: demo' in req.system_instruction
        assert req.temperature == 0.1

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self):
        client = FakeCompletionClient()
        client.queue(*[RateLimitedError('429')] * 4)
        uc = RunRefineUseCase(client, sleep=no_sleep)

        result = await uc.execute(_claim('hello there'), SessionContext(), 'm')

        assert not result.ok
        assert result.rate_limited is True
        assert len(client.calls) == 4

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self):
        client = FakeCompletionClient()
        client.queue(CompletionFailedError('connection refused'))
        uc = RunRefineUseCase(client, sleep=no_sleep)

        result = await uc.execute(_claim('hello there'), SessionContext(), 'm')

        assert not result.ok
        assert 'connection refused' in result.error
        assert result.rate_limited is False

    @pytest.mark.asyncio
    async def test_empty_response_is_failure(self):
        client = FakeCompletionClient()
        client.queue('   ')
        uc = RunRefineUseCase(client, sleep=no_sleep)

        result = await uc.execute(_claim('hello there'), SessionContext(), 'm')

        assert not result.ok
        assert 'Empty' in result.error

    @pytest.mark.asyncio
    async def test_whitespace_tail_is_not_sent(self):
        client = FakeCompletionClient()
        uc = RunRefineUseCase(client, sleep=no_sleep)

        result = await uc.execute(_claim('   \n '), SessionContext(), 'm')

        assert not result.ok
        assert client.calls == []


class TestShouldTriggerRefine:
    def test_short_tail_waits(self):
        assert should_trigger_refine(TranscriptBuffer(text='Hello'), velocity=0) is False

    def test_tail_past_threshold(self):
        assert should_trigger_refine(TranscriptBuffer(text='Hello!'), velocity=0) is True

    def test_fast_speech_batches_more(self):
        buf = TranscriptBuffer(text='Hello word')
        assert should_trigger_refine(buf, velocity=20) is True
        assert should_trigger_refine(buf, velocity=35) is False
        buf.append('s!')
        assert should_trigger_refine(buf, velocity=35) is True

    def test_only_unrefined_text_counts(self):
        buf = TranscriptBuffer()
        buf.restore('Already refined. new', 16, 0)
        assert should_trigger_refine(buf, velocity=0) is False

    def test_whitespace_tail_never_triggers(self):
        buf = TranscriptBuffer()
        buf.restore('Done.\n\n\n\n\n\n\n', 5, 0)
        assert should_trigger_refine(buf, velocity=0) is False

    def test_outstanding_claim_blocks(self):
        buf = TranscriptBuffer(text='Hello there friends')
        buf.claim_tail()
        buf.append(' and more words')
        assert should_trigger_refine(buf, velocity=0) is False
