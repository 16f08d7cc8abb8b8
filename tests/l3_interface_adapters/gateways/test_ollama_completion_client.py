"""Tests for Ollama completion gateway — mocks ollama here (L3 boundary)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import ollama
import pytest

from live_scribe.l1_entities.errors import CompletionFailedError, RateLimitedError
from live_scribe.l2_use_cases.ports.completion_client import CompletionRequest
from live_scribe.l3_interface_adapters.gateways.ollama_completion_client import OllamaCompletionClient

_TARGET = 'live_scribe.l3_interface_adapters.gateways.ollama_completion_client.ollama_sync'


def _mock_client(mock_cls, **chat_kwargs):
    mock_client = AsyncMock()
    mock_cls.return_value = mock_client
    mock_client.chat = AsyncMock(**chat_kwargs)
    return mock_client


class TestOllamaCompletionClient:
    @pytest.mark.asyncio
    @patch(f'{_TARGET}.AsyncClient')
    async def test_complete_success(self, mock_cls):
        resp = MagicMock()
        resp.message.content = 'Hello there.'
        mock_client = _mock_client(mock_cls, return_value=resp)

        client = OllamaCompletionClient(host='http://gpu-box:11434')
        result = await client.complete(
            CompletionRequest(model='llama3', prompt='Refine: "hello there"', system_instruction='Polish', temperature=0.1)
        )

        assert result == 'Hello there.'
        mock_cls.assert_called_once_with(host='http://gpu-box:11434')
        kwargs = mock_client.chat.call_args.kwargs
        assert kwargs['model'] == 'llama3'
        assert kwargs['options'] == {'temperature': 0.1}
        assert kwargs['messages'][0] == {'role': 'system', 'content': 'Polish'}

    @pytest.mark.asyncio
    @patch(f'{_TARGET}.AsyncClient')
    async def test_429_is_rate_limited(self, mock_cls):
        _mock_client(mock_cls, side_effect=ollama.ResponseError('too many requests', status_code=429))

        with pytest.raises(RateLimitedError):
            await OllamaCompletionClient().complete(CompletionRequest(model='m', prompt='hi'))

    @pytest.mark.asyncio
    @patch(f'{_TARGET}.AsyncClient')
    async def test_other_status_is_failure(self, mock_cls):
        _mock_client(mock_cls, side_effect=ollama.ResponseError('model not found', status_code=404))

        with pytest.raises(CompletionFailedError) as exc_info:
            await OllamaCompletionClient().complete(CompletionRequest(model='m', prompt='hi'))
        assert not isinstance(exc_info.value, RateLimitedError)
        assert '404' in str(exc_info.value)

    @pytest.mark.asyncio
    @patch(f'{_TARGET}.AsyncClient')
    async def test_connection_error_is_failure(self, mock_cls):
        _mock_client(mock_cls, side_effect=ConnectionError('refused'))

        with pytest.raises(CompletionFailedError):
            await OllamaCompletionClient().complete(CompletionRequest(model='m', prompt='hi'))

    @patch(f'{_TARGET}.Client')
    def test_check_connectivity_success(self, mock_cls):
        mock_cls.return_value.list.return_value = MagicMock()
        assert OllamaCompletionClient().check_connectivity() == (True, '')

    @patch(f'{_TARGET}.Client')
    def test_check_connectivity_failure(self, mock_cls):
        mock_cls.return_value.list.side_effect = ConnectionError('nope')
        ok, err = OllamaCompletionClient().check_connectivity()
        assert ok is False
        assert 'Cannot connect to Ollama' in err
