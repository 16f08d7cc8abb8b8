"""Gateway: Ollama completion client — implements CompletionClient port."""

from __future__ import annotations

import ollama as ollama_sync

from live_scribe.l1_entities.errors import CompletionFailedError, RateLimitedError
from live_scribe.l2_use_cases.ports.completion_client import CompletionRequest
from live_scribe.l3_interface_adapters.gateways.openai_completion_client import build_messages


class OllamaCompletionClient:
    """Wraps ollama.AsyncClient to implement the CompletionClient protocol."""

    def __init__(self, host: str = 'http://localhost:11434') -> None:
        self._host = host

    async def complete(self, request: CompletionRequest) -> str:
        client = ollama_sync.AsyncClient(host=self._host)
        try:
            resp = await client.chat(
                model=request.model,
                messages=build_messages(request),
                options={'temperature': request.temperature},
            )
        except ollama_sync.ResponseError as e:
            if e.status_code == 429:
                raise RateLimitedError(str(e)) from e
            raise CompletionFailedError(f'ResponseError ({e.status_code}): {e}') from e
        except (ollama_sync.RequestError, ConnectionError) as e:
            raise CompletionFailedError(f'{type(e).__name__}: {e}') from e
        return resp.message.content or ''

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = ollama_sync.Client(host=self._host)
            client.list()
            return True, ''
        except Exception as e:
            return False, f'Cannot connect to Ollama: {e}'

