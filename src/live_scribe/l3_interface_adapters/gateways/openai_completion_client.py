"""Gateway: OpenAI-compatible completion client — implements CompletionClient port.

Works with any OpenAI-compatible API: OpenAI, Gemini, Groq, Together, vLLM, etc.
"""

from __future__ import annotations

import openai

from live_scribe.l1_entities.errors import CompletionFailedError, RateLimitedError
from live_scribe.l2_use_cases.ports.completion_client import CompletionRequest


def build_messages(request: CompletionRequest) -> list[dict[str, str]]:
    messages = []
    if request.system_instruction:
        messages.append({'role': 'system', 'content': request.system_instruction})
    messages.append({'role': 'user', 'content': request.prompt})
    return messages


class OpenAICompatCompletionClient:
    """Wraps openai.AsyncOpenAI to implement the CompletionClient protocol."""

    def __init__(self, api_key: str | None = None, base_url: str = 'https://api.openai.com/v1') -> None:
        self._api_key = api_key
        self._base_url = base_url

    async def complete(self, request: CompletionRequest) -> str:
        client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        try:
            resp = await client.chat.completions.create(
                model=request.model,
                messages=build_messages(request),  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
                temperature=request.temperature,
            )
        except openai.RateLimitError as e:
            raise RateLimitedError(str(e)) from e
        except openai.OpenAIError as e:
            raise CompletionFailedError(f'{type(e).__name__}: {e}') from e
        return resp.choices[0].message.content or ''

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            client.models.list()
            return True, ''
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to OpenAI-compatible API: {e}'
