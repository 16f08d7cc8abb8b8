"""Port: text completion service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class CompletionRequest:
    """A single-turn completion request."""

    model: str
    prompt: str
    system_instruction: str = ''
    temperature: float = 0.1


class CompletionClient(Protocol):
    """Abstract completion service. Zero framework types leak through.

    ``complete`` raises ``RateLimitedError`` when the service reports overload
    and ``CompletionFailedError`` for every other failure.
    """

    async def complete(self, request: CompletionRequest) -> str:
        """Run one request. Returns the raw response text."""
        ...

    def check_connectivity(self) -> tuple[bool, str]:
        """Pre-flight connectivity check. Returns (ok, error_message)."""
        ...
