"""Port: streaming speech recognition provider."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from live_scribe.l1_entities.recognition import RecognitionEvent


class SpeechProvider(Protocol):
    """Abstract live recognizer. Callbacks are invoked on the event loop thread."""

    def bind(
        self,
        on_result: Callable[[RecognitionEvent], None],
        on_error: Callable[[str], None],
        on_end: Callable[[], None],
    ) -> None:
        """Register the result, error-code and end-of-stream callbacks."""
        ...

    def start(self) -> None:
        """Open the connection and begin emitting results."""
        ...

    def stop(self) -> None:
        """Close the connection. An end-of-stream callback may follow."""
        ...
