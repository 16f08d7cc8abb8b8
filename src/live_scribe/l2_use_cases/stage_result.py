"""Result of one refine or translate call."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StageResult:
    """Either success with text or failure with reason."""

    data: str | None = None
    error: str = ''
    rate_limited: bool = False

    @property
    def ok(self) -> bool:
        return self.data is not None
