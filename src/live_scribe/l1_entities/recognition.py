"""Speech recognition result entities."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RecognizedSegment(BaseModel):
    """One recognized segment; alternatives are ordered best-first."""

    alternatives: list[str] = Field(default_factory=list)
    is_final: bool = False

    @property
    def best(self) -> str:
        return self.alternatives[0] if self.alternatives else ''


class RecognitionEvent(BaseModel):
    """A batch of segments emitted by the speech provider in one callback."""

    segments: list[RecognizedSegment] = Field(default_factory=list)

    @property
    def final_text(self) -> str:
        return ''.join(seg.best for seg in self.segments if seg.is_final)

    @property
    def interim_text(self) -> str:
        return ''.join(seg.best for seg in self.segments if not seg.is_final)
