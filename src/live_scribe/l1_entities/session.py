"""Session entities: recording status, context, persisted snapshot."""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, Field


class RecordingStatus(enum.Enum):
    IDLE = 'idle'
    RECORDING = 'recording'
    PAUSED = 'paused'
    STOPPED = 'stopped'


class SessionContext(BaseModel):
    """User-supplied context that steers refinement and translation."""

    description: str = ''
    reference_name: str = ''
    reference_text: str = ''


class SessionSnapshot(BaseModel):
    """Everything needed to resume a session: buffers, cursors, context and recorded time."""

    text: str = ''
    translated_text: str = ''
    refined_upto: int = 0
    translated_upto: int = 0
    context: SessionContext = Field(default_factory=SessionContext)
    duration_seconds: float = 0.0
    updated_at: float = Field(default_factory=time.time)


class SessionMetadata(BaseModel):
    id: str
    name: str
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    word_count: int = 0
    duration_seconds: float = 0.0
