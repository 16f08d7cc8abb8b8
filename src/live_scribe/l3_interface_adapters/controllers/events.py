"""Event types posted by the controllers to the presentation layer."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from live_scribe.l1_entities.session import RecordingStatus


class StageState(enum.Enum):
    IDLE = 'idle'
    DEBOUNCING = 'debouncing'
    IN_FLIGHT = 'in_flight'


@dataclass(frozen=True)
class BufferChanged:
    """The transcript text or its cursors changed."""

    text: str
    refined_upto: int
    translated_upto: int


@dataclass(frozen=True)
class InterimChanged:
    text: str


@dataclass(frozen=True)
class TranslationAppended:
    paragraph: str
    full_text: str


@dataclass(frozen=True)
class StageActivity:
    """A refine/translate call started (active=True) or settled."""

    stage: str
    active: bool


@dataclass(frozen=True)
class Advisory:
    """Non-blocking user-facing notice; cleared by the source's next success."""

    source: str
    message: str


@dataclass(frozen=True)
class AdvisoryCleared:
    source: str


@dataclass(frozen=True)
class StatusChanged:
    status: RecordingStatus


EventSink = Callable[[object], None]
