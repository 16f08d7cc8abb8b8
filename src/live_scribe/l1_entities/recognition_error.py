"""L1 entity: speech provider error taxonomy."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel


class ErrorKind(enum.Enum):
    TRANSIENT = 'transient'
    FATAL_FOR_SESSION = 'fatal_for_session'


@dataclass(frozen=True)
class RecognitionErrorInfo:
    code: str
    kind: ErrorKind
    message: str
    recovery: str

    @property
    def advisory(self) -> str:
        return f'{self.message} {self.recovery}'


_ERROR_MAP: dict[str, tuple[ErrorKind, str, str]] = {
    'no-speech': (ErrorKind.TRANSIENT, 'No speech detected.', 'Check the microphone or speak louder.'),
    'audio-capture': (
        ErrorKind.TRANSIENT,
        'Microphone capture failed.',
        'Make sure no other application is holding the microphone.',
    ),
    'not-allowed': (
        ErrorKind.FATAL_FOR_SESSION,
        'Microphone access was denied.',
        'Grant microphone permission in the system settings.',
    ),
    'network': (ErrorKind.TRANSIENT, 'Network error.', 'Check the internet connection used by the speech service.'),
    'not-supported': (
        ErrorKind.FATAL_FOR_SESSION,
        'Speech recognition is not supported here.',
        'Use a supported speech provider.',
    ),
    'aborted': (ErrorKind.TRANSIENT, 'Recognition session was interrupted.', 'Restarting automatically...'),
}

_UNKNOWN = (ErrorKind.TRANSIENT, 'Recognition error.', 'Restarting...')


def classify_error(code: str) -> RecognitionErrorInfo:
    """Map a provider error code to its fixed message/recovery pair. Unknown codes get a generic pair."""
    kind, message, recovery = _ERROR_MAP.get(code, _UNKNOWN)
    return RecognitionErrorInfo(code=code, kind=kind, message=message, recovery=recovery)


class SessionErrorState(BaseModel):
    """Restart bookkeeping for the speech provider connection."""

    last_error_kind: ErrorKind | None = None
    last_error_code: str = ''
    consecutive_restarts: int = 0
