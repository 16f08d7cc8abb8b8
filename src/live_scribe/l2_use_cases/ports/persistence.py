"""Port: session store for buffer snapshots."""

from __future__ import annotations

from typing import Protocol

from live_scribe.l1_entities.session import SessionMetadata, SessionSnapshot


class SessionStore(Protocol):
    """Abstract key-value store of session snapshots."""

    def save(self, session_id: str, snapshot: SessionSnapshot) -> None:
        """Persist the snapshot under *session_id*, replacing any previous one."""
        ...

    def load(self, session_id: str) -> SessionSnapshot | None:
        """Return the stored snapshot, or None if the session has none."""
        ...

    def list_sessions(self) -> list[SessionMetadata]:
        """Return session metadata, most recently updated first."""
        ...

    def delete(self, session_id: str) -> None:
        """Remove a session and its metadata."""
        ...
