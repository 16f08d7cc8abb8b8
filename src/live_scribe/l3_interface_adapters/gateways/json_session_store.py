"""Gateway: JSON file session store — implements SessionStore port."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from pydantic import TypeAdapter

from live_scribe.l1_entities.errors import SessionNotFoundError
from live_scribe.l1_entities.session import SessionMetadata, SessionSnapshot

log = logging.getLogger('lsc.persist')

_METADATA_LIST = TypeAdapter(list[SessionMetadata])
_NAME_CHARS = 40


def session_name(snapshot: SessionSnapshot, fallback: str) -> str:
    """Label a session by its first transcript line, else by *fallback*."""
    first_line = snapshot.text.strip().split('\n', 1)[0].strip()
    if not first_line:
        return fallback
    if len(first_line) > _NAME_CHARS:
        return first_line[:_NAME_CHARS].rstrip() + '...'
    return first_line


class JsonSessionStore:
    """One ``sessions/<id>.json`` snapshot per session plus a ``sessions.json`` index."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        self._sessions_dir = output_dir / 'sessions'
        self._sessions_dir.mkdir(parents=True, exist_ok=True)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def _index_path(self) -> Path:
        return self._output_dir / 'sessions.json'

    def _snapshot_path(self, session_id: str) -> Path:
        return self._sessions_dir / f'{session_id}.json'

    def save(self, session_id: str, snapshot: SessionSnapshot) -> None:
        snapshot = snapshot.model_copy(update={'updated_at': time.time()})
        path = self._snapshot_path(session_id)
        path.write_text(snapshot.model_dump_json(indent=2), encoding='utf-8')

        index = {m.id: m for m in self._read_index()}
        previous = index.get(session_id)
        index[session_id] = SessionMetadata(
            id=session_id,
            name=session_name(snapshot, previous.name if previous else session_id),
            created_at=previous.created_at if previous else snapshot.updated_at,
            updated_at=snapshot.updated_at,
            word_count=len(snapshot.text.split()),
            duration_seconds=snapshot.duration_seconds,
        )
        self._write_index(list(index.values()))
        log.debug('Wrote session %s to %s (%d chars)', session_id, path.name, len(snapshot.text))

    def load(self, session_id: str) -> SessionSnapshot | None:
        path = self._snapshot_path(session_id)
        if not path.exists():
            return None
        return SessionSnapshot.model_validate_json(path.read_text(encoding='utf-8'))

    def list_sessions(self) -> list[SessionMetadata]:
        return sorted(self._read_index(), key=lambda m: m.updated_at, reverse=True)

    def delete(self, session_id: str) -> None:
        index = self._read_index()
        remaining = [m for m in index if m.id != session_id]
        path = self._snapshot_path(session_id)
        if len(remaining) == len(index) and not path.exists():
            raise SessionNotFoundError(session_id)
        path.unlink(missing_ok=True)
        self._write_index(remaining)
        log.info('Deleted session %s', session_id)

    def _read_index(self) -> list[SessionMetadata]:
        if not self._index_path.exists():
            return []
        return _METADATA_LIST.validate_json(self._index_path.read_text(encoding='utf-8'))

    def _write_index(self, entries: list[SessionMetadata]) -> None:
        self._index_path.write_bytes(_METADATA_LIST.dump_json(entries, indent=2))
