"""Replay runner — headless playback of a recognized-speech script through the full pipeline."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from live_scribe.l1_entities.config import AppConfig
from live_scribe.l1_entities.session import SessionSnapshot
from live_scribe.l3_interface_adapters.controllers.events import Advisory, TranslationAppended
from live_scribe.l3_interface_adapters.gateways.text_replay_speech_provider import TextReplaySpeechProvider
from live_scribe.l4_frameworks_and_drivers.container import DependencyContainer
from live_scribe.l4_frameworks_and_drivers.infra_config import InfraConfig

_POLL = 0.05


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def _print_event(event: object) -> None:
    if isinstance(event, TranslationAppended):
        _err(f'  > {event.paragraph}')
    elif isinstance(event, Advisory):
        _err(f'  ! [{event.source}] {event.message}')


async def replay(
    lines: list[str],
    config: AppConfig,
    out_dir: Path,
    infra: InfraConfig,
    *,
    session_id: str,
    pace: float = 0.5,
    description: str = '',
    reference_name: str = '',
    reference_text: str = '',
) -> SessionSnapshot:
    """Play *lines* as live speech, force-sync at the end and return the saved session."""
    provider = TextReplaySpeechProvider(lines, pace=pace, pause=config.recognition.silence_commit * 2)
    container = DependencyContainer(config, out_dir, provider, infra=infra, on_event=_print_event)
    pipeline = container.pipeline
    session = container.session

    pipeline.open_session(session_id)
    pipeline.set_context(description=description, reference_name=reference_name, reference_text=reference_text)

    session.start()
    try:
        while session.recording and not provider.finished.is_set():
            await asyncio.sleep(_POLL)
        if not provider.finished.is_set():
            _err(f'Recognition gave up with {provider.remaining} line(s) unplayed.')
        session.stop()
        await pipeline.force_sync()
    finally:
        await pipeline.close()
    return pipeline.snapshot()


def run_replay(
    script_path: Path,
    config: AppConfig,
    out_dir: Path,
    infra: InfraConfig,
    *,
    pace: float = 0.5,
    description: str = '',
    reference_path: Path | None = None,
) -> SessionSnapshot:
    """Load *script_path* and replay it. Blocks until done."""
    lines = script_path.read_text(encoding='utf-8').splitlines()
    reference_text = reference_path.read_text(encoding='utf-8') if reference_path is not None else ''
    reference_name = reference_path.name if reference_path is not None else ''

    _err(f'Replaying {len(lines)} line(s) from {script_path} ...')
    snapshot = asyncio.run(
        replay(
            lines,
            config,
            out_dir,
            infra,
            session_id=out_dir.name,
            pace=pace,
            description=description,
            reference_name=reference_name,
            reference_text=reference_text,
        )
    )
    _err(f'\nSession saved to {out_dir}')
    return snapshot
