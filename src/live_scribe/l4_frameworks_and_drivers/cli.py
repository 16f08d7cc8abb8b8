"""CLI entry point for live-scribe."""

from __future__ import annotations

import re
import sys
from datetime import datetime
from pathlib import Path

import click

from live_scribe import __version__


def _make_session_dir(base_dir: Path, label: str | None) -> Path:
    """Create a timestamped session subdirectory under base_dir."""
    stamp = datetime.now().strftime('%Y-%m-%d_%H%M%S')
    if label:
        safe_label = re.sub(r'[^\w\-]', '_', label)
        name = f'{stamp}_{safe_label}'
    else:
        name = stamp
    session_dir = base_dir / name
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


@click.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)
@click.option(
    '-o',
    '--output-dir',
    default=None,
    type=click.Path(),
    help='Base output directory (session subfolder created automatically).',
)
@click.option(
    '-l',
    '--label',
    default=None,
    help="Session label appended to the timestamp folder (e.g. 'keynote').",
)
@click.option(
    '--context',
    'description',
    default='',
    help='Short description of the talk, used to steer refinement and interpretation.',
)
@click.option(
    '-r',
    '--reference',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Plain-text reference material (slides, glossary) for jargon and names.',
)
@click.option(
    '--pace',
    default=0.5,
    show_default=True,
    type=click.FloatRange(min=0.0),
    help='Seconds between replayed lines.',
)
@click.version_option(version=__version__)
def cli(script, config_path, output_dir, label, description, reference, pace):
    """live-scribe -- replay recognized speech through the refine and interpret pipeline."""
    from live_scribe.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from live_scribe.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_app_config,
    )

    config_loader = YamlConfigLoader()

    try:
        overrides: dict = {}
        if output_dir:
            overrides['output'] = {'directory': output_dir}
        raw = config_loader.load_raw(config_path, overrides=overrides if overrides else None)
        config = build_app_config(raw)
        infra = InfraConfig.model_validate(raw)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    base_dir = Path(output_dir or config.output.directory)
    out_dir = _make_session_dir(base_dir, label)

    _preflight_completion(infra)

    from live_scribe.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: session runs only
        setup_file_logging,
    )
    from live_scribe.l4_frameworks_and_drivers.replay_runner import (  # noqa: PLC0415 -- deferred: asyncio pipeline not loaded for --help
        run_replay,
    )

    setup_file_logging(out_dir)
    snapshot = run_replay(
        Path(script),
        config,
        out_dir,
        infra,
        pace=pace,
        description=description,
        reference_path=Path(reference) if reference else None,
    )
    click.echo(snapshot.translated_text)


def _preflight_completion(infra) -> None:
    from live_scribe.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: preflight only runs when starting a session
        DependencyContainer,
    )

    try:
        client = DependencyContainer.build_completion_client(infra)
    except ValueError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    ok, err = client.check_connectivity()
    if not ok:
        click.echo(f'Warning: completion service not reachable ({err}).', err=True)
        click.echo('Transcript-only mode: refinement and interpretation will fail.', err=True)
