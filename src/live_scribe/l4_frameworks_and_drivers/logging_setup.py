"""File-based debug logging setup."""

from __future__ import annotations

import logging
from pathlib import Path


def setup_file_logging(output_dir: Path) -> Path:
    """Send everything under the ``lsc`` logger to a debug log in *output_dir*."""
    log_path = output_dir / 'lsc_debug.log'
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    root = logging.getLogger('lsc')
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    logging.getLogger('lsc.pipeline').info('Debug logging started → %s', log_path)
    return log_path
