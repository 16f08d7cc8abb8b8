"""live-scribe -- incremental transcription, refinement and translation pipeline."""

__version__ = '0.1.0'
