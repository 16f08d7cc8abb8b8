"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel


class RecognitionConfig(BaseModel):
    language: str
    max_restarts: int
    restart_delay: float
    silence_commit: float
    velocity_window: float


class SegmenterConfig(BaseModel):
    max_chars: int
    min_split: int


class RefineConfig(BaseModel):
    model: str
    debounce: float
    min_chars: int
    fast_min_chars: int
    fast_velocity: int  # chars/sec above which fast_min_chars applies
    temperature: float
    reference_chars: int


class TranslateConfig(BaseModel):
    model: str
    source_language: str
    target_language: str
    slow_interval: float
    fast_interval: float
    fast_velocity: int
    min_spacing: float
    max_retries: int
    backoff_base: float
    temperature: float
    reference_chars: int


class OutputConfig(BaseModel):
    directory: str
    autosave_delay: float


class AppConfig(BaseModel):
    recognition: RecognitionConfig
    segmenter: SegmenterConfig
    refine: RefineConfig
    translate: TranslateConfig
    output: OutputConfig
