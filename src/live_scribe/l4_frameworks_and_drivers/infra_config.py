"""Infrastructure provider configs — lives in L4, not domain."""

from __future__ import annotations

import copy

from pydantic import BaseModel, Field

from live_scribe.l1_entities.config import AppConfig
from live_scribe.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'recognition': {
        'language': 'en-US',
        'max_restarts': 5,
        'restart_delay': 0.25,
        'silence_commit': 0.4,
        'velocity_window': 1.0,
    },
    'segmenter': {
        'max_chars': 15,
        'min_split': 5,
    },
    'refine': {
        'model': 'gpt-oss:20b-cloud',
        'debounce': 0.25,
        'min_chars': 5,
        'fast_min_chars': 10,
        'fast_velocity': 30,
        'temperature': 0.1,
        'reference_chars': 1500,
    },
    'translate': {
        'model': 'gpt-oss:20b-cloud',
        'source_language': 'English',
        'target_language': 'Vietnamese',
        'slow_interval': 0.1,
        'fast_interval': 0.05,
        'fast_velocity': 40,
        'min_spacing': 0.15,
        'max_retries': 3,
        'backoff_base': 1.0,
        'temperature': 0.1,
        'reference_chars': 4000,
    },
    'output': {
        'directory': './output',
        'autosave_delay': 5.0,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


class OllamaProviderConfig(BaseModel):
    host: str = 'http://localhost:11434'


class OpenAIProviderConfig(BaseModel):
    api_key: str | None = None  # None → SDK reads OPENAI_API_KEY env
    base_url: str = 'https://api.openai.com/v1'


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    llm_provider: str = 'ollama'  # 'ollama' | 'openai'
    ollama: OllamaProviderConfig = Field(default_factory=OllamaProviderConfig)
    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
