"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from live_scribe.l1_entities.config import AppConfig
from live_scribe.l2_use_cases.ports.completion_client import CompletionClient
from live_scribe.l2_use_cases.ports.config_loader import ConfigLoader
from live_scribe.l2_use_cases.ports.persistence import SessionStore
from live_scribe.l2_use_cases.ports.speech_provider import SpeechProvider
from live_scribe.l3_interface_adapters.controllers.events import EventSink
from live_scribe.l3_interface_adapters.controllers.pipeline_controller import PipelineController
from live_scribe.l3_interface_adapters.controllers.recognition_session import RecognitionSession
from live_scribe.l3_interface_adapters.gateways.json_session_store import JsonSessionStore
from live_scribe.l3_interface_adapters.gateways.ollama_completion_client import OllamaCompletionClient
from live_scribe.l3_interface_adapters.gateways.openai_completion_client import OpenAICompatCompletionClient
from live_scribe.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader
from live_scribe.l4_frameworks_and_drivers.infra_config import InfraConfig


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing.

    Must be constructed inside a running event loop: the pipeline and the
    recognition session schedule asyncio tasks as soon as recording starts.
    """

    def __init__(
        self,
        config: AppConfig,
        output_dir: Path,
        speech_provider: SpeechProvider,
        infra: InfraConfig | None = None,
        on_event: EventSink | None = None,
    ) -> None:
        self.config = config
        self.output_dir = output_dir

        _infra = infra or InfraConfig()
        self.store: SessionStore = JsonSessionStore(output_dir)
        self.completion_client: CompletionClient = self.build_completion_client(_infra)
        self.speech_provider = speech_provider

        self.pipeline = PipelineController(
            config=config,
            completion_client=self.completion_client,
            store=self.store,
            on_event=on_event,
        )
        self.session = RecognitionSession(speech_provider, self.pipeline, config.recognition)

    @staticmethod
    def build_completion_client(infra: InfraConfig) -> CompletionClient:
        if infra.llm_provider == 'openai':
            return OpenAICompatCompletionClient(api_key=infra.openai.api_key, base_url=infra.openai.base_url)
        if infra.llm_provider == 'ollama':
            return OllamaCompletionClient(host=infra.ollama.host)
        raise ValueError(f"Unknown llm_provider {infra.llm_provider!r}; expected 'ollama' or 'openai'")

    @staticmethod
    def config_loader() -> ConfigLoader:
        return YamlConfigLoader()
