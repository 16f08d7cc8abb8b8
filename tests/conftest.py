"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from live_scribe.l1_entities.config import AppConfig
from live_scribe.l1_entities.recognition import RecognitionEvent, RecognizedSegment
from live_scribe.l1_entities.session import SessionMetadata, SessionSnapshot
from live_scribe.l2_use_cases.ports.completion_client import CompletionRequest
from live_scribe.l4_frameworks_and_drivers.infra_config import build_app_config

# --- Protocol-conforming Fakes ---


def echo_response(request: CompletionRequest) -> str:
    """Return the quoted payload of the prompt; interpret prompts get a ``[vi]`` marker."""
    first, last = request.prompt.find('"'), request.prompt.rfind('"')
    payload = request.prompt[first + 1 : last] if 0 <= first < last else request.prompt
    if request.prompt.startswith('Interpret'):
        return f'[vi] {payload}'
    return payload


class FakeCompletionClient:
    """Fake completion service for L2/L3 tests.

    Queued items (strings or exception instances) are consumed first, one per
    call; after that the responder answers. Setting ``gate`` holds every call
    until the event is set.
    """

    def __init__(self, responder: Callable[[CompletionRequest], str] = echo_response) -> None:
        self.responder = responder
        self.calls: list[CompletionRequest] = []
        self.gate: asyncio.Event | None = None
        self._queue: list[str | BaseException] = []
        self._connectivity = (True, '')

    async def complete(self, request: CompletionRequest) -> str:
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self._queue:
            item = self._queue.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        return self.responder(request)

    def check_connectivity(self) -> tuple[bool, str]:
        return self._connectivity

    def queue(self, *items: str | BaseException) -> None:
        self._queue.extend(items)

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    def set_connectivity(self, ok: bool, msg: str = '') -> None:
        self._connectivity = (ok, msg)

    @property
    def refine_calls(self) -> list[CompletionRequest]:
        return [c for c in self.calls if c.prompt.startswith('Refine')]

    @property
    def translate_calls(self) -> list[CompletionRequest]:
        return [c for c in self.calls if c.prompt.startswith('Interpret')]


class FakeSpeechProvider:
    """Fake recognizer for L3 session tests — tests drive the callbacks directly."""

    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.running = False
        self.fail_on_start: Exception | None = None
        self._on_result = None
        self._on_error = None
        self._on_end = None

    def bind(self, on_result, on_error, on_end) -> None:
        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end

    def start(self) -> None:
        self.starts += 1
        if self.fail_on_start is not None:
            raise self.fail_on_start
        self.running = True

    def stop(self) -> None:
        self.stops += 1
        if self.running:
            self.running = False
            self._on_end()

    # --- test drivers ---

    def emit_final(self, text: str) -> None:
        self._on_result(RecognitionEvent(segments=[RecognizedSegment(alternatives=[text], is_final=True)]))

    def emit_interim(self, text: str) -> None:
        self._on_result(RecognitionEvent(segments=[RecognizedSegment(alternatives=[text], is_final=False)]))

    def fail(self, code: str) -> None:
        """Report an error followed by the end of the stream, as browsers do."""
        self.running = False
        self._on_error(code)
        self._on_end()

    def end(self) -> None:
        self.running = False
        self._on_end()


class FakeSessionStore:
    """In-memory session store for L3 tests."""

    def __init__(self) -> None:
        self.saved: dict[str, SessionSnapshot] = {}
        self.save_calls: list[str] = []

    def save(self, session_id: str, snapshot: SessionSnapshot) -> None:
        self.save_calls.append(session_id)
        self.saved[session_id] = snapshot

    def load(self, session_id: str) -> SessionSnapshot | None:
        return self.saved.get(session_id)

    def list_sessions(self) -> list[SessionMetadata]:
        return [SessionMetadata(id=sid, name=sid) for sid in self.saved]

    def delete(self, session_id: str) -> None:
        self.saved.pop(session_id, None)


async def no_sleep(delay: float) -> None:
    await asyncio.sleep(0)


async def eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* on the running loop until it holds or *timeout* expires."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError('condition not met before timeout')
        await asyncio.sleep(0.005)


# --- Standard Fixtures ---


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    d = tmp_path / 'output'
    d.mkdir()
    return d


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def fast_config() -> AppConfig:
    """Defaults with every timer shrunk so controller tests run in milliseconds."""
    return build_app_config(
        {
            'recognition': {'restart_delay': 0.01, 'silence_commit': 0.05, 'velocity_window': 0.05},
            'refine': {'debounce': 0.01},
            'translate': {'slow_interval': 0.01, 'fast_interval': 0.005, 'min_spacing': 0.01, 'backoff_base': 0.0},
            'output': {'autosave_delay': 0.02},
        }
    )


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
recognition:
  language: "en-GB"
  max_restarts: 3
refine:
  model: "llama3:8b"
  debounce: 0.5
translate:
  model: "llama3:8b"
  target_language: "French"
output:
  directory: "./test_output"
llm_provider: "openai"
openai:
  base_url: "http://localhost:8000/v1"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p


@pytest.fixture
def fake_completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def fake_speech() -> FakeSpeechProvider:
    return FakeSpeechProvider()


@pytest.fixture
def fake_store() -> FakeSessionStore:
    return FakeSessionStore()
