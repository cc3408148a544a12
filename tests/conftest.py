"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from story_studio.application.dto import GenerationRequest, PipelineOptions
from story_studio.application.pipeline import StoryPipeline
from story_studio.domain.entities import ProgressEvent
from story_studio.domain.exceptions import SynthesisError
from story_studio.domain.ports import (
    ChatProvider,
    ChatSession,
    NarrationSynthesizer,
    ProgressReporter,
    SettingsRepository,
)
from story_studio.domain.value_objects import SettingKey
from story_studio.infrastructure.adapters.json_store import SettingsHistoryRepository

START_TIME = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)


class InMemorySettings(SettingsRepository):
    def __init__(self, values: dict[SettingKey, Any] | None = None) -> None:
        self.values: dict[SettingKey, Any] = dict(values or {})

    def get(self, key: SettingKey, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: SettingKey, value: Any) -> None:
        self.values[key] = value


class ScriptedSession(ChatSession):
    """Replies from a script; the last reply repeats once the script runs out."""

    def __init__(self, replies: Iterable[str | Exception], description: str | Exception) -> None:
        self.replies = list(replies)
        self.description = description
        self.sent: list[str] = []

    def send(self, text: str) -> str:
        self.sent.append(text)
        if text.startswith("Create a YouTube description"):
            reply = self.description
        else:
            reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedProvider(ChatProvider):
    def __init__(
        self, replies: Iterable[str | Exception], description: str | Exception = "A description."
    ) -> None:
        self._replies = list(replies)
        self._description = description
        self.sessions: list[ScriptedSession] = []
        self.models: list[str] = []

    def create_session(self, model: str) -> ChatSession:
        self.models.append(model)
        session = ScriptedSession(self._replies, self._description)
        self.sessions.append(session)
        return session

    @property
    def session(self) -> ScriptedSession:
        return self.sessions[-1]


class FakeSynthesizer(NarrationSynthesizer):
    """Writes a fake MP3, or fails like a non-zero edge-tts exit."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[Path, Path, str]] = []
        self.narrated_text = ""

    def synthesize(self, text_file: Path, output_path: Path, voice: str) -> Path:
        self.calls.append((text_file, output_path, voice))
        self.narrated_text = text_file.read_text(encoding="utf-8")
        if self.fail:
            raise SynthesisError(
                "edge-tts exited with code 1: No audio was received",
                output="No audio was received",
                returncode=1,
            )
        output_path.write_bytes(b"ID3")
        return output_path


class RecordingReporter(ProgressReporter):
    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def report(self, event: ProgressEvent) -> None:
        self.events.append(event)


@pytest.fixture
def settings_repo() -> InMemorySettings:
    return InMemorySettings(
        {SettingKey.API_KEY: "test-key", SettingKey.TTS_PATH: "/usr/bin/edge-tts"}
    )


@pytest.fixture
def history(settings_repo: InMemorySettings) -> SettingsHistoryRepository:
    return SettingsHistoryRepository(settings_repo, limit=20)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def make_request(tmp_path: Path) -> Callable[..., GenerationRequest]:
    def _make(**overrides: Any) -> GenerationRequest:
        fields: dict[str, Any] = {
            "project_name": "tales",
            "template": "Write a story called {TITLE} in {LANGUAGE}.",
            "title": "The Lighthouse",
            "output_dir": tmp_path / "out",
            "voice": "en-GB-SoniaNeural",
            "language": "English",
        }
        fields.update(overrides)
        return GenerationRequest(**fields)

    return _make


@pytest.fixture
def make_pipeline(
    settings_repo: InMemorySettings,
    history: SettingsHistoryRepository,
    synthesizer: FakeSynthesizer,
    sleeps: list[float],
    reporter: RecordingReporter,
) -> Callable[..., StoryPipeline]:
    def _make(
        provider: ChatProvider,
        synth: NarrationSynthesizer | None = None,
        **overrides: Any,
    ) -> StoryPipeline:
        kwargs: dict[str, Any] = {
            "options": PipelineOptions(reveal_output=False),
            "reporter": reporter,
            "sleep": sleeps.append,
            "clock": lambda: START_TIME,
        }
        kwargs.update(overrides)
        return StoryPipeline(provider, synth or synthesizer, settings_repo, history, **kwargs)

    return _make


@pytest.fixture
def scripted_provider() -> type[ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def failing_synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer(fail=True)
