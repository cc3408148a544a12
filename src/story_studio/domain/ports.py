"""
Domain Ports — abstract interfaces for infrastructure dependencies.

Ports define the contracts that the pipeline requires from the outside world.
Infrastructure adapters implement these interfaces, so the pipeline depends
on abstractions and tests can substitute scripted fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from story_studio.domain.entities import HistoryEntry, ProgressEvent
from story_studio.domain.value_objects import SettingKey

# ═══════════════════════════════════════════════════════════════
# Generation Ports
# ═══════════════════════════════════════════════════════════════


class ChatSession(ABC):
    """A stateful multi-turn conversation with a generative model."""

    @abstractmethod
    def send(self, text: str) -> str:
        """Send one user turn and return the model's reply text.

        Raises:
            ProviderError: On network, authentication or quota failures.
        """


class ChatProvider(ABC):
    """Port for opening chat sessions.

    Implementations: GeminiChatProvider
    """

    @abstractmethod
    def create_session(self, model: str) -> ChatSession:
        """Open a fresh session with no prior history.

        Args:
            model: Model identifier.
        """


class NarrationSynthesizer(ABC):
    """Port for text-to-speech narration.

    Implementations: EdgeTTSSynthesizer
    """

    @abstractmethod
    def synthesize(self, text_file: Path, output_path: Path, voice: str) -> Path:
        """Convert a text file into an audio file.

        Args:
            text_file: UTF-8 text to narrate.
            output_path: Where to write the audio.
            voice: Voice identifier.

        Returns:
            Path of the written audio file.

        Raises:
            SynthesisError: If the synthesizer fails or writes nothing.
        """


# ═══════════════════════════════════════════════════════════════
# Persistence Ports
# ═══════════════════════════════════════════════════════════════


class SettingsRepository(ABC):
    """Port for the persisted key/value settings blob.

    Implementations: JsonSettingsStore
    """

    @abstractmethod
    def get(self, key: SettingKey, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if absent."""

    @abstractmethod
    def set(self, key: SettingKey, value: Any) -> None:
        """Store a value, replacing any previous one."""


class HistoryRepository(ABC):
    """Port for the capped, most-recent-first run history.

    Implementations: SettingsHistoryRepository
    """

    @abstractmethod
    def list(self) -> list[HistoryEntry]:
        """Return the entries, most recent first."""

    @abstractmethod
    def add(self, entry: HistoryEntry) -> None:
        """Prepend an entry, evicting the oldest beyond the cap."""


# ═══════════════════════════════════════════════════════════════
# Presentation Ports
# ═══════════════════════════════════════════════════════════════


class ProgressReporter(ABC):
    """Port receiving progress events during a run.

    Implementations: LoggingProgressReporter
    """

    @abstractmethod
    def report(self, event: ProgressEvent) -> None:
        """Handle one progress event."""


class FolderRevealer(ABC):
    """Port for showing a finished project folder to the user.

    Implementations: SystemFolderRevealer, NullFolderRevealer
    """

    @abstractmethod
    def reveal(self, path: Path) -> None:
        """Open the folder in the platform's file browser.

        Raises:
            OSError: If the folder cannot be opened. Callers treat this as
                non-fatal.
        """
