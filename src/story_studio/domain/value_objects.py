"""
Domain Value Objects — immutable, self-validating types.

Value objects represent concepts defined by their attributes rather than
a unique identity. They are always immutable and validate their own invariants.
"""

from __future__ import annotations

from enum import Enum

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_LANGUAGE = "English"

STORY_FILE = "story.txt"
DESCRIPTION_FILE = "description.txt"
AUDIO_FILE = "audio.mp3"
NARRATION_TEMP_FILE = "temp_tts.txt"

END_SENTINEL = "END"
CONTINUE_MESSAGE = "Continue"


class SettingKey(str, Enum):
    """Keys of the persisted key/value settings blob."""

    API_KEY = "apiKey"
    TTS_PATH = "edgeTtsPath"
    OUTPUT_DIR = "outputDir"
    LAST_VOICE = "lastVoice"
    LAST_LANGUAGE = "lastLanguage"
    LAST_MODEL = "lastModel"
    PROMPT_PATH = "promptPath"
    HISTORY = "generationHistory"

    @property
    def is_secret(self) -> bool:
        """Whether the value must be masked when displayed."""
        return self is SettingKey.API_KEY

    @classmethod
    def from_str(cls, value: str) -> SettingKey:
        """Parse a key by its stored name or enum name (case-insensitive)."""
        normalized = value.strip().replace("-", "_").lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(
            f"Unknown setting '{value}'. "
            f"Supported: {', '.join(m.value for m in cls)}"
        )


class PipelineStage(str, Enum):
    """Stages of one story generation run, in execution order."""

    PRECONDITIONS = "preconditions"
    FOLDER = "folder"
    STORY = "story"
    DESCRIPTION = "description"
    NARRATION = "narration"
    COMPLETION = "completion"


class Severity(str, Enum):
    """Severity of a progress event."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class TurnRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    MODEL = "model"
