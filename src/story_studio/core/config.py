"""
Configuration — type-safe settings via Pydantic BaseSettings.

Loads from environment variables or .env file. Each concern has its own
nested config group for clean separation and validation.

User-level state (API key, TTS path, last-used choices, history) is not
configuration: it lives in the persisted settings store under ``data_dir``.

Usage:
    settings = Settings()  # auto-loads from .env
    print(settings.gemini.default_model)
    print(settings.pipeline.part_delay_seconds)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from story_studio.application.dto import PipelineOptions
from story_studio.domain.value_objects import DEFAULT_LANGUAGE, DEFAULT_MODEL


class GeminiConfig(BaseSettings):
    """Gemini chat provider configuration."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    default_model: str = DEFAULT_MODEL
    models: list[str] = Field(
        default_factory=lambda: [
            "gemini-2.0-flash",
            "gemini-2.5-flash",
            "gemini-2.5-pro",
        ]
    )


class NarrationConfig(BaseSettings):
    """Narration (edge-tts executable) configuration."""

    model_config = SettingsConfigDict(env_prefix="TTS_")

    default_voice: str = "en-US-AriaNeural"
    default_language: str = DEFAULT_LANGUAGE


class PipelineConfig(BaseSettings):
    """Story loop tunables."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    max_parts: int = 30
    part_delay_seconds: float = 2.0
    description_delay_seconds: float = 2.0
    description_prompt: str = "Create a YouTube description for: {title}. Language: English."
    history_limit: int = 20
    reveal_output: bool = True

    @field_validator("max_parts", "history_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("part_delay_seconds", "description_delay_seconds")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delay cannot be negative")
        return v


class Settings(BaseSettings):
    """Root application settings — aggregates all config groups.

    Load order:
        1. Environment variables
        2. .env file (if present)
        3. Default values

    Usage:
        settings = Settings()
        settings = Settings(_env_file=".env.local")
    """

    model_config = SettingsConfigDict(
        env_prefix="STORY_STUDIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Path.home() / ".story-studio"
    log_file: str = ""

    # Nested configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    narration: NarrationConfig = Field(default_factory=NarrationConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @property
    def settings_file(self) -> Path:
        """Location of the persisted key/value settings blob."""
        return self.data_dir / "settings.json"

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def pipeline_options(self, *, reveal_output: bool | None = None) -> PipelineOptions:
        """Project the config groups onto the pipeline's tunables."""
        return PipelineOptions(
            max_parts=self.pipeline.max_parts,
            part_delay_seconds=self.pipeline.part_delay_seconds,
            description_delay_seconds=self.pipeline.description_delay_seconds,
            description_prompt=self.pipeline.description_prompt,
            default_voice=self.narration.default_voice,
            default_language=self.narration.default_language,
            reveal_output=(
                self.pipeline.reveal_output if reveal_output is None else reveal_output
            ),
        )
