"""
Data Transfer Objects — clean boundaries between layers.

DTOs carry data from the presentation layer (CLI, HTTP API) into the
pipeline without exposing settings or infrastructure details.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from story_studio.domain.value_objects import DEFAULT_LANGUAGE, DEFAULT_MODEL


@dataclass(frozen=True)
class GenerationRequest:
    """Request to generate one narrated story project.

    Attributes:
        project_name: Prefix of the project folder name.
        template: Prompt template with ``{TITLE}`` / ``{LANGUAGE}`` placeholders.
        title: Story title.
        output_dir: Directory the project folder is created in.
        voice: Narration voice identifier.
        language: Target language of the story.
        model: Chat model identifier.
    """

    project_name: str
    template: str
    title: str
    output_dir: str | Path
    voice: str = ""
    language: str = ""
    model: str = DEFAULT_MODEL

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty or whitespace-only."""
        required = {
            "project_name": self.project_name,
            "title": self.title,
            "template": self.template,
            "output_dir": str(self.output_dir) if self.output_dir else "",
        }
        return [name for name, value in required.items() if not (value or "").strip()]

    def with_defaults(self, voice: str, language: str = DEFAULT_LANGUAGE) -> GenerationRequest:
        """Fill empty voice, language and model fields."""
        return replace(
            self,
            voice=self.voice.strip() or voice,
            language=self.language.strip() or language,
            model=self.model.strip() or DEFAULT_MODEL,
        )

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir).expanduser()


@dataclass(frozen=True)
class PipelineOptions:
    """Tunables of a pipeline run.

    Attributes:
        max_parts: Ceiling on story parts (runaway-cost safeguard).
        part_delay_seconds: Pause between story parts (rate-limit courtesy).
        description_delay_seconds: Pause before the description request.
        description_prompt: Description instruction; ``{title}`` is substituted.
        default_voice: Voice used when the request names none.
        default_language: Language used when the request names none.
        reveal_output: Whether to open the folder when the run completes.
    """

    max_parts: int = 30
    part_delay_seconds: float = 2.0
    description_delay_seconds: float = 2.0
    description_prompt: str = "Create a YouTube description for: {title}. Language: English."
    default_voice: str = "en-US-AriaNeural"
    default_language: str = DEFAULT_LANGUAGE
    reveal_output: bool = True
