"""
Domain Entities — core business objects of the story pipeline.

Entities are distinguished by their identity rather than their attributes.
They represent the fundamental concepts of one story generation run and of
the run history kept between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from story_studio.domain.value_objects import Severity, TurnRole


@dataclass(frozen=True)
class Turn:
    """One message exchanged with the chat provider."""

    role: TurnRole
    text: str


@dataclass
class Conversation:
    """Ephemeral state of one multi-turn story generation.

    Attributes:
        model: Model identifier the session was opened with.
        turns: Every message exchanged, in order. Never persisted.
        story: Accumulated, cleaned story text.
        part: Current part counter (1-indexed).
    """

    model: str
    turns: list[Turn] = field(default_factory=list)
    story: str = ""
    part: int = 1

    def record(self, role: TurnRole, text: str) -> None:
        """Append a turn to the transcript."""
        self.turns.append(Turn(role=role, text=text))

    def append_part(self, text: str) -> None:
        """Add a cleaned part to the story, followed by a blank line."""
        if text:
            self.story += text + "\n\n"

    def next_part(self) -> None:
        self.part += 1

    @property
    def sent_messages(self) -> list[str]:
        """Texts of all user turns, in order."""
        return [t.text for t in self.turns if t.role == TurnRole.USER]


@dataclass
class HistoryEntry:
    """A completed generation run, kept for later recall.

    Attributes:
        title: Story title.
        project_name: Project name the folder was derived from.
        path: Project folder.
        timestamp: Completion time, ISO-8601.
    """

    title: str
    project_name: str
    path: Path
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def to_dict(self) -> dict[str, str]:
        """Serialize using the persisted key names."""
        return {
            "title": self.title,
            "projectName": self.project_name,
            "path": str(self.path),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Build an entry from a persisted record.

        Raises:
            ValueError: If the record lacks a path or is not a mapping.
        """
        if not isinstance(data, dict) or not data.get("path"):
            raise ValueError(f"Malformed history record: {data!r}")
        return cls(
            title=str(data.get("title", "")),
            project_name=str(data.get("projectName", "")),
            path=Path(data["path"]),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass(frozen=True)
class ProgressEvent:
    """A progress message emitted while a run is in flight."""

    message: str
    severity: Severity = Severity.INFO
    stage: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    Attributes:
        success: Whether the run completed every stage.
        error: Human-readable error message if the run failed.
        error_kind: Exception class name of the failure.
        failed_stage: Stage the run aborted in.
        project_dir: The project folder, once it was created.
        parts: Number of story parts exchanged.
        total_duration_seconds: Wall time of the run.
    """

    success: bool = False
    error: str = ""
    error_kind: str = ""
    failed_stage: str = ""
    project_dir: Path | None = None
    parts: int = 0
    total_duration_seconds: float = 0.0
