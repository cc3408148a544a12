"""
Use Cases — application-level business operations.

Each use case represents a single, well-defined stage of a story run.
Use cases depend only on domain ports (interfaces), never on concrete
infrastructure implementations.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from story_studio.application.text_cleanup import (
    clean_part,
    prepare_for_narration,
    split_sentinel,
)
from story_studio.domain.entities import Conversation, HistoryEntry, ProgressEvent
from story_studio.domain.exceptions import (
    FilesystemError,
    PipelineError,
    ProviderError,
    SynthesisError,
)
from story_studio.domain.ports import (
    ChatSession,
    HistoryRepository,
    NarrationSynthesizer,
    ProgressReporter,
)
from story_studio.domain.value_objects import (
    AUDIO_FILE,
    CONTINUE_MESSAGE,
    NARRATION_TEMP_FILE,
    PipelineStage,
    Severity,
    TurnRole,
)

log = logging.getLogger(__name__)


def exchange(
    session: ChatSession,
    conversation: Conversation,
    text: str,
    stage: PipelineStage = PipelineStage.STORY,
) -> str:
    """Send one turn and record both sides of it.

    Raises:
        ProviderError: If the provider fails for any reason.
    """
    conversation.record(TurnRole.USER, text)
    try:
        reply = session.send(text)
    except ProviderError as e:
        # Adapters do not know which stage they serve.
        e.stage = stage.value
        raise
    except Exception as e:
        raise ProviderError(f"Chat request failed: {e}", stage=stage.value, cause=e) from e
    conversation.record(TurnRole.MODEL, reply)
    return reply


def write_text(path: Path, text: str, stage: PipelineStage) -> Path:
    """Write a UTF-8 text file, translating OS errors to FilesystemError."""
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Cannot write {path}: {e}", stage=stage.value, cause=e) from e
    return path


class GenerateStoryUseCase:
    """Drive the multi-turn conversation until the story is finished.

    Flow: first message → reply → cleanup → "Continue" → ... until the
    ``END`` sentinel or the part ceiling.
    """

    def __init__(
        self,
        *,
        max_parts: int = 30,
        part_delay_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        reporter: ProgressReporter | None = None,
    ) -> None:
        if max_parts < 1:
            raise ValueError("max_parts must be at least 1")
        self._max_parts = max_parts
        self._delay = part_delay_seconds
        self._sleep = sleep
        self._reporter = reporter

    def execute(self, session: ChatSession, conversation: Conversation, first_message: str) -> str:
        """Run the part loop.

        Args:
            session: Open chat session (fresh, no history).
            conversation: Conversation state to accumulate into.
            first_message: Templated opening prompt.

        Returns:
            The accumulated story text.

        Raises:
            ProviderError: If any turn fails. The loop is not retried.
        """
        message = first_message
        while True:
            self._notify(f"Generating part {conversation.part}...")
            reply = exchange(session, conversation, message)

            text, finished = split_sentinel(reply)
            conversation.append_part(clean_part(text))

            if finished:
                log.info("🏁 End marker received at part %d", conversation.part)
                break
            if conversation.part >= self._max_parts:
                self._notify(
                    f"Part limit ({self._max_parts}) reached without an end marker.",
                    Severity.WARNING,
                )
                break

            if self._delay > 0:
                self._sleep(self._delay)
            message = CONTINUE_MESSAGE
            conversation.next_part()

        log.info(
            "✅ Story generated (%d parts, %d words)",
            conversation.part,
            len(conversation.story.split()),
        )
        return conversation.story

    def _notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        if severity is Severity.WARNING:
            log.warning("⚠️  %s", message)
        else:
            log.info("📝 %s", message)
        if self._reporter:
            self._reporter.report(
                ProgressEvent(message, severity=severity, stage=PipelineStage.STORY.value)
            )


class GenerateDescriptionUseCase:
    """Ask for a marketing description within the story conversation.

    Flow: Conversation (with story context) → one prompt → raw reply
    """

    def __init__(
        self,
        prompt_template: str,
        *,
        delay_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._template = prompt_template
        self._delay = delay_seconds
        self._sleep = sleep

    def execute(self, session: ChatSession, conversation: Conversation, title: str) -> str:
        """Request the description; the reply is returned uncleaned.

        Raises:
            ProviderError: If the request fails.
        """
        if self._delay > 0:
            self._sleep(self._delay)
        prompt = self._template.replace("{title}", title)
        log.info("🏷️  Generating description...")
        return exchange(session, conversation, prompt, stage=PipelineStage.DESCRIPTION)


class NarrateStoryUseCase:
    """Generate speech audio from the story text.

    Flow: Story → speech-safe text file → synthesizer → audio.mp3
    """

    def __init__(
        self, synthesizer: NarrationSynthesizer, reporter: ProgressReporter | None = None
    ) -> None:
        self._synthesizer = synthesizer
        self._reporter = reporter

    def execute(self, story: str, project_dir: Path, voice: str) -> Path:
        """Synthesize ``audio.mp3`` inside the project folder.

        Args:
            story: Accumulated story text.
            project_dir: Project folder.
            voice: Voice identifier.

        Returns:
            Path to the audio file.

        Raises:
            FilesystemError: If the temporary text file cannot be written.
            SynthesisError: If synthesis fails.
        """
        temp_path = write_text(
            project_dir / NARRATION_TEMP_FILE,
            prepare_for_narration(story),
            PipelineStage.NARRATION,
        )
        audio_path = project_dir / AUDIO_FILE

        log.info("🔊 Generating narration (%s)...", voice)
        try:
            result = self._synthesizer.synthesize(temp_path, audio_path, voice)
        except PipelineError:
            raise
        except Exception as e:
            raise SynthesisError(f"Narration synthesis failed: {e}", cause=e) from e

        self._discard(temp_path)
        log.info("✅ Narration written: %s", result)
        return result

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            log.warning("⚠️  Could not remove %s: %s", path.name, e)
            if self._reporter:
                self._reporter.report(
                    ProgressEvent(
                        f"Could not remove {path.name}: {e}",
                        severity=Severity.WARNING,
                        stage=PipelineStage.NARRATION.value,
                    )
                )


class RecordHistoryUseCase:
    """Prepend a completed run to the capped history."""

    def __init__(self, history: HistoryRepository) -> None:
        self._history = history

    def execute(self, title: str, project_name: str, project_dir: Path) -> HistoryEntry:
        """Record the run.

        Raises:
            FilesystemError: If the history cannot be persisted.
        """
        entry = HistoryEntry(title=title, project_name=project_name, path=project_dir)
        try:
            self._history.add(entry)
        except OSError as e:
            raise FilesystemError(
                f"Cannot save history: {e}", stage=PipelineStage.COMPLETION.value, cause=e
            ) from e
        log.info("🗂️  History updated: %s", project_dir.name)
        return entry
