"""
Pipeline Orchestrator — sequences use cases into a complete story run.

The orchestrator drives one generation request through its stages:

  preconditions → folder → story → description → narration → completion

Any stage failure aborts the run. Files already written stay on disk, the
project folder is never deleted and no history entry is recorded.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from story_studio.application.dto import GenerationRequest, PipelineOptions
from story_studio.application.text_cleanup import build_first_message, project_folder_name
from story_studio.application.use_cases import (
    GenerateDescriptionUseCase,
    GenerateStoryUseCase,
    NarrateStoryUseCase,
    RecordHistoryUseCase,
    write_text,
)
from story_studio.core.timer import PipelineTimer
from story_studio.domain.entities import Conversation, PipelineResult, ProgressEvent
from story_studio.domain.exceptions import (
    ConfigurationError,
    FilesystemError,
    PipelineError,
    ProviderError,
)
from story_studio.domain.ports import (
    ChatProvider,
    ChatSession,
    FolderRevealer,
    HistoryRepository,
    NarrationSynthesizer,
    ProgressReporter,
    SettingsRepository,
)
from story_studio.domain.value_objects import (
    DESCRIPTION_FILE,
    STORY_FILE,
    PipelineStage,
    SettingKey,
    Severity,
)

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoryPipeline:
    """Orchestrates one story → description → narration run.

    All collaborators are injected; the pipeline holds no process-wide state.
    A single instance may be reused for sequential runs.
    """

    def __init__(
        self,
        provider: ChatProvider,
        synthesizer: NarrationSynthesizer,
        settings: SettingsRepository,
        history: HistoryRepository,
        *,
        options: PipelineOptions | None = None,
        reporter: ProgressReporter | None = None,
        revealer: FolderRevealer | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._synthesizer = synthesizer
        self._settings = settings
        self._history = history
        self._options = options or PipelineOptions()
        self._reporter = reporter
        self._revealer = revealer
        self._sleep = sleep
        self._clock = clock
        self._stage = PipelineStage.PRECONDITIONS
        self._project_dir: Path | None = None

    def run(self, request: GenerationRequest) -> PipelineResult:
        """Execute the pipeline, reporting failures as a result.

        Args:
            request: What to generate and where.

        Returns:
            PipelineResult; ``success`` is False if any stage failed.
        """
        try:
            return self.execute(request)
        except PipelineError as e:
            log.error("❌ PIPELINE FAILED at stage '%s': %s", e.stage or self._stage.value, e)
            self._emit(f"Failed: {e}", Severity.ERROR)
            return PipelineResult(
                error=str(e),
                error_kind=type(e).__name__,
                failed_stage=e.stage or self._stage.value,
                project_dir=self._project_dir,
            )
        except Exception as e:
            log.exception("❌ UNEXPECTED ERROR at stage '%s'", self._stage.value)
            self._emit(f"Unexpected error: {e}", Severity.ERROR)
            return PipelineResult(
                error=str(e) or type(e).__name__,
                error_kind="UnexpectedError",
                failed_stage=self._stage.value,
                project_dir=self._project_dir,
            )

    def execute(self, request: GenerationRequest) -> PipelineResult:
        """Execute the pipeline, raising on the first failure.

        Raises:
            ConfigurationError: Missing request field, API key or TTS path.
            FilesystemError: Project folder or a file could not be written.
            ProviderError: A chat request failed.
            SynthesisError: The narration subprocess failed.
        """
        self._project_dir = None
        started_at = self._clock()
        timer = PipelineTimer()

        self._enter(PipelineStage.PRECONDITIONS, f"Starting project: {request.project_name}")
        request = self._check_preconditions(request)
        self._emit(f"Model: {request.model}")

        self._enter(PipelineStage.FOLDER, "Creating project folder...")
        with timer.step("Folder"):
            project_dir = self._create_project_folder(request, started_at)

        self._enter(PipelineStage.STORY, "Generating story...")
        conversation = Conversation(model=request.model)
        with timer.step("Story"):
            session = self._open_session(request.model)
            story = GenerateStoryUseCase(
                max_parts=self._options.max_parts,
                part_delay_seconds=self._options.part_delay_seconds,
                sleep=self._sleep,
                reporter=self._reporter,
            ).execute(
                session,
                conversation,
                build_first_message(request.template, request.title, request.language),
            )
            write_text(project_dir / STORY_FILE, story, PipelineStage.STORY)
        self._emit(f"Story saved ({conversation.part} parts).", Severity.SUCCESS)

        self._enter(PipelineStage.DESCRIPTION, "Generating description...")
        with timer.step("Description"):
            description = GenerateDescriptionUseCase(
                self._options.description_prompt,
                delay_seconds=self._options.description_delay_seconds,
                sleep=self._sleep,
            ).execute(session, conversation, request.title)
            write_text(project_dir / DESCRIPTION_FILE, description, PipelineStage.DESCRIPTION)
        self._emit("Description saved.", Severity.SUCCESS)

        self._enter(PipelineStage.NARRATION, f"Creating audio ({request.voice})...")
        with timer.step("Narration"):
            NarrateStoryUseCase(self._synthesizer, self._reporter).execute(
                story, project_dir, request.voice
            )
        self._emit("Audio saved.", Severity.SUCCESS)

        self._enter(PipelineStage.COMPLETION, "Recording history...")
        RecordHistoryUseCase(self._history).execute(
            request.title, request.project_name, project_dir
        )
        if self._options.reveal_output:
            self._reveal(project_dir)

        total = timer.summary()
        self._emit(f"Done! Project folder: {project_dir}", Severity.SUCCESS)
        return PipelineResult(
            success=True,
            project_dir=project_dir,
            parts=conversation.part,
            total_duration_seconds=total,
        )

    # ── Stages ──

    def _check_preconditions(self, request: GenerationRequest) -> GenerationRequest:
        missing = request.missing_fields()
        if missing:
            raise ConfigurationError(f"Missing required fields: {', '.join(missing)}")
        if not self._setting(SettingKey.API_KEY):
            raise ConfigurationError("API key is not configured.")
        if not self._setting(SettingKey.TTS_PATH):
            raise ConfigurationError("Path to the edge-tts executable is not configured.")
        return request.with_defaults(
            voice=self._options.default_voice,
            language=self._options.default_language,
        )

    def _create_project_folder(self, request: GenerationRequest, started_at: datetime) -> Path:
        project_dir = request.output_path / project_folder_name(request.project_name, started_at)
        try:
            project_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create folder {project_dir}: {e}", cause=e) from e
        self._project_dir = project_dir
        log.info("📁 Project folder: %s", project_dir)
        return project_dir

    def _open_session(self, model: str) -> ChatSession:
        try:
            return self._provider.create_session(model)
        except PipelineError:
            raise
        except Exception as e:
            raise ProviderError(f"Cannot open chat session: {e}", cause=e) from e

    def _reveal(self, project_dir: Path) -> None:
        if self._revealer is None:
            return
        try:
            self._revealer.reveal(project_dir)
        except Exception as e:
            log.warning("⚠️  Could not open %s: %s", project_dir, e)
            self._emit(f"Could not open the project folder: {e}", Severity.WARNING)

    # ── Helpers ──

    def _setting(self, key: SettingKey) -> str:
        value = self._settings.get(key)
        return str(value).strip() if value else ""

    def _enter(self, stage: PipelineStage, message: str) -> None:
        self._stage = stage
        self._emit(message)

    def _emit(self, message: str, severity: Severity = Severity.INFO) -> None:
        if self._reporter:
            self._reporter.report(
                ProgressEvent(message=message, severity=severity, stage=self._stage.value)
            )
