"""
FastAPI Presentation Layer — REST API for the pipeline.

Provides HTTP endpoints to trigger story generation and browse history,
for driving the pipeline from another UI or a script.

Usage:
    story-studio serve --port 8000
    POST http://localhost:8000/generate {"project_name": "...", "title": "...", ...}
"""

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from story_studio.core.container import Container

log = logging.getLogger(__name__)


def create_app(env_file: str = ".env", container: "Container | None" = None) -> Any:
    """Create and configure the FastAPI application.

    Args:
        env_file: Environment file used when no container is given.
        container: Pre-built container (tests inject one).

    Returns:
        FastAPI application instance.
    """
    try:
        from fastapi import FastAPI, HTTPException
        from pydantic import BaseModel
    except ImportError as e:
        raise ImportError(
            "FastAPI not installed. Run: pip install 'story-studio[api]'"
        ) from e

    from story_studio import __version__
    from story_studio.application.dto import GenerationRequest
    from story_studio.domain.exceptions import PipelineError
    from story_studio.domain.value_objects import SettingKey
    from story_studio.infrastructure.adapters.progress import CollectingProgressReporter
    from story_studio.infrastructure.adapters.prompt_library import PromptLibrary

    if container is None:
        from story_studio.core.config import Settings
        from story_studio.core.container import Container
        from story_studio.core.logging import setup_logging

        setup_logging()
        container = Container(Settings(_env_file=env_file))

    app = FastAPI(
        title="Story Studio",
        description="Multi-part story, description and narration generation API",
        version=__version__,
    )

    class GenerateRequest(BaseModel):
        """Request body for the /generate endpoint."""
        project_name: str
        title: str
        template: str = ""
        template_name: str = ""
        voice: str = ""
        language: str = ""
        output_dir: str = ""
        model: str = ""

    class ProgressLine(BaseModel):
        """One progress event of a run."""
        message: str
        severity: str
        stage: str

    class GenerateResponse(BaseModel):
        """Response body for the /generate endpoint."""
        success: bool
        error: str = ""
        error_kind: str = ""
        failed_stage: str = ""
        project_dir: str = ""
        parts: int = 0
        duration_seconds: float = 0.0
        progress: list[ProgressLine] = []

    class HistoryItem(BaseModel):
        """A past run."""
        title: str
        project_name: str
        path: str
        timestamp: str

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "story-studio", "version": __version__}

    @app.post("/generate", response_model=GenerateResponse)
    def generate(request: GenerateRequest) -> GenerateResponse:
        """Run the pipeline synchronously and return its result.

        Pipeline failures are reported in the body with ``success: false``.
        """
        store = container.settings_store()
        template = request.template
        if not template and request.template_name:
            prompts_path = store.get(SettingKey.PROMPT_PATH)
            if not prompts_path:
                raise HTTPException(status_code=400, detail="No prompt file configured")
            try:
                template = PromptLibrary.load(prompts_path).get(request.template_name)
            except PipelineError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e

        reporter = CollectingProgressReporter()
        try:
            pipeline = container.pipeline(reporter, reveal_output=False)
            result = pipeline.run(
                GenerationRequest(
                    project_name=request.project_name,
                    template=template,
                    title=request.title,
                    output_dir=request.output_dir or store.get(SettingKey.OUTPUT_DIR) or "",
                    voice=request.voice or store.get(SettingKey.LAST_VOICE) or "",
                    language=request.language or store.get(SettingKey.LAST_LANGUAGE) or "",
                    model=(
                        request.model
                        or store.get(SettingKey.LAST_MODEL)
                        or container.settings.gemini.default_model
                    ),
                )
            )
        except Exception as e:
            log.error("Pipeline error: %s", e)
            raise HTTPException(
                status_code=500,
                detail=f"Internal Server Error: {e}",
            ) from e

        return GenerateResponse(
            success=result.success,
            error=result.error,
            error_kind=result.error_kind,
            failed_stage=result.failed_stage,
            project_dir=str(result.project_dir) if result.project_dir else "",
            parts=result.parts,
            duration_seconds=result.total_duration_seconds,
            progress=[
                ProgressLine(message=e.message, severity=e.severity.value, stage=e.stage)
                for e in reporter.events
            ],
        )

    @app.get("/history", response_model=list[HistoryItem])
    def history() -> list[HistoryItem]:
        """Past runs, most recent first."""
        return [
            HistoryItem(
                title=entry.title,
                project_name=entry.project_name,
                path=str(entry.path),
                timestamp=entry.timestamp,
            )
            for entry in container.history().list()
        ]

    @app.get("/templates")
    def templates() -> dict[str, list[str]]:
        """Template names from the configured prompt file."""
        prompts_path = container.settings_store().get(SettingKey.PROMPT_PATH)
        if not prompts_path:
            return {"templates": []}
        try:
            return {"templates": PromptLibrary.load(prompts_path).names()}
        except PipelineError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    return app
