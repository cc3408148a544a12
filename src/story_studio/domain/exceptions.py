"""
Domain Exceptions — typed error hierarchy for the pipeline.

Each failure kind has its own exception type. All of them abort the current
run only; none is retried and none is fatal to the hosting process.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, stage: str = "", cause: Exception | None = None):
        self.stage = stage
        self.cause = cause
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Raised when a request field, the API key or the TTS path is missing."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="preconditions", cause=cause)


class ProviderError(PipelineError):
    """Raised when the generative chat provider fails (network, auth, quota)."""

    def __init__(self, message: str, stage: str = "story", cause: Exception | None = None):
        super().__init__(message, stage=stage, cause=cause)


class FilesystemError(PipelineError):
    """Raised when the project folder or one of its files cannot be written."""

    def __init__(self, message: str, stage: str = "folder", cause: Exception | None = None):
        super().__init__(message, stage=stage, cause=cause)


class SynthesisError(PipelineError):
    """Raised when the narration subprocess fails to launch or exits non-zero.

    Attributes:
        output: Diagnostic output captured from the subprocess.
        returncode: Process exit code, or None if it never started.
    """

    def __init__(
        self,
        message: str,
        output: str = "",
        returncode: int | None = None,
        cause: Exception | None = None,
    ):
        self.output = output
        self.returncode = returncode
        super().__init__(message, stage="narration", cause=cause)
