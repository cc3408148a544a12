"""
Structured Logging — Rich console for interactive use, JSON lines for files.

The console gets colored, timestamped output via Rich. When a log file is
configured, every record is also appended to it as one JSON object per line.

Usage:
    from story_studio.core.logging import setup_logging

    setup_logging(log_file="story-studio.jsonl")
    log = logging.getLogger(__name__)
    log.info("Pipeline started")
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.logging import RichHandler

_CONFIGURED = False

# Third-party loggers that are chatty at INFO (one line per HTTP request).
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


class JsonLineFormatter(logging.Formatter):
    """Formats a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="seconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    level: int = logging.INFO, log_file: str | None = None, *, force: bool = False
) -> None:
    """Configure application-wide logging.

    Args:
        level: Logging level (default: INFO).
        log_file: Optional path of a JSON-lines log file.
        force: Replace handlers installed by an earlier call.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    root = logging.getLogger()
    root.setLevel(level)
    if force:
        for handler in list(root.handlers):
            root.removeHandler(handler)

    # Model output may contain [brackets]; never treat messages as markup.
    console = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    console.setFormatter(logging.Formatter("%(message)s"))
    console.setLevel(level)
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        file_handler.setLevel(level)
        root.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _CONFIGURED = True
