"""
Progress Adapters — ProgressReporter implementations.

Progress events carry an explicit severity, so presentation never has to
guess it from the message text.
"""

from __future__ import annotations

import logging

from story_studio.domain.entities import ProgressEvent
from story_studio.domain.ports import ProgressReporter
from story_studio.domain.value_objects import Severity

log = logging.getLogger("story_studio.progress")

_LEVELS: dict[Severity, int] = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}

_ICONS: dict[Severity, str] = {
    Severity.INFO: "ℹ️ ",
    Severity.SUCCESS: "✅",
    Severity.WARNING: "⚠️ ",
    Severity.ERROR: "❌",
}


class LoggingProgressReporter(ProgressReporter):
    """Writes progress events to the log at a level matching their severity."""

    def report(self, event: ProgressEvent) -> None:
        log.log(
            _LEVELS[event.severity],
            "%s [%s] %s",
            _ICONS[event.severity],
            event.stage or "-",
            event.message,
        )


class CollectingProgressReporter(LoggingProgressReporter):
    """Logs events and keeps them for later retrieval (HTTP responses)."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def report(self, event: ProgressEvent) -> None:
        self.events.append(event)
        super().report(event)
