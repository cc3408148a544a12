"""
Prompt Library — named prompt templates loaded from a JSON file.

The file is a flat object mapping template names to template text:

    {"Fairy tale": "Write a fairy tale called {TITLE} in {LANGUAGE}..."}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from story_studio.domain.exceptions import ConfigurationError
from story_studio.infrastructure.adapters.json_store import read_json

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptLibrary:
    """Templates keyed by name, in file order."""

    path: Path
    templates: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> PromptLibrary:
        """Load templates from a JSON file.

        Non-string values are ignored.

        Raises:
            ConfigurationError: If the file is missing, malformed, or not
                a JSON object.
        """
        path = Path(path).expanduser()
        data = read_json(path)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Cannot read prompt file: {path}")

        templates = {str(k): v for k, v in data.items() if isinstance(v, str)}
        skipped = len(data) - len(templates)
        if skipped:
            log.warning("⚠️  Ignored %d non-text entries in %s", skipped, path.name)
        log.info("📚 Loaded %d templates from %s", len(templates), path.name)
        return cls(path=path, templates=templates)

    def names(self) -> list[str]:
        return list(self.templates)

    def get(self, name: str) -> str:
        """Return a template by name.

        Raises:
            ConfigurationError: If no template has that name.
        """
        try:
            return self.templates[name]
        except KeyError:
            available = ", ".join(self.templates) or "none"
            raise ConfigurationError(
                f"Template '{name}' not found in {self.path.name} (available: {available})"
            ) from None
