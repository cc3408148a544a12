"""
JSON Store Adapter — SettingsRepository and HistoryRepository implementations.

The whole settings blob lives in a single JSON file. The run history is one
key of that blob, so settings and history persist together. There is no
locking: concurrent writers race and the last writer wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from story_studio.domain.entities import HistoryEntry
from story_studio.domain.ports import HistoryRepository, SettingsRepository
from story_studio.domain.value_objects import SettingKey

log = logging.getLogger(__name__)


def read_json(path: str | Path) -> Any | None:
    """Read a JSON document.

    Returns:
        The parsed document, or None if the file is missing, unreadable
        or malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log.debug("Cannot read JSON from %s: %s", path, e)
        return None


class JsonSettingsStore(SettingsRepository):
    """File-backed key/value settings.

    Every ``get`` re-reads the file and every ``set`` rewrites it, so
    separate processes see each other's changes.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: SettingKey, default: Any = None) -> Any:
        """Return a stored value, or ``default`` if absent."""
        return self.all().get(key.value, default)

    def set(self, key: SettingKey, value: Any) -> None:
        """Store a value (``None`` removes the key).

        Raises:
            OSError: If the file cannot be written.
        """
        data = self.all()
        if value is None:
            data.pop(key.value, None)
        else:
            data[key.value] = value
        self._write(data)

    def all(self) -> dict[str, Any]:
        """Return the whole blob; a corrupt file reads as empty."""
        data = read_json(self._path)
        if not isinstance(data, dict):
            if data is not None:
                log.warning("⚠️  Ignoring malformed settings file: %s", self._path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)


class SettingsHistoryRepository(HistoryRepository):
    """Capped, most-recent-first history stored under ``generationHistory``."""

    def __init__(self, settings: SettingsRepository, limit: int = 20) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._settings = settings
        self._limit = limit

    def list(self) -> list[HistoryEntry]:
        """Return the entries, skipping malformed records."""
        raw = self._settings.get(SettingKey.HISTORY, [])
        if not isinstance(raw, list):
            return []
        entries = []
        for record in raw:
            try:
                entries.append(HistoryEntry.from_dict(record))
            except ValueError as e:
                log.warning("⚠️  Skipping history record: %s", e)
        return entries

    def add(self, entry: HistoryEntry) -> None:
        """Prepend an entry and truncate to the cap."""
        raw = self._settings.get(SettingKey.HISTORY, [])
        records = raw if isinstance(raw, list) else []
        records.insert(0, entry.to_dict())
        self._settings.set(SettingKey.HISTORY, records[: self._limit])

    def clear(self) -> None:
        self._settings.set(SettingKey.HISTORY, [])
