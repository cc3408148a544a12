"""
Folder Revealer Adapter — opens a finished project in the file browser.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

from story_studio.domain.ports import FolderRevealer

log = logging.getLogger(__name__)


class SystemFolderRevealer(FolderRevealer):
    """Opens folders with the platform's default handler.

    Windows uses ``os.startfile``, macOS ``open``, everything else ``xdg-open``.
    """

    def __init__(self, platform: str | None = None) -> None:
        self._platform = platform or sys.platform

    def reveal(self, path: Path) -> None:
        """Open ``path`` without waiting for the file browser.

        Raises:
            OSError: If the opener cannot be launched.
        """
        if self._platform.startswith("win"):
            os.startfile(str(path))  # type: ignore[attr-defined]
        else:
            opener = "open" if self._platform == "darwin" else "xdg-open"
            subprocess.Popen(
                [opener, str(path)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        log.info("📂 Opened %s", path)


class NullFolderRevealer(FolderRevealer):
    """Leaves folders alone (headless runs, HTTP API)."""

    def reveal(self, path: Path) -> None:
        log.debug("Not opening %s", path)
