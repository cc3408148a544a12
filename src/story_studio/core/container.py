"""
Dependency Injection Container — wires ports to adapters.

A simple, explicit DI container that resolves domain ports to their
concrete infrastructure adapters based on application settings.
All wiring happens in one place.

Usage:
    settings = Settings()
    container = Container(settings)
    pipeline = container.pipeline()
    result = pipeline.run(request)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from story_studio.application.pipeline import StoryPipeline
    from story_studio.core.config import Settings
    from story_studio.domain.ports import (
        ChatProvider,
        FolderRevealer,
        HistoryRepository,
        ProgressReporter,
    )
    from story_studio.infrastructure.adapters.edge_tts import EdgeTTSSynthesizer
    from story_studio.infrastructure.adapters.json_store import (
        JsonSettingsStore,
        SettingsHistoryRepository,
    )

log = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Lazily creates and caches adapter instances. Each adapter is created
    only when first requested and reused for subsequent calls.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        log.debug("🔌 DI Container initialized (data dir: %s)", settings.data_dir)

    @property
    def settings(self) -> Settings:
        return self._settings

    @lru_cache(maxsize=1)
    def settings_store(self) -> JsonSettingsStore:
        """Resolve SettingsRepository → JsonSettingsStore."""
        from story_studio.infrastructure.adapters.json_store import JsonSettingsStore

        return JsonSettingsStore(self._settings.settings_file)

    @lru_cache(maxsize=1)
    def history(self) -> SettingsHistoryRepository:
        """Resolve HistoryRepository → SettingsHistoryRepository."""
        from story_studio.infrastructure.adapters.json_store import (
            SettingsHistoryRepository,
        )

        return SettingsHistoryRepository(
            self.settings_store(), limit=self._settings.pipeline.history_limit
        )

    @lru_cache(maxsize=1)
    def chat_provider(self) -> ChatProvider:
        """Resolve ChatProvider → GeminiChatProvider."""
        from story_studio.infrastructure.adapters.gemini import GeminiChatProvider

        return GeminiChatProvider(self.settings_store())

    @lru_cache(maxsize=1)
    def synthesizer(self) -> EdgeTTSSynthesizer:
        """Resolve NarrationSynthesizer → EdgeTTSSynthesizer."""
        from story_studio.infrastructure.adapters.edge_tts import EdgeTTSSynthesizer

        return EdgeTTSSynthesizer(self.settings_store())

    def revealer(self, enabled: bool = True) -> FolderRevealer:
        """Resolve FolderRevealer → system opener, or a no-op when disabled."""
        from story_studio.infrastructure.adapters.folder_revealer import (
            NullFolderRevealer,
            SystemFolderRevealer,
        )

        return SystemFolderRevealer() if enabled else NullFolderRevealer()

    def pipeline(
        self,
        reporter: ProgressReporter | None = None,
        *,
        reveal_output: bool | None = None,
    ) -> StoryPipeline:
        """Build a StoryPipeline wired to the configured adapters.

        Args:
            reporter: Progress sink; defaults to logging.
            reveal_output: Override the configured folder-opening behavior.
        """
        from story_studio.application.pipeline import StoryPipeline
        from story_studio.infrastructure.adapters.progress import LoggingProgressReporter

        options = self._settings.pipeline_options(reveal_output=reveal_output)
        return StoryPipeline(
            provider=self.chat_provider(),
            synthesizer=self.synthesizer(),
            settings=self.settings_store(),
            history=self.history(),
            options=options,
            reporter=reporter or LoggingProgressReporter(),
            revealer=self.revealer(options.reveal_output),
        )
