"""
Gemini Adapter — ChatProvider implementation.

Opens stateful chat sessions on Google Gemini through the google-genai SDK.
The API key is read from the settings store when a session is opened, so a
key saved mid-process takes effect on the next run.
"""

from __future__ import annotations

import logging

from google import genai
from google.genai import errors

from story_studio.domain.exceptions import ConfigurationError, ProviderError
from story_studio.domain.ports import ChatProvider, ChatSession, SettingsRepository
from story_studio.domain.value_objects import SettingKey

log = logging.getLogger(__name__)


class GeminiChatSession(ChatSession):
    """One Gemini chat; the SDK keeps the turn history."""

    def __init__(self, chat: object, model: str) -> None:
        self._chat = chat
        self._model = model

    def send(self, text: str) -> str:
        """Send a user turn and return the reply text.

        Raises:
            ProviderError: On API errors or an empty (blocked) reply.
        """
        try:
            response = self._chat.send_message(text)
        except errors.APIError as e:
            raise ProviderError(f"Gemini API error ({e.code}): {e.message}", cause=e) from e
        except Exception as e:
            raise ProviderError(f"Gemini request failed: {e}", cause=e) from e

        reply = getattr(response, "text", None)
        if reply is None:
            raise ProviderError(f"Gemini returned no text (model {self._model})")
        return reply


class GeminiChatProvider(ChatProvider):
    """Creates Gemini chat sessions with the stored API key.

    The SDK client is cached per key.
    """

    def __init__(self, settings: SettingsRepository) -> None:
        self._settings = settings
        self._client: genai.Client | None = None
        self._client_key = ""

    def create_session(self, model: str) -> ChatSession:
        """Open a fresh chat with no prior history.

        Raises:
            ConfigurationError: If no API key is stored.
            ProviderError: If the client cannot be created.
        """
        client = self._get_client()
        try:
            chat = client.chats.create(model=model, history=[])
        except Exception as e:
            raise ProviderError(f"Cannot start Gemini chat: {e}", cause=e) from e
        log.info("💬 Gemini chat opened (%s)", model)
        return GeminiChatSession(chat, model)

    def _get_client(self) -> genai.Client:
        api_key = str(self._settings.get(SettingKey.API_KEY) or "").strip()
        if not api_key:
            raise ConfigurationError("API key is not configured.")
        if self._client is None or api_key != self._client_key:
            try:
                self._client = genai.Client(api_key=api_key)
            except Exception as e:
                raise ProviderError(f"Cannot create Gemini client: {e}", cause=e) from e
            self._client_key = api_key
        return self._client
