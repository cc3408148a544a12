"""
Edge TTS Adapter — NarrationSynthesizer implementation.

Runs the ``edge-tts`` command-line tool (shipped with the edge-tts package)
as a subprocess. The executable path is read from the settings store, so
users can point it at any installation.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from story_studio.domain.exceptions import ConfigurationError, SynthesisError
from story_studio.domain.ports import NarrationSynthesizer, SettingsRepository
from story_studio.domain.value_objects import SettingKey

log = logging.getLogger(__name__)


class EdgeTTSSynthesizer(NarrationSynthesizer):
    """Synthesizes narration with the edge-tts executable.

    Command:
        <edge-tts> --file <input.txt> --write-media <output.mp3> --voice <voice>

    No timeout is applied; long stories take as long as the service needs.
    """

    def __init__(self, settings: SettingsRepository) -> None:
        self._settings = settings

    @property
    def executable(self) -> str:
        """Configured executable path.

        Raises:
            ConfigurationError: If no path is stored.
        """
        path = str(self._settings.get(SettingKey.TTS_PATH) or "").strip()
        if not path:
            raise ConfigurationError("Path to the edge-tts executable is not configured.")
        return path

    def synthesize(self, text_file: Path, output_path: Path, voice: str) -> Path:
        """Convert a text file to speech.

        Args:
            text_file: UTF-8 text to narrate.
            output_path: Where to save the MP3.
            voice: Edge TTS voice short name (e.g. ``en-US-AriaNeural``).

        Returns:
            Path to the audio file.

        Raises:
            SynthesisError: If the process cannot start, exits non-zero,
                or leaves no audio behind.
        """
        command = [
            self.executable,
            "--file", str(text_file),
            "--write-media", str(output_path),
            "--voice", voice,
        ]
        log.debug("Running %s", command)
        result = self._run(command)

        if result.returncode != 0:
            output = _diagnostics(result)
            raise SynthesisError(
                f"edge-tts exited with code {result.returncode}: {output or 'no output'}",
                output=output,
                returncode=result.returncode,
            )
        if not output_path.exists():
            raise SynthesisError(
                f"edge-tts finished but {output_path.name} was not written",
                output=_diagnostics(result),
                returncode=result.returncode,
            )
        return output_path

    def list_voices(self) -> list[str]:
        """Return the short names of all available voices.

        Raises:
            SynthesisError: If the voice list cannot be fetched.
        """
        result = self._run([self.executable, "--list-voices"])
        if result.returncode != 0:
            output = _diagnostics(result)
            raise SynthesisError(
                f"edge-tts --list-voices failed: {output}",
                output=output,
                returncode=result.returncode,
            )
        return parse_voice_list(result.stdout)

    @staticmethod
    def _run(command: list[str]) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise SynthesisError(
                f"Cannot launch edge-tts ({command[0]}): {e}", output=str(e), cause=e
            ) from e


def _diagnostics(result: subprocess.CompletedProcess[str]) -> str:
    return (result.stderr or result.stdout or "").strip()


def parse_voice_list(output: str) -> list[str]:
    """Parse ``edge-tts --list-voices`` output.

    Older releases print ``Name: <voice>`` blocks; newer ones print a table
    whose first column is the voice name.
    """
    voices: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("Name:"):
            voices.append(line.split(":", 1)[1].strip())
            continue
        first = line.split()[0]
        if first.count("-") >= 2 and first[0].isalpha() and not first.startswith("-"):
            voices.append(first)
    return voices
