"""Tests for the edge-tts subprocess adapter."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from story_studio.domain.exceptions import ConfigurationError, SynthesisError
from story_studio.domain.value_objects import SettingKey
from story_studio.infrastructure.adapters import edge_tts
from story_studio.infrastructure.adapters.edge_tts import EdgeTTSSynthesizer, parse_voice_list


class FakeRun:
    """Stands in for subprocess.run and records the argument lists."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "", write: bool = True):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.write = write
        self.commands: list[list[str]] = []

    def __call__(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.commands.append(command)
        if self.write and "--write-media" in command:
            Path(command[command.index("--write-media") + 1]).write_bytes(b"ID3")
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def synth(settings_repo) -> EdgeTTSSynthesizer:
    return EdgeTTSSynthesizer(settings_repo)


class TestSynthesize:
    def test_builds_command_and_returns_audio(
        self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        run = FakeRun()
        monkeypatch.setattr(edge_tts.subprocess, "run", run)
        text, audio = tmp_path / "in.txt", tmp_path / "audio.mp3"

        assert synth.synthesize(text, audio, "uk-UA-PolinaNeural") == audio
        assert run.commands == [
            [
                "/usr/bin/edge-tts",
                "--file", str(text),
                "--write-media", str(audio),
                "--voice", "uk-UA-PolinaNeural",
            ]
        ]

    def test_non_zero_exit_carries_output(
        self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        run = FakeRun(returncode=1, stderr="No audio was received.\n", write=False)
        monkeypatch.setattr(edge_tts.subprocess, "run", run)

        with pytest.raises(SynthesisError, match="code 1") as exc_info:
            synth.synthesize(tmp_path / "in.txt", tmp_path / "audio.mp3", "v")

        assert exc_info.value.output == "No audio was received."
        assert exc_info.value.returncode == 1
        assert exc_info.value.stage == "narration"

    def test_missing_output_file(
        self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(edge_tts.subprocess, "run", FakeRun(write=False))

        with pytest.raises(SynthesisError, match="was not written"):
            synth.synthesize(tmp_path / "in.txt", tmp_path / "audio.mp3", "v")

    def test_launch_failure(
        self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def missing(command: list[str], **kwargs: object) -> None:
            raise FileNotFoundError(2, "No such file or directory")

        monkeypatch.setattr(edge_tts.subprocess, "run", missing)

        with pytest.raises(SynthesisError, match="Cannot launch edge-tts"):
            synth.synthesize(tmp_path / "in.txt", tmp_path / "audio.mp3", "v")

    def test_unconfigured_path(self, synth: EdgeTTSSynthesizer, settings_repo, tmp_path) -> None:
        settings_repo.set(SettingKey.TTS_PATH, "  ")
        with pytest.raises(ConfigurationError):
            synth.synthesize(tmp_path / "in.txt", tmp_path / "audio.mp3", "v")


class TestVoices:
    def test_parse_name_blocks(self) -> None:
        output = (
            "Name: en-US-AriaNeural\nGender: Female\n\n"
            "Name: uk-UA-OstapNeural\nGender: Male\n"
        )
        assert parse_voice_list(output) == ["en-US-AriaNeural", "uk-UA-OstapNeural"]

    def test_parse_table(self) -> None:
        output = (
            "Name                               Gender    ContentCategories\n"
            "---------------------------------  --------  -----------------\n"
            "af-ZA-AdriNeural                   Female    General\n"
            "en-GB-SoniaNeural                  Female    General\n"
        )
        assert parse_voice_list(output) == ["af-ZA-AdriNeural", "en-GB-SoniaNeural"]

    def test_list_voices(self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch) -> None:
        run = FakeRun(stdout="Name: en-US-AriaNeural\n")
        monkeypatch.setattr(edge_tts.subprocess, "run", run)

        assert synth.list_voices() == ["en-US-AriaNeural"]
        assert run.commands == [["/usr/bin/edge-tts", "--list-voices"]]

    def test_list_voices_failure(
        self, synth: EdgeTTSSynthesizer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(edge_tts.subprocess, "run", FakeRun(returncode=2, stdout="offline"))
        with pytest.raises(SynthesisError, match="offline"):
            synth.list_voices()
