"""Tests for the argparse CLI with an isolated data directory."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from story_studio.cli import main
from story_studio.core.container import Container


@pytest.fixture(autouse=True)
def isolated_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("STORY_STUDIO_DATA_DIR", str(data_dir))
    monkeypatch.setenv("PIPELINE_PART_DELAY_SECONDS", "0")
    monkeypatch.setenv("PIPELINE_DESCRIPTION_DELAY_SECONDS", "0")
    return data_dir


def _cli(*args: str) -> int:
    return main(["--env-file", "does-not-exist.env", *args])


def _saved(data_dir: Path) -> dict:
    return json.loads((data_dir / "settings.json").read_text(encoding="utf-8"))


class TestConfigCommand:
    def test_set_get_and_unset(self, isolated_data_dir: Path, capsys) -> None:
        assert _cli("config", "set", "tts-path", "/opt/edge-tts") == 0
        assert _saved(isolated_data_dir) == {"edgeTtsPath": "/opt/edge-tts"}

        assert _cli("config", "get", "edgeTtsPath") == 0
        assert "/opt/edge-tts" in capsys.readouterr().out

        assert _cli("config", "unset", "tts_path") == 0
        assert _cli("config", "get", "tts_path") == 1

    def test_api_key_is_masked(self, capsys) -> None:
        _cli("config", "set", "apiKey", "AIzaSyVerySecretValue")
        capsys.readouterr()

        assert _cli("config", "get", "apiKey") == 0
        out = capsys.readouterr().out
        assert "VerySecret" not in out
        assert "AIza" in out

    def test_unknown_key(self) -> None:
        assert _cli("config", "set", "colour", "blue") == 1

    def test_history_key_is_not_editable(self) -> None:
        assert _cli("config", "set", "generationHistory", "[]") == 1


class TestSetupCommand:
    def test_missing_settings_fail(self) -> None:
        assert _cli("setup") == 1

    def test_complete_settings_pass(self) -> None:
        _cli("config", "set", "api_key", "k")
        _cli("config", "set", "tts_path", "/usr/bin/edge-tts")
        assert _cli("setup") == 0

    def test_lists_known_models(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setenv("GEMINI_MODELS", '["gemini-x", "gemini-y"]')
        _cli("setup")
        assert "gemini-y" in capsys.readouterr().out


class TestHistoryCommand:
    def test_empty_history(self, capsys) -> None:
        assert _cli("history") == 0
        assert "empty" in capsys.readouterr().out

    def test_open_out_of_range(self, isolated_data_dir: Path, tmp_path: Path) -> None:
        isolated_data_dir.mkdir()
        (isolated_data_dir / "settings.json").write_text(
            json.dumps(
                {
                    "generationHistory": [
                        {"title": "T", "projectName": "p", "path": str(tmp_path), "timestamp": "x"}
                    ]
                }
            ),
            encoding="utf-8",
        )
        assert _cli("history", "--open", "2") == 1

    def test_clear(self, isolated_data_dir: Path) -> None:
        isolated_data_dir.mkdir()
        (isolated_data_dir / "settings.json").write_text(
            '{"generationHistory": [{"title": "T", "path": "/tmp"}]}', encoding="utf-8"
        )
        assert _cli("history", "--clear") == 0
        assert _saved(isolated_data_dir)["generationHistory"] == []


class TestTemplatesCommand:
    def test_lists_and_remembers_prompt_file(self, isolated_data_dir: Path, tmp_path) -> None:
        prompts = tmp_path / "prompts.json"
        prompts.write_text('{"Fairy tale": "Tell {TITLE}"}', encoding="utf-8")

        assert _cli("templates", "--file", str(prompts)) == 0
        assert _saved(isolated_data_dir)["promptPath"] == str(prompts)

    def test_no_prompt_file(self) -> None:
        assert _cli("templates") == 1


class TestRunCommand:
    def test_missing_api_key_fails_without_network(self, tmp_path: Path, capsys) -> None:
        template = tmp_path / "prompt.txt"
        template.write_text("Write {TITLE}", encoding="utf-8")
        _cli("config", "set", "tts_path", "/usr/bin/edge-tts")

        code = _cli(
            "run",
            "--project", "tales",
            "--title", "Dune",
            "--template-file", str(template),
            "--output-dir", str(tmp_path / "out"),
            "--no-open",
        )

        assert code == 1
        assert "ConfigurationError" in capsys.readouterr().out
        assert not (tmp_path / "out").exists()

    def test_successful_run_remembers_choices(
        self,
        monkeypatch: pytest.MonkeyPatch,
        isolated_data_dir: Path,
        tmp_path: Path,
        scripted_provider,
        synthesizer,
    ) -> None:
        provider = scripted_provider(["A short tale. END"])
        monkeypatch.setattr(Container, "chat_provider", lambda self: provider)
        monkeypatch.setattr(Container, "synthesizer", lambda self: synthesizer)
        prompts = tmp_path / "prompts.json"
        prompts.write_text('{"Fable": "Fable {TITLE} ({LANGUAGE})"}', encoding="utf-8")
        _cli("config", "set", "api_key", "k")
        _cli("config", "set", "tts_path", "/usr/bin/edge-tts")

        code = _cli(
            "run",
            "--project", "tales",
            "--title", "Dune",
            "--prompts", str(prompts),
            "--voice", "uk-UA-PolinaNeural",
            "--language", "Ukrainian",
            "--output-dir", str(tmp_path / "out"),
            "--no-open",
        )

        assert code == 0
        assert provider.session.sent[0] == "Fable Dune (Ukrainian)"
        saved = _saved(isolated_data_dir)
        assert saved["lastVoice"] == "uk-UA-PolinaNeural"
        assert saved["lastLanguage"] == "Ukrainian"
        assert saved["promptPath"] == str(prompts)
        assert saved["generationHistory"][0]["title"] == "Dune"
        project = Path(saved["generationHistory"][0]["path"])
        assert (project / "story.txt").read_text(encoding="utf-8") == "A short tale.\n\n"

    def test_unknown_model_is_flagged(self, tmp_path: Path, capsys) -> None:
        template = tmp_path / "prompt.txt"
        template.write_text("Write {TITLE}", encoding="utf-8")

        _cli(
            "run", "--project", "p", "--title", "t",
            "--template-file", str(template), "--model", "gemini-typo",
        )

        assert "Unknown model 'gemini-typo'" in capsys.readouterr().out

    def test_unknown_template_name(self, tmp_path: Path) -> None:
        prompts = tmp_path / "prompts.json"
        prompts.write_text('{"Fable": "x"}', encoding="utf-8")

        code = _cli(
            "run", "--project", "p", "--title", "t",
            "--prompts", str(prompts), "--template", "Horror",
        )
        assert code == 1


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "story-studio" in capsys.readouterr().out
