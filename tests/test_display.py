"""
Tests for CLI argument handling and output formatting.

Shows sample output for each scenario. Run with:
    pytest tests/test_display.py -v
    pytest tests/test_display.py -v -s   # see actual terminal output
"""

import io
import json
import re
import sys
from pathlib import Path

import pytest

from ai_commit_msg.cli.main import _display_message, main as cli_main
from ai_commit_msg.cli.args import build_parser, overrides_from_args
from ai_commit_msg.cli.commands import display_config
from ai_commit_msg.config import ConfigManager
from ai_commit_msg.generator import GenerationResult, Generator
from ai_commit_msg.output import _supports_color

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


@pytest.fixture
def strip_ansi():
    """Return a function that removes ANSI escape codes."""
    def _strip(text: str) -> str:
        return ANSI_RE.sub('', text)
    return _strip


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

class TestArgs:

    def test_no_flags_no_overrides(self):
        assert overrides_from_args(build_parser().parse_args([])) == {}

    def test_flags_become_overrides(self):
        args = build_parser().parse_args([
            "-p", "copilot", "-m", "gpt-5-mini", "-U", "0", "--cost", "verbose", "--no-spinner", "--quiet",
        ])

        assert overrides_from_args(args) == {
            "provider": "copilot",
            "model": "gpt-5-mini",
            "context_lines": 0,
            "cost_display": "verbose",
            "spinner": False,
            "notifications": False,
        }

    def test_negative_context_lines_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-U", "-1"])

    def test_unknown_provider_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-p", "ollama"])


# ---------------------------------------------------------------------------
# Message display
# ---------------------------------------------------------------------------

class TestDisplayMessage:

    def test_message_between_rules(self, capsys, strip_ansi):
        _display_message("feat(cli): add spinner\n\n- animate status")
        out = strip_ansi(capsys.readouterr().out)

        lines = out.strip('\n').split('\n')
        assert lines[0] == '─' * len("feat(cli): add spinner")
        assert lines[1] == "feat(cli): add spinner"
        assert "- animate status" in out
        assert lines[-1] == lines[0]


class TestDisplayConfig:

    def test_shows_defaults(self, capsys, strip_ansi):
        assert display_config(ConfigManager()) == 0
        out = strip_ansi(capsys.readouterr().out)

        assert "defaults (no .aicommitrc found)" in out
        assert "openai" in out
        assert "gpt-4.1-nano" in out

    def test_shows_file_and_env(self, capsys, strip_ansi, monkeypatch):
        (Path.cwd() / ".aicommitrc").write_text(json.dumps({"provider": "copilot"}))
        monkeypatch.setenv("AI_COMMIT_MODEL", "gpt-4o")

        display_config(ConfigManager())
        out = strip_ansi(capsys.readouterr().out)

        assert ".aicommitrc" in out
        assert "AI_COMMIT_MODEL=gpt-4o" in out
        assert "copilot" in out


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:

    @pytest.fixture
    def fake_generate(self, monkeypatch):
        seen = {}

        def _install(result):
            async def generate(self, config, callback=None):
                seen['config'] = config
                return result
            monkeypatch.setattr(Generator, "generate", generate)
            return seen
        return _install

    def test_piped_output_is_raw_message(self, capsys, fake_generate):
        seen = fake_generate(GenerationResult(True, message="fix: handle empty diff"))

        assert cli_main(["--no-copy", "-m", "gpt-4o"]) == 0

        assert capsys.readouterr().out == "fix: handle empty diff\n"
        assert seen['config'].model == "gpt-4o"

    def test_failure_exit_code(self, capsys, fake_generate):
        fake_generate(GenerationResult(False, error="No staged changes to commit"))

        assert cli_main(["--quiet"]) == 1
        assert "No staged changes to commit" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Color detection
# ---------------------------------------------------------------------------

class TestColorSupport:

    def test_no_color_wins(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert _supports_color() is False

    def test_force_color_without_tty(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert _supports_color() is True

    def test_piped_stdout_has_no_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setattr(sys, "stdout", io.StringIO())
        assert _supports_color() is False
