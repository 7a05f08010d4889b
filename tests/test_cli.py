"""Tests for the command-line entry point."""

from __future__ import annotations

import io
import json

import pytest
from rich.console import Console

from plugin_scaffold import __version__, cli


@pytest.fixture
def cli_console(monkeypatch) -> Console:
    captured = Console(file=io.StringIO(), width=1000)
    monkeypatch.setattr(cli, "console", captured)
    return captured


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_help(self, cli_console, capsys):
        assert cli.main([]) == 1
        assert "plugin-scaffold" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_missing_config_file(self, cli_console, vendure_project):
        assert cli.main(["--config", "missing.json", "plugin"]) == 1
        assert "Configuration error" in cli_console.file.getvalue()

    def test_invalid_config_file(self, cli_console, vendure_project):
        (vendure_project / "bad.json").write_text("{not json", encoding="utf-8")
        assert cli.main(["--config", "bad.json", "plugin"]) == 1
        assert "Invalid JSON" in cli_console.file.getvalue()

    def test_cancelled_plugin(self, cli_console, answers, vendure_project):
        answers.queue(KeyboardInterrupt())
        assert cli.main(["plugin"]) == 0
        assert "Plugin setup cancelled." in cli_console.file.getvalue()

    def test_default_config_file_used(self, cli_console, answers, vendure_project):
        (vendure_project / ".plugin-scaffold.json").write_text(
            json.dumps({"compatibility": "^3.0.0", "config_file_name": "config.js"}), encoding="utf-8"
        )
        answers.queue("reviews", None, "1")

        assert cli.main(["plugin"]) == 1

        output = cli_console.file.getvalue()
        assert "config_file_name should be a .ts file" in output
        assert "Could not find the VendureConfig declaration" in output
        plugin_file = vendure_project / "src" / "plugins" / "reviews" / "reviews.plugin.ts"
        assert "compatibility: '^3.0.0'" in plugin_file.read_text(encoding="utf-8")

    def test_plugin_created(self, cli_console, answers, vendure_project):
        answers.queue("reviews", None, "1")
        assert cli.main(["plugin"]) == 0
        assert (vendure_project / "src" / "plugins" / "reviews" / "reviews.plugin.ts").is_file()
