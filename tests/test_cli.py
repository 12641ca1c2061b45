"""Tests for the unified CLI module."""

import argparse
import json
import sys
from unittest.mock import patch

import pytest

from includenav.cli import find_project_root, main, parse_position


def run_cli(*argv):
    """Run the CLI and return its exit code."""
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


class TestCLIHelp:
    """Tests for CLI help and version output."""

    def test_main_help(self):
        """Test that main help displays available commands."""
        with patch.object(sys, "argv", ["includenav", "--help"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
            assert exc_info.value.code == 0

    def test_main_version(self, capsys):
        """Test that version is displayed correctly."""
        assert run_cli("--version") == 0
        assert "includenav" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "command",
        ["resolve", "context", "complete", "scan", "aliases", "probe", "preview", "links", "watch"],
    )
    def test_subcommand_help(self, command):
        assert run_cli(command, "--help") == 0

    def test_no_command_shows_help(self, capsys):
        assert run_cli() == 0
        assert "resolve" in capsys.readouterr().out


class TestHelpers:
    """Tests for position parsing and root detection."""

    def test_parse_position(self):
        assert parse_position("3:4") == (2, 3)
        assert parse_position("1:1") == (0, 0)

    @pytest.mark.parametrize("text", ["3", "a:b", "0:1", "1:0"])
    def test_parse_position_invalid(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_position(text)

    def test_find_project_root(self, web_project):
        assert find_project_root(web_project / "src" / "app.ts") == web_project
        assert find_project_root(web_project / "src" / "components") == web_project


class TestResolveCommand:
    """Tests for the resolve subcommand."""

    def test_resolve_alias(self, web_project, capsys):
        code = run_cli("resolve", str(web_project / "src" / "app.ts"), "@components/Button", "--no-color")

        assert code == 0
        assert capsys.readouterr().out.strip() == "src/components/Button.ts"

    def test_resolve_missing(self, web_project, capsys):
        code = run_cli(
            "resolve", str(web_project / "src" / "app.ts"), "./missing", "--candidates", "--no-color"
        )

        captured = capsys.readouterr()
        assert code == 1
        assert "Not found: ./missing" in captured.err
        assert "src/missing.ts" in captured.err

    def test_resolve_json(self, web_project, capsys):
        code = run_cli("resolve", str(web_project / "src" / "app.ts"), "./utils", "--json")

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["status"] == "found"
        assert data["targets"] == [
            str(web_project / "src" / "utils"),
            str(web_project / "src" / "utils" / "index.ts"),
        ]

    def test_unreadable_file(self, web_project, capsys):
        assert run_cli("resolve", str(web_project / "nope.ts"), "./x") == 2
        assert "cannot read" in capsys.readouterr().err

    def test_bad_option_file(self, web_project, capsys):
        (web_project / ".includenav.json").write_text(json.dumps({"hover": {"maxLines": "many"}}))

        assert run_cli("resolve", str(web_project / "src" / "app.ts"), "./utils") == 2
        assert "maxLines" in capsys.readouterr().err


class TestContextCommands:
    """Tests for context, complete and preview."""

    def test_context(self, web_project, capsys):
        assert run_cli("context", str(web_project / "src" / "app.ts"), "1:26") == 0
        assert capsys.readouterr().out.strip() == "@components/Button"

    def test_context_prefix_json(self, web_project, capsys):
        assert run_cli("context", str(web_project / "src" / "app.ts"), "1:28", "--prefix", "--json") == 0

        data = json.loads(capsys.readouterr().out)
        assert data == {"kind": "prefix", "text": "@co", "start": 25, "end": 28}

    def test_context_none(self, web_project):
        assert run_cli("context", str(web_project / "src" / "app.ts"), "1:1") == 1

    def test_complete(self, web_project, capsys):
        assert run_cli("complete", str(web_project / "src" / "app.ts"), "./u", "--no-color") == 0
        assert capsys.readouterr().out.split() == ["utils/", "src/utils"]

    def test_preview(self, web_project, capsys):
        assert run_cli("preview", str(web_project / "src" / "app.ts"), "1:30", "--no-color") == 0

        out = capsys.readouterr().out
        assert "File: src/components/Button.ts" in out
        assert "export const Button = 1;" in out


class TestScanCommand:
    """Tests for the scan subcommand."""

    def test_scan_reports_findings(self, web_project, capsys):
        code = run_cli("scan", str(web_project / "src"), "--no-color")

        captured = capsys.readouterr()
        assert code == 1
        assert "Include/Import target not found: ./missing" in captured.out
        assert ":3:16 " in captured.out
        assert "1 unresolved references" in captured.err

    def test_scan_json(self, web_project, capsys):
        run_cli("scan", str(web_project / "src" / "app.ts"), "--json")

        data = json.loads(capsys.readouterr().out)
        findings = data[str(web_project / "src" / "app.ts")]
        assert findings[0]["line"] == 2
        assert findings[0]["source"] == "includenav"

    def test_scan_clean(self, web_project):
        assert run_cli("scan", str(web_project / "src" / "components"), "--no-color") == 0


class TestOtherCommands:
    def test_aliases_json(self, web_project, capsys):
        assert run_cli("aliases", str(web_project), "--json") == 0

        data = json.loads(capsys.readouterr().out)
        assert data == [
            {
                "prefix": "@components/",
                "target": str(web_project / "src" / "components"),
                "source": "tsconfig.json",
            }
        ]

    def test_links(self, tmp_path, capsys):
        page = tmp_path / "index.html"
        page.write_text('<a href="https://example.com">x</a>\n')

        assert run_cli("links", str(page), "--json") == 0
        assert json.loads(capsys.readouterr().out) == [
            {"line": 1, "column": 10, "url": "https://example.com"}
        ]
