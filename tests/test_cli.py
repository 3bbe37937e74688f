"""Tests for the termtheme command line interface."""

import json

import pytest
from click.testing import CliRunner

from termtheme.cli.theme_cmds import main

from conftest import make_theme


def flat(result):
    """Command output with rich line wrapping undone."""
    return " ".join(result.output.split())


@pytest.fixture
def runner():
    return CliRunner()


class TestValidateCommand:
    """Test ``termtheme validate``."""

    def test_valid_theme(self, runner, write_doc):
        path = write_doc("ok.json", make_theme("ok"))
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 0
        assert "is valid" in flat(result)

    def test_invalid_theme_lists_errors(self, runner, write_doc):
        path = write_doc("bad.json", make_theme("bad name", description=""))
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Theme must have a description" in flat(result)

    def test_collection_summary(self, runner, write_doc):
        path = write_doc("all.yaml", {"themes": [make_theme("a"), make_theme("b")]})
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 0
        assert "loaded 2/2 themes" in flat(result)

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["validate", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "Error validating theme" in flat(result)

    def test_undecodable_file(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b"\xff\xfe{}")
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Error validating theme" in flat(result)
        assert isinstance(result.exception, SystemExit)

    def test_bare_name_from_theme_dirs(self, runner, write_doc, tmp_path):
        write_doc("themes/nord.json", make_theme("nord"))
        config = tmp_path / "config.yaml"
        config.write_text(f"theme_dirs:\n  - {tmp_path / 'themes'}\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", str(config), "validate", "nord"])
        assert result.exit_code == 0
        assert "nord" in flat(result)


class TestOutputCommands:
    """Test ``preview``, ``codes`` and ``export``."""

    def test_preview(self, runner, write_doc):
        path = write_doc("t.json", make_theme("shown"))
        result = runner.invoke(main, ["preview", str(path)])
        assert result.exit_code == 0
        assert "shown" in flat(result)

    def test_preview_collection_member(self, runner, write_doc):
        path = write_doc("all.json", {"themes": [make_theme("a"), make_theme("b")]})
        result = runner.invoke(main, ["preview", str(path), "--theme", "b"])
        assert result.exit_code == 0
        assert "b theme" in flat(result)

    def test_preview_unknown_member(self, runner, write_doc):
        path = write_doc("all.json", {"themes": [make_theme("a")]})
        result = runner.invoke(main, ["preview", str(path), "--theme", "zzz"])
        assert result.exit_code != 0

    def test_codes(self, runner, write_doc):
        path = write_doc("t.json", make_theme())
        result = runner.invoke(main, ["codes", str(path), "--capability", "256"])
        assert result.exit_code == 0
        assert "panelBackground_bg" in flat(result)
        assert "38;5;" in flat(result)

    def test_export(self, runner, write_doc, tmp_path):
        path = write_doc("t.json", make_theme("exported"))
        out = tmp_path / "exported.json"
        result = runner.invoke(main, ["export", str(path), str(out)])
        assert result.exit_code == 0
        document = json.loads(out.read_text(encoding="utf-8"))
        assert document["name"] == "exported"
        assert len(document["palette"]) == 26

    def test_cycle_reported(self, runner, write_doc):
        write_doc("a.json", {"name": "a", "description": "d", "extends": "b.json"})
        path = write_doc("b.json", {"name": "b", "description": "d", "extends": "a.json"})
        result = runner.invoke(main, ["preview", str(path)])
        assert result.exit_code == 1
        assert "Cyclic theme inheritance" in flat(result)
