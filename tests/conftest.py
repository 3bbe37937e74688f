"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path

import pytest
import yaml

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from termtheme.config import Config  # noqa: E402
from termtheme.theme_engine import ThemeEngine  # noqa: E402


def make_theme(name="base", **overrides):
    """Minimal valid theme document."""
    theme = {
        "name": name,
        "description": f"{name} theme",
        "palette": {
            "primary": {"hex": "#112233"},
            "background": {"rgb": [0, 0, 0]},
            "text": {"r": 250, "g": 250, "b": 250},
            "border": {"ansi": 8},
        },
    }
    theme.update(overrides)
    return theme


@pytest.fixture
def theme_doc():
    return make_theme


@pytest.fixture
def write_doc(tmp_path):
    """Write a document as JSON or YAML (by suffix) and return its path."""
    def _write(name, document):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(document), encoding="utf-8")
        else:
            path.write_text(json.dumps(document), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def engine():
    return ThemeEngine()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's real configuration."""
    monkeypatch.setenv("TERMTHEME_CONFIG", str(tmp_path / "termtheme-config.yaml"))
    Config._instance = None
    yield
    Config._instance = None
