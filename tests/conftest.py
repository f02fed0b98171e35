"""
Shared fixtures.
"""

import io

import pytest
from rich.console import Console

from webvision.renderer import Renderer
from webvision.settings_store import ConfigStore
from webvision.themes import ThemeRegistry


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep run logs and config out of the real home directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("WEBVISION_HOME", str(home))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return home


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, width=200, color_system=None)


@pytest.fixture
def themes():
    return ThemeRegistry()


@pytest.fixture
def renderer(themes, console):
    return Renderer(themes, console=console)


@pytest.fixture
def store(isolated_home):
    return ConfigStore(isolated_home / "config.json")
