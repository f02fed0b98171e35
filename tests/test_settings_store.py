"""
Tests for the persisted user configuration.
"""

import json
import logging

import pytest

from webvision.settings_store import ConfigStore, default_config


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / ".webvision" / "config.json"


class TestConfigStoreLoad:
    """Tests for loading configuration from disk."""

    def test_missing_file_gives_defaults(self, config_path):
        store = ConfigStore(config_path)

        assert store.snapshot() == {"apiKey": None, "theme": "default", "firstTime": True}
        assert store.is_first_run() is True
        assert not config_path.exists()

    def test_corrupt_file_gives_defaults(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("{not json", encoding="utf-8")

        assert ConfigStore(config_path).snapshot() == default_config()

    def test_non_object_gives_defaults(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("[1, 2, 3]", encoding="utf-8")

        assert ConfigStore(config_path).snapshot() == default_config()

    def test_missing_keys_are_filled(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"theme": "ocean"}), encoding="utf-8")

        store = ConfigStore(config_path)

        assert store.get_theme() == "ocean"
        assert store.get_api_key() is None
        assert store.is_first_run() is True


class TestConfigStoreSave:
    """Tests for writing configuration to disk."""

    def test_round_trip(self, config_path):
        store = ConfigStore(config_path)
        store.set_api_key("X")
        store.set_theme("ocean")
        store.set_first_run(False)

        reloaded = ConfigStore(config_path)
        assert reloaded.get_api_key() == "X"
        assert reloaded.get_theme() == "ocean"
        assert reloaded.is_first_run() is False

    def test_file_format(self, config_path):
        ConfigStore(config_path).set_theme("dark")

        text = config_path.read_text(encoding="utf-8")
        assert json.loads(text) == {"apiKey": None, "theme": "dark", "firstTime": True}
        assert '\n  "theme": "dark"' in text

    def test_first_run_setup_persists(self, config_path):
        """Test the state written by first-run setup survives a restart."""
        store = ConfigStore(config_path)
        assert store.is_first_run()

        store.set_api_key("sk-test-key-123456")
        store.set_theme("forest")
        store.set_first_run(False)

        reloaded = ConfigStore(config_path)
        assert reloaded.snapshot() == {
            "apiKey": "sk-test-key-123456",
            "theme": "forest",
            "firstTime": False,
        }

    def test_write_failure_is_logged_not_raised(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = ConfigStore(blocker / "config.json")

        with caplog.at_level(logging.ERROR, logger="webvision.settings_store"):
            store.set_theme("sakura")

        assert store.get_theme() == "sakura"
        assert "Failed to save configuration" in caplog.text
