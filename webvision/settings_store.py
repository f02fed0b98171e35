"""
Persistent user configuration for WebVision.

Stores the API key, the chosen theme and the first-run flag as JSON in the
user's home directory. Every setter writes the full state immediately.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import get_config_path

logger = logging.getLogger(__name__)


DEFAULT_THEME = "default"


def default_config() -> dict[str, Any]:
    """Get a fresh copy of the default configuration."""
    return {
        "apiKey": None,
        "theme": DEFAULT_THEME,
        "firstTime": True,
    }


class ConfigStore:
    """JSON-backed configuration store.

    The in-memory state is authoritative for the lifetime of the process:
    a failed write is logged and the process keeps running with the
    values it already holds.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store and load the file.

        Args:
            path: Config file location (defaults to ~/.webvision/config.json)
        """
        self.path = Path(path) if path is not None else get_config_path()
        self._config: dict[str, Any] = self.load()

    def load(self) -> dict[str, Any]:
        """Load configuration from disk.

        Returns the defaults when the file is missing or cannot be parsed.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default_config()
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Ignoring unreadable config at {self.path}: {e}")
            return default_config()

        if not isinstance(data, dict):
            logger.debug(f"Ignoring config at {self.path}: not a JSON object")
            return default_config()

        config = default_config()
        config.update({k: data[k] for k in config if k in data})
        return config

    def save(self) -> None:
        """Write the full configuration to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._config, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")

    def snapshot(self) -> dict[str, Any]:
        """Get a copy of the current configuration."""
        return dict(self._config)

    def get_api_key(self) -> Optional[str]:
        """Get the stored API key, or None if unset."""
        return self._config.get("apiKey")

    def set_api_key(self, api_key: Optional[str]) -> None:
        """Store the API key and save."""
        self._config["apiKey"] = api_key
        self.save()

    def get_theme(self) -> str:
        """Get the stored theme name."""
        return self._config.get("theme") or DEFAULT_THEME

    def set_theme(self, theme: str) -> None:
        """Store the theme name and save."""
        self._config["theme"] = theme
        self.save()

    def is_first_run(self) -> bool:
        """Check whether first-run setup is still pending."""
        return self._config.get("firstTime") is True

    def set_first_run(self, value: bool) -> None:
        """Set the first-run flag and save."""
        self._config["firstTime"] = value
        self.save()
