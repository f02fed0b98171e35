"""
Configuration management for WebVision.

Provides the runtime configuration dataclass and environment variable loading.
Persisted user preferences (API key, theme) live in settings_store.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def get_base_dir() -> Path:
    """Get the base directory for WebVision data."""
    override = os.getenv("WEBVISION_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".webvision"


def get_config_path() -> Path:
    """Get the path to the persisted user configuration."""
    return get_base_dir() / "config.json"


def get_runs_dir() -> Path:
    """Get the directory for run logs."""
    return get_base_dir() / "runs"


@dataclass
class AgentConfig:
    """Configuration for the browser agent."""

    # Browser settings
    headless: bool = field(default_factory=lambda: _env_flag("WEBVISION_HEADLESS"))

    # Agent settings
    max_steps: int = 30

    # LLM settings
    model: str = field(
        default_factory=lambda: os.getenv("WEBVISION_MODEL", "gpt-4o-mini")
    )
    model_endpoint: Optional[str] = field(
        default_factory=lambda: os.getenv("WEBVISION_ENDPOINT")
    )

    # Retry budget for individual browser actions
    max_retries: int = 3

    # Screenshots are written relative to the working directory
    screenshots_dir: Path = field(default_factory=lambda: Path("screenshots").resolve())

    # Treat a form value mismatch after fill_form as a failure instead of a warning
    strict_verification: bool = field(
        default_factory=lambda: _env_flag("WEBVISION_STRICT_VERIFY")
    )

    # Write a JSONL log of tool invocations per agent run
    log_runs: bool = True

    # Debug mode - enables verbose logging (off by default)
    debug: bool = field(default_factory=lambda: _env_flag("WEBVISION_DEBUG"))

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        get_base_dir().mkdir(parents=True, exist_ok=True)
        if self.log_runs:
            get_runs_dir().mkdir(parents=True, exist_ok=True)
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_cli_args(
        cls,
        headless: bool = False,
        max_steps: int = 30,
        model: Optional[str] = None,
        model_endpoint: Optional[str] = None,
        screenshots_dir: Optional[str] = None,
        strict_verification: bool = False,
        debug: bool = False,
    ) -> "AgentConfig":
        """Create configuration from CLI arguments.

        Flags only ever switch features on; unset flags keep the
        environment-derived defaults.
        """
        config = cls(max_steps=max_steps)
        config.headless = headless or config.headless
        config.model = model or config.model
        config.model_endpoint = model_endpoint or config.model_endpoint
        if screenshots_dir:
            config.screenshots_dir = Path(screenshots_dir).expanduser().resolve()
        config.strict_verification = strict_verification or config.strict_verification
        config.debug = debug or config.debug
        return config


# Default configuration values for documentation
DEFAULTS = {
    "headless": False,
    "max_steps": 30,
    "model": "gpt-4o-mini",
    "max_retries": 3,
    "screenshots_dir": "./screenshots",
}
