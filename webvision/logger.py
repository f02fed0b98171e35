"""
Logging and run artifacts for WebVision.

Configures the package loggers and records every tool invocation of an
agent run as one JSON line.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .config import get_runs_dir
from .utils import slugify

logger = logging.getLogger(__name__)


# Third-party loggers that are noisy at DEBUG
QUIET_LOGGERS = ("playwright", "httpx", "httpcore", "openai", "urllib3", "asyncio")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the webvision logger.

    Args:
        debug: Log everything at DEBUG instead of warnings only

    Returns:
        The package logger
    """
    package_logger = logging.getLogger("webvision")
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger


def redact_args(tool: str, args: dict[str, Any]) -> dict[str, Any]:
    """Remove password values from tool arguments before logging."""
    if tool == "fill_form" and "password" in str(args.get("selector", "")).lower():
        redacted = dict(args)
        redacted["text"] = "[REDACTED]"
        return redacted
    return args


class RunLogger:
    """Writes the tool invocations of a single agent run to steps.jsonl."""

    def __init__(self, task: str, runs_dir: Optional[Path] = None):
        """Initialize the run logger.

        Args:
            task: The task being executed (used for directory naming)
            runs_dir: Parent directory for run logs
        """
        self.task = task

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = runs_dir if runs_dir is not None else get_runs_dir()
        self.run_dir = base / f"{timestamp}_{slugify(task) or 'task'}"
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.steps_file = self.run_dir / "steps.jsonl"
        self.steps_file.touch()

        self.step_count = 0
        self.enabled = True

    def log_step(self, tool: str, args: dict[str, Any], result: dict[str, Any]) -> None:
        """Append one tool invocation to the JSONL file.

        Args:
            tool: Tool name
            args: Arguments passed to the tool
            result: ToolResult.to_dict() of the invocation
        """
        if not self.enabled:
            return

        self.step_count += 1

        step_data = {
            "step": self.step_count,
            "timestamp": datetime.now().isoformat(),
            "tool": tool,
            "args": redact_args(tool, args),
            "result": result,
        }

        try:
            with open(self.steps_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(step_data, default=str) + "\n")
        except OSError as e:
            logger.warning(f"Run log disabled after write failure: {e}")
            self.enabled = False
