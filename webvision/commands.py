"""
Slash-command handling for the WebVision REPL.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from .prompts import Prompter
from .renderer import Renderer
from .settings_store import ConfigStore
from .themes import ThemeRegistry

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    """Recognized slash-commands."""
    HELP = "/help"
    CLEAR = "/clear"
    APIKEY = "/apikey"
    THEME = "/theme"
    STATUS = "/status"
    EXIT = "/exit"


class CommandSignal(Enum):
    """Values a command can return to steer the session loop."""
    EXIT = "exit"


def parse_command(raw: str) -> Optional[CommandKind]:
    """Parse user input into a CommandKind (case-insensitive exact match)."""
    try:
        return CommandKind(raw.strip().lower())
    except ValueError:
        return None


class CommandDispatcher:
    """Executes slash-commands against the injected store, themes and renderer."""

    def __init__(
        self,
        store: ConfigStore,
        themes: ThemeRegistry,
        renderer: Renderer,
        prompter: Prompter,
    ):
        """Initialize the dispatcher.

        Args:
            store: Persisted user configuration
            themes: Theme registry, updated by /theme
            renderer: Output renderer
            prompter: Interactive prompts for /apikey and /theme
        """
        self.store = store
        self.themes = themes
        self.renderer = renderer
        self.prompter = prompter

        self._handlers: dict[CommandKind, Callable[[], Any]] = {
            CommandKind.HELP: self.show_help,
            CommandKind.CLEAR: self.clear_screen,
            CommandKind.APIKEY: self.update_api_key,
            CommandKind.THEME: self.change_theme,
            CommandKind.STATUS: self.show_status,
            CommandKind.EXIT: self.exit,
        }

    def execute(self, raw: str) -> Optional[CommandSignal]:
        """Run a slash-command.

        Args:
            raw: The user's input, including the leading slash

        Returns:
            CommandSignal.EXIT for /exit, otherwise None
        """
        kind = parse_command(raw)
        if kind is None:
            logger.debug(f"Unknown command: {raw}")
            self.renderer.show_unknown_command(raw)
            return None
        return self._handlers[kind]()

    def show_help(self) -> None:
        """Print the command list."""
        self.renderer.show_help()

    def clear_screen(self) -> None:
        """Clear the terminal."""
        self.renderer.clear()

    def update_api_key(self) -> None:
        """Prompt for a new API key and persist it."""
        self.renderer.console.print()
        api_key = self.prompter.ask_api_key("Enter new OpenAI API key")
        self.store.set_api_key(api_key)
        self.renderer.show_success("API key updated successfully!")

    def change_theme(self) -> None:
        """Prompt for a theme, persist it and apply it immediately."""
        self.renderer.console.print()
        theme = self.prompter.ask_theme(default=self.store.get_theme())
        self.store.set_theme(theme)
        self.themes.set_theme(theme)
        self.renderer.show_success("Theme changed successfully!")

    def show_status(self) -> None:
        """Print the stored API key (masked) and the theme."""
        self.renderer.show_status(
            api_key=self.store.get_api_key(),
            theme=self.store.get_theme(),
        )

    def exit(self) -> CommandSignal:
        """End the session."""
        return CommandSignal.EXIT
