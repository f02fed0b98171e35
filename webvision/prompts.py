"""
Interactive prompts shared by first-run setup and slash-commands.
"""

from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

from .themes import ThemeRegistry

MIN_API_KEY_LENGTH = 10


class Prompter:
    """Asks the user for an API key or a theme via rich prompts."""

    def __init__(self, themes: ThemeRegistry, console: Optional[Console] = None):
        self.themes = themes
        self.console = console or Console()

    def ask_api_key(self, message: str = "Enter your OpenAI API key") -> str:
        """Prompt (masked) until a plausible API key is entered."""
        while True:
            api_key = Prompt.ask(
                self.themes.primary(message),
                console=self.console,
                password=True,
            ).strip()
            if len(api_key) >= MIN_API_KEY_LENGTH:
                return api_key
            self.console.print(self.themes.error("Please enter a valid API key"))

    def ask_theme(self, default: Optional[str] = None) -> str:
        """Show the theme list and return the chosen theme name."""
        names = self.themes.names()
        self.console.print(self.themes.primary("Choose your preferred color theme:"))
        for name in names:
            self.console.print(f"  {self.themes.secondary(name.ljust(8))} {self.themes.label(name)}")

        return Prompt.ask(
            self.themes.primary("Theme"),
            console=self.console,
            choices=names,
            default=default if default in names else names[0],
        )

    def pause(self) -> None:
        Prompt.ask("Press Enter to continue...", console=self.console, default="", show_default=False)
