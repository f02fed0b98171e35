"""
Terminal rendering for WebVision.

All user-facing panels are printed here through a rich console, styled
with the active theme of the injected ThemeRegistry.
"""

from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .themes import ThemeRegistry
from .utils import mask_secret, truncate_text


COMMAND_HELP = [
    ("/help", "Show this help message"),
    ("/clear", "Clear the screen"),
    ("/apikey", "Update OpenAI API key"),
    ("/theme", "Change color theme"),
    ("/status", "Show current configuration"),
    ("/exit", "Exit the application"),
]


class Renderer:
    """Prints fixed UI panels using the current theme."""

    def __init__(self, themes: ThemeRegistry, console: Optional[Console] = None):
        """Initialize the renderer.

        Args:
            themes: Theme registry providing role styles
            console: Rich console to print to (a new one if omitted)
        """
        self.themes = themes
        self.console = console or Console()

    def clear(self) -> None:
        self.console.clear()

    def show_welcome(self) -> None:
        t = self.themes
        self.console.print(Panel(
            f"{t.highlight(' WebVision AI ')}\n{t.secondary('Your AI Agent CLI')}",
            border_style=t.color_for("primary"),
            expand=False,
            padding=(0, 8),
        ))
        self.console.print()

    def show_first_time_setup(self) -> None:
        self.console.print(self.themes.warning("🚀 Welcome to WebVision AI!"))
        self.console.print(self.themes.text("Let's get you set up for the first time."))
        self.console.print()

    def show_setup_complete(self) -> None:
        self.console.print()
        self.console.print(self.themes.success("✅ Setup completed successfully!"))
        self.console.print(self.themes.text("You can now start using WebVision AI."))
        self.console.print()

    def show_help(self) -> None:
        t = self.themes
        self.console.print()
        self.console.print(t.primary("📋 Available Commands:"))
        self.console.print()
        for command, description in COMMAND_HELP:
            self.console.print(f"{t.secondary(command.ljust(9))} - {t.text(description)}")
        self.console.print()
        self.console.print(t.dim("Type any other text to give the agent a task"))
        self.console.print()

    def show_status(self, api_key: Optional[str], theme: str) -> None:
        """Print the current configuration.

        Args:
            api_key: Stored API key (only a masked form is shown)
            theme: Active theme name
        """
        t = self.themes
        table = Table(show_header=False, box=None)
        table.add_column("Property")
        table.add_column("Value")
        if api_key:
            key_status = t.success(f"✅ Configured ({mask_secret(api_key)})")
        else:
            key_status = t.error("❌ Not set")
        table.add_row(t.text("API Key:"), key_status)
        table.add_row(t.text("Theme:"), t.secondary(f"{theme} ({self.themes.label(theme)})"))

        self.console.print()
        self.console.print(t.primary("📊 Current Status:"))
        self.console.print()
        self.console.print(table)
        self.console.print()

    def show_text(self, text: str) -> None:
        self.console.print(self.themes.text(text))
        self.console.print()

    def show_error(self, message: str) -> None:
        self.console.print()
        self.console.print(self.themes.error("❌ Error: ") + self.themes.text(message))
        self.console.print()

    def show_success(self, message: str) -> None:
        self.console.print()
        self.console.print(self.themes.success("✅ ") + self.themes.text(message))
        self.console.print()

    def show_unknown_command(self, command: str) -> None:
        self.console.print()
        self.console.print(self.themes.error("❌ Unknown command: ") + self.themes.text(command))
        self.console.print(self.themes.dim("Type /help to see available commands"))
        self.console.print()

    def show_agent_start(self, task: str) -> None:
        self.console.print()
        self.console.print(self.themes.primary("🤖 Agent started with task:"))
        self.console.print(self.themes.text(task))
        self.console.print()

    def show_tool_step(self, step: int, name: str, args: dict[str, Any], success: bool, message: str) -> None:
        """Print a single tool invocation and its outcome.

        Args:
            step: 1-based step number within the agent run
            name: Tool name
            args: Tool arguments
            success: Whether the tool reported success
            message: Result message
        """
        step_text = Text()
        step_text.append(f"Step {step}: ", style="bold")
        step_text.append(name, style="bold cyan")
        args_str = ", ".join(f"{k}={truncate_text(repr(v), 60)}" for k, v in args.items())
        if args_str:
            step_text.append(f"({args_str})", style="dim")
        self.console.print(step_text)

        first_line = truncate_text(message.splitlines()[0] if message else "", 120)
        if success:
            self.console.print("  " + self.themes.success("✓") + " " + self.themes.dim(first_line))
        else:
            self.console.print("  " + self.themes.error("✗") + " " + self.themes.dim(first_line))

    def show_agent_end(self, response: str) -> None:
        self.console.print()
        self.console.print(self.themes.success("✅ Agent completed the task!"))
        self.console.print(self.themes.text("Response:"))
        self.console.print(self.themes.text(response))
        self.console.print()

    def show_goodbye(self) -> None:
        self.console.print()
        self.console.print(self.themes.success("👋 Thank you for using WebVision AI!"))
        self.console.print(self.themes.dim("Goodbye!"))
        self.console.print()
