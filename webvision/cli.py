"""
CLI for WebVision.

Provides the argparse entry point and the interactive session loop.
"""

import argparse
import logging
import signal
import sys
from typing import Optional

from rich.console import Console

from . import __version__
from .agent import AgentService
from .browser_manager import LazyBrowserManager
from .commands import CommandDispatcher, CommandSignal
from .config import DEFAULTS, AgentConfig
from .logger import setup_logging
from .prompts import Prompter
from .renderer import Renderer
from .settings_store import ConfigStore
from .themes import ThemeRegistry

logger = logging.getLogger(__name__)


PROMPT = "webvision> "


class WebVisionCLI:
    """Interactive session: first-run setup, then a prompt loop.

    Slash input goes to the command dispatcher, anything else becomes an
    agent task. The browser is shared by every task of the session and
    closed when the loop ends.
    """

    def __init__(
        self,
        config: AgentConfig,
        store: Optional[ConfigStore] = None,
        themes: Optional[ThemeRegistry] = None,
        console: Optional[Console] = None,
        prompter: Optional[Prompter] = None,
        browser_manager: Optional[LazyBrowserManager] = None,
        agent: Optional[AgentService] = None,
    ):
        """Initialize the session.

        Args:
            config: Agent configuration
            store: Persisted user configuration (loaded from disk if omitted)
            themes: Theme registry
            console: Rich console for all output
            prompter: Interactive prompts
            browser_manager: Owner of the browser session
            agent: Agent service for non-command input
        """
        self.config = config
        self.console = console or Console()
        self.store = store or ConfigStore()
        self.themes = themes or ThemeRegistry()
        self.renderer = Renderer(self.themes, console=self.console)
        self.prompter = prompter or Prompter(self.themes, console=self.console)
        self.commands = CommandDispatcher(self.store, self.themes, self.renderer, self.prompter)
        self.browser_manager = browser_manager or LazyBrowserManager(config)
        self.agent = agent or AgentService(config, self.store, self.renderer, self.browser_manager)

    def start(self) -> None:
        """Run the whole session. The browser is always closed on the way out."""
        try:
            self.renderer.clear()
            self.renderer.show_welcome()
            self.themes.set_theme(self.store.get_theme())

            if self.store.is_first_run():
                self.first_time_setup()

            self.main_loop()
        finally:
            self.browser_manager.close()

    def first_time_setup(self) -> None:
        self.renderer.show_first_time_setup()

        api_key = self.prompter.ask_api_key()
        self.console.print()
        theme = self.prompter.ask_theme(default=self.store.get_theme())

        self.store.set_api_key(api_key)
        self.store.set_theme(theme)
        self.store.set_first_run(False)
        self.themes.set_theme(theme)

        self.renderer.show_setup_complete()
        self.prompter.pause()
        self.renderer.clear()
        self.renderer.show_welcome()

    def main_loop(self) -> None:
        self.renderer.show_text("Type /help for commands, or describe a task for the agent.")
        while True:
            try:
                line = self.console.input(self.themes.primary(PROMPT))
            except (EOFError, KeyboardInterrupt):
                self.renderer.show_goodbye()
                return

            if not self.process_input(line):
                self.renderer.show_goodbye()
                return

    def process_input(self, line: str) -> bool:
        """Handle one line of input.

        Args:
            line: Raw input line

        Returns:
            False when the session should end, True otherwise
        """
        text = line.strip()
        if not text:
            return True

        if text.startswith("/"):
            return self.commands.execute(line) is not CommandSignal.EXIT

        self.agent.run(text)
        return True


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="webvision",
        description="WebVision AI - an interactive agent that controls your browser.",
        epilog="""
Examples:
  # Start an interactive session
  webvision

  # Run without a visible browser window
  webvision --headless

  # Use a local OpenAI-compatible endpoint
  webvision --model-endpoint http://localhost:1234/v1 --model llama3

Inside the session, type /help for commands or describe a task, e.g.
  webvision> Go to wikipedia.org and search for Playwright
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"WebVision {__version__}",
    )

    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run browser in headless mode",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"LLM model name (default: {DEFAULTS['model']})",
    )

    parser.add_argument(
        "--model-endpoint",
        type=str,
        default=None,
        help="OpenAI-compatible API endpoint URL",
    )

    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULTS["max_steps"],
        help=f"Maximum model turns per task (default: {DEFAULTS['max_steps']})",
    )

    parser.add_argument(
        "--screenshots-dir",
        type=str,
        default=None,
        help=f"Directory for screenshots (default: {DEFAULTS['screenshots_dir']})",
    )

    parser.add_argument(
        "--strict-verify",
        action="store_true",
        help="Fail fill_form when the field value does not match after filling",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _handle_sigterm(signum, frame):
    logger.warning(f"Received signal {signum}, shutting down...")
    raise KeyboardInterrupt


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = AgentConfig.from_cli_args(
        headless=args.headless,
        max_steps=args.max_steps,
        model=args.model,
        model_endpoint=args.model_endpoint,
        screenshots_dir=args.screenshots_dir,
        strict_verification=args.strict_verify,
        debug=args.debug,
    )
    setup_logging(config.debug)

    signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        config.ensure_directories()
        WebVisionCLI(config).start()
        return 0
    except KeyboardInterrupt:
        Console().print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
