"""
Lazy browser manager for on-demand browser initialization.

The browser is only launched when the first agent run needs it, and is
reused by every later run until the session ends.
"""

import atexit
import logging
from typing import TYPE_CHECKING, Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from .tools import DEFAULT_USER_AGENT, DEFAULT_VIEWPORT, BrowserTools

if TYPE_CHECKING:
    from .config import AgentConfig


logger = logging.getLogger(__name__)


# Chromium flags applied to every launch
LAUNCH_ARGS = ["--disable-extensions", "--disable-file-system"]


# Track all browser managers for cleanup on exit
_active_managers: list["LazyBrowserManager"] = []


def _cleanup_all_managers():
    """Cleanup all active browser managers on process exit."""
    for manager in _active_managers[:]:
        try:
            manager.close()
        except Exception as e:
            logger.debug(f"Browser cleanup at exit failed: {e}")
    _active_managers.clear()


atexit.register(_cleanup_all_managers)


class LazyBrowserManager:
    """Owns the Playwright driver, browser, context and page.

    Usage:
        with LazyBrowserManager(config) as manager:
            # Browser NOT opened yet
            tools = manager.get_browser_tools()  # Browser opens now
    """

    def __init__(self, config: "AgentConfig"):
        """Initialize the lazy browser manager.

        Args:
            config: Agent configuration with headless settings etc.
        """
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._browser_tools: Optional[BrowserTools] = None
        self._closed = False

        _active_managers.append(self)

    def _initialize_browser(self) -> None:
        """Start the driver and open a browser, context and page.

        Called lazily on first access to browser tools.
        """
        if self._closed:
            raise RuntimeError("Browser manager has been closed")

        if self._browser_tools is not None:
            return

        logger.debug("LazyBrowserManager: Initializing browser (first use)")

        self._playwright = sync_playwright().start()

        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.config.headless,
                chromium_sandbox=True,
                args=LAUNCH_ARGS,
            )

            self._context = self._browser.new_context(
                viewport=DEFAULT_VIEWPORT,
                user_agent=DEFAULT_USER_AGENT,
            )

            self._page = self._context.new_page()

            self._browser_tools = BrowserTools(
                self._page,
                context=self._context,
                screenshots_dir=self.config.screenshots_dir,
                max_retries=self.config.max_retries,
                strict_verification=self.config.strict_verification,
            )
        except Exception:
            logger.error("LazyBrowserManager: Browser launch failed, releasing driver")
            self._release()
            raise

        logger.debug("LazyBrowserManager: Browser initialized successfully")

    def get_browser_tools(self) -> BrowserTools:
        """Get browser tools, initializing browser if needed.

        Raises:
            RuntimeError: If manager has been closed
        """
        self._initialize_browser()
        return self._browser_tools

    def is_browser_open(self) -> bool:
        """Check if browser has been initialized."""
        return self._browser is not None and not self._closed

    def close(self) -> None:
        """Close browser and release the driver.

        Safe to call multiple times.
        """
        if self._closed:
            return

        self._closed = True

        if self in _active_managers:
            _active_managers.remove(self)

        if self._browser_tools:
            logger.debug("LazyBrowserManager: Closing browser")

        self._release()

    def _release(self) -> None:
        """Close whatever was opened, in reverse order, and forget it."""
        for name, resource, closer in (
            ("context", self._context, "close"),
            ("browser", self._browser, "close"),
            ("playwright", self._playwright, "stop"),
        ):
            if resource is None:
                continue
            try:
                getattr(resource, closer)()
            except Exception as e:
                logger.debug(f"LazyBrowserManager: failed to close {name}: {e}")

        self._context = None
        self._browser = None
        self._playwright = None
        self._browser_tools = None
        self._page = None

    def __enter__(self) -> "LazyBrowserManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
