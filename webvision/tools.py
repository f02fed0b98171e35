"""
Browser tools for WebVision.

Provides the browser action palette executed via Playwright. Every public
action returns a ToolResult and never raises: failures are reported back
to the model as text so it can decide what to try next.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

from playwright.sync_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .tool_schemas import ToolKind, parse_tool_kind, validate_tool_args
from .utils import looks_like_css, normalize_url, same_url, xpath_literal

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Navigation completeness criteria, tried in order with growing timeouts (ms)
LOAD_STRATEGIES = [
    ("domcontentloaded", 30000),
    ("load", 45000),
    ("networkidle", 60000),
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}

DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}

FORM_TAGS = ("input", "textarea", "select")

XPATH_CLICKABLE_TAGS = ("button", "a", "span", "div")

_ELEMENT_INFO_JS = """
    (sel) => {
        const el = document.querySelector(sel);
        if (!el) return null;
        return {
            tagName: el.tagName.toLowerCase(),
            type: el.type || 'unknown',
            disabled: !!el.disabled,
            readonly: !!el.readOnly
        };
    }
"""

_READY_STATE_JS = "() => document.readyState === 'complete' || document.readyState === 'interactive'"

_HAS_CONTENT_JS = """
    () => document.body &&
        (document.body.children.length > 0 ||
         document.body.textContent.trim().length > 0)
"""


class NavigationError(Exception):
    """Raised when every load strategy failed for a URL."""


class ClickError(Exception):
    """Raised when no click strategy found a clickable element."""


class FillVerificationError(Exception):
    """Raised in strict mode when a filled value does not stick."""


def with_retry(
    operation: Callable[[], T],
    max_retries: int = 3,
    delay_ms: int = 1000,
    wait: Optional[Callable[[int], Any]] = None,
) -> T:
    """Run an operation, retrying with a growing delay.

    Args:
        operation: Zero-argument callable to run
        max_retries: Maximum number of attempts
        delay_ms: Base delay; attempt N waits delay_ms * N before retrying
        wait: Callable taking milliseconds (defaults to time.sleep)

    Returns:
        The operation's return value

    Raises:
        The last exception raised by the operation once attempts run out
    """
    if wait is None:
        wait = lambda ms: time.sleep(ms / 1000)

    for attempt in range(1, max_retries + 1):
        try:
            return operation()
        except Exception as e:
            if attempt >= max_retries:
                raise
            logger.info(f"Attempt {attempt} failed: {e}. Retrying...")
            wait(delay_ms * attempt)

    raise ValueError("max_retries must be at least 1")


def describe_error(error: BaseException) -> str:
    """Format an exception for a tool result message."""
    if isinstance(error, PlaywrightTimeoutError):
        return f"Timeout: {error}"
    return str(error) or type(error).__name__


def _quoted(value: str) -> str:
    """Escape a value for a double-quoted Playwright/CSS string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class ToolResult:
    """Result of a tool execution."""
    success: bool
    message: str
    data: Optional[Any] = None
    screenshot_path: Optional[Path] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {
            "success": self.success,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.screenshot_path is not None:
            result["screenshot_path"] = str(self.screenshot_path)
        return result

    def to_llm_text(self) -> str:
        """Render the result as the text handed back to the model."""
        if self.success:
            return self.message
        return f"Error: {self.message}"


class BrowserTools:
    """Executes browser actions via Playwright."""

    def __init__(
        self,
        page: Page,
        context: Optional[BrowserContext] = None,
        screenshots_dir: Optional[Path] = None,
        max_retries: int = 3,
        strict_verification: bool = False,
    ):
        """Initialize browser tools.

        Args:
            page: Playwright page instance
            context: Browser context used to open new tabs (defaults to the page's)
            screenshots_dir: Directory for saving screenshots
            max_retries: Attempts for retried actions
            strict_verification: Fail fill_form when the value does not stick
        """
        self.page = page
        self.context = context
        self.max_retries = max_retries
        self.strict_verification = strict_verification

        self.screenshots_dir = Path(screenshots_dir or Path("screenshots")).resolve()
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)

        self._handlers: dict[ToolKind, Callable[..., ToolResult]] = {
            ToolKind.TAKE_SCREENSHOT: self.screenshot,
            ToolKind.OPEN_BROWSER: self.open_new_tab,
            ToolKind.OPEN_URL: self.navigate,
            ToolKind.CLICK_SCREEN: self.click_at,
            ToolKind.CLICK_ELEMENT: self.click_element,
            ToolKind.SEND_KEYS: self.type_text,
            ToolKind.FILL_FORM: self.fill_form,
            ToolKind.SCROLL_PAGE: self.scroll,
            ToolKind.PRESS_KEY: self.press_key,
            ToolKind.WAIT_AND_CHECK: self.wait_and_check,
            ToolKind.REFRESH_PAGE: self.refresh,
            ToolKind.CHECK_ELEMENT: self.check_element,
            ToolKind.GET_PAGE_CONTENT: self.get_page_content,
        }

        self.configure_page()

    @property
    def handled_kinds(self) -> set[ToolKind]:
        return set(self._handlers)

    def execute(self, kind: Union[ToolKind, str], args: Optional[dict[str, Any]] = None) -> ToolResult:
        """Execute a browser action.

        Args:
            kind: Tool kind or its name
            args: Action arguments, validated against the tool's schema

        Returns:
            ToolResult with success status and message
        """
        if not isinstance(kind, ToolKind):
            name = kind
            kind = parse_tool_kind(name)
            if kind is None:
                return ToolResult(success=False, message=f"Unknown action: {name}")

        is_valid, request, error = validate_tool_args(kind, args or {})
        if not is_valid:
            return ToolResult(
                success=False,
                message=f"Invalid arguments for {kind.value}: {error}",
            )

        method = self._handlers[kind]
        try:
            return method(**request.model_dump())
        except Exception as e:
            logger.exception(f"Unhandled error in {kind.value}")
            return ToolResult(
                success=False,
                message=f"❌ {type(e).__name__}: {describe_error(e)}",
            )

    # -------------------------------------------------------------------------
    # Page setup and shared helpers
    # -------------------------------------------------------------------------

    def configure_page(self) -> None:
        """Apply the standard viewport and request headers to the current page."""
        try:
            self.page.set_viewport_size(DEFAULT_VIEWPORT)
            self.page.set_extra_http_headers(DEFAULT_HEADERS)
        except Exception as e:
            logger.warning(f"Page configuration warning: {e}")

    def _wait(self, ms: int) -> None:
        self.page.wait_for_timeout(ms)

    def _retry(self, operation: Callable[[], T]) -> T:
        return with_retry(operation, max_retries=self.max_retries, wait=self._wait)

    def _safe_title(self, default: str) -> str:
        try:
            return self.page.title()
        except Exception:
            return default

    def _load_page_robustly(self, url: str, max_attempts: int = 3) -> dict[str, Any]:
        """Navigate using each load strategy in turn, over several attempts.

        Returns:
            Dict with the response status and final URL

        Raises:
            NavigationError: If every strategy failed on every attempt
        """
        for attempt in range(max_attempts):
            for wait_until, timeout in LOAD_STRATEGIES:
                try:
                    logger.info(f"Attempt {attempt + 1}: loading {url} (wait_until={wait_until})")
                    response = self.page.goto(url, wait_until=wait_until, timeout=timeout)
                    if response is None:
                        raise NavigationError("No response received")

                    status = response.status
                    if status >= 400:
                        raise NavigationError(f"HTTP {status} error")

                    self._wait(2000)
                    self._wait_for_content_loaded()

                    logger.info(f"Page loaded with wait_until={wait_until}")
                    return {"status": status, "url": self.page.url}
                except Exception as e:
                    logger.info(f"Strategy {wait_until} failed: {e}")
                    continue

            if attempt < max_attempts - 1:
                logger.info("All strategies failed, waiting before retry...")
                self._wait(3000)

        raise NavigationError(
            f"Failed to load page after {max_attempts} attempts with all strategies"
        )

    def _wait_for_content_loaded(self, timeout: int = 15000) -> None:
        """Wait for the document to be ready and the body to have content.

        Timeouts are logged and otherwise ignored.
        """
        try:
            self.page.wait_for_function(_READY_STATE_JS, timeout=timeout / 3)
            self.page.wait_for_function(_HAS_CONTENT_JS, timeout=timeout / 3)
            self._wait(2000)
        except PlaywrightError as e:
            logger.warning(f"Content loading timeout, continuing anyway: {e}")

    def _find_element(self, selector: str, timeout: int = 10000) -> bool:
        """Check whether a selector resolves, trying visible then attached."""
        strategies = [
            lambda: self.page.wait_for_selector(selector, state="visible", timeout=timeout),
            lambda: self.page.wait_for_selector(selector, state="attached", timeout=timeout),
            lambda: self.page.locator(selector).first.wait_for(timeout=timeout),
        ]

        for strategy in strategies:
            try:
                strategy()
                return True
            except Exception:
                continue
        return False

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def navigate(self, url: str, force_reload: bool = False) -> ToolResult:
        """Navigate to a URL.

        Args:
            url: URL to navigate to (https:// is assumed when missing)
            force_reload: Reload even if the page is already on this URL

        Returns:
            ToolResult
        """
        url = normalize_url(url)

        if same_url(self.page.url, url) and not force_reload:
            return ToolResult(success=True, message=f"🌍 Already on {url}", data={"url": url})

        try:
            result = self._load_page_robustly(url)
            title = self._safe_title("Unknown")
            final_url = self.page.url
            return ToolResult(
                success=True,
                message=(
                    f"🌍 Successfully loaded: {final_url}\n"
                    f"📄 Title: {title}\n"
                    f"✅ Status: {result['status']}"
                ),
                data={"url": final_url, "title": title, "status": result["status"]},
            )
        except Exception as error:
            logger.warning(f"URL loading failed, attempting fallback load: {error}")

            try:
                self.page.goto(url, wait_until="commit", timeout=15000)
                self._wait(3000)
                title = self._safe_title("Partially loaded")
                return ToolResult(
                    success=True,
                    message=(
                        f"🌍 Fallback load completed for: {url}\n"
                        f"📄 Title: {title}\n"
                        f"⚠️  Content may be partially loaded"
                    ),
                    data={"url": url, "title": title, "partial": True},
                )
            except Exception as fallback_error:
                return ToolResult(
                    success=False,
                    message=(
                        f"❌ Failed to load {url} after all attempts.\n"
                        f"Original error: {describe_error(error)}\n"
                        f"Fallback error: {describe_error(fallback_error)}"
                    ),
                )

    def refresh(self) -> ToolResult:
        """Reload the current page using the load strategies."""
        try:
            current_url = self.page.url
            logger.info(f"Refreshing page: {current_url}")
            result = self._load_page_robustly(current_url)
            title = self.page.title()
            return ToolResult(
                success=True,
                message=f"🔄 Page refreshed successfully!\n📄 Title: {title}\n✅ Status: {result['status']}",
                data={"url": self.page.url, "status": result["status"]},
            )
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Failed to refresh page: {describe_error(e)}")

    def open_new_tab(self) -> ToolResult:
        """Open a new tab and make it the current page."""
        try:
            context = self.context or self.page.context
            self.page = context.new_page()
            self.configure_page()
            return ToolResult(success=True, message="✅ New browser tab opened with optimal configuration")
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Failed to open new tab: {describe_error(e)}")

    # -------------------------------------------------------------------------
    # Mouse and keyboard
    # -------------------------------------------------------------------------

    def click_at(self, x: float, y: float) -> ToolResult:
        """Click at viewport coordinates.

        Args:
            x: X coordinate
            y: Y coordinate

        Returns:
            ToolResult
        """
        try:
            viewport = self.page.viewport_size
            if viewport is None:
                viewport = self.page.evaluate(
                    "() => ({ width: window.innerWidth, height: window.innerHeight })"
                )
            width, height = viewport["width"], viewport["height"]
            if x < 0 or y < 0 or x > width or y > height:
                return ToolResult(
                    success=False,
                    message=f"❌ Failed to click at ({x},{y}): Coordinates are outside viewport {width}x{height}",
                )

            def click() -> None:
                self.page.mouse.click(x, y)
                self._wait(500)

            self._retry(click)
            return ToolResult(success=True, message=f"🖱️ Successfully clicked at coordinates ({x},{y})")
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Failed to click at ({x},{y}): {describe_error(e)}")

    def _click_strategies(self, selector: str) -> list[tuple[str, Callable[[], bool]]]:
        """Build the ordered fallback chain for clicking an element.

        Each strategy returns True when it clicked, False when it found
        nothing to click, and raises on a failed click.
        """
        quoted = _quoted(selector)
        aria_selector = f'[aria-label*="{quoted}"]'
        title_selector = f'[title*="{quoted}"]'
        literal = xpath_literal(selector)
        xpath = " | ".join(f"//{tag}[contains(text(), {literal})]" for tag in XPATH_CLICKABLE_TAGS)

        def direct() -> bool:
            if not self._find_element(selector, 3000):
                return False
            self.page.click(selector, timeout=5000)
            return True

        def exact_text() -> bool:
            self.page.click(f'text="{quoted}"', timeout=5000)
            return True

        def partial_text() -> bool:
            self.page.click(f"text={selector}", timeout=5000)
            return True

        def by_attribute(attr_selector: str) -> Callable[[], bool]:
            def click() -> bool:
                if not self._find_element(attr_selector, 3000):
                    return False
                self.page.click(attr_selector, timeout=5000)
                return True
            return click

        def by_xpath() -> bool:
            element = self.page.locator(f"xpath={xpath}").first
            if not element.is_visible():
                return False
            element.click(timeout=5000)
            return True

        strategies: list[tuple[str, Callable[[], bool]]] = [("selector", direct)]
        if not looks_like_css(selector):
            strategies.append(("exact_text", exact_text))
        strategies.extend([
            ("partial_text", partial_text),
            ("aria_label", by_attribute(aria_selector)),
            ("title", by_attribute(title_selector)),
            ("xpath", by_xpath),
        ])
        return strategies

    def click_element(self, selector: str) -> ToolResult:
        """Click an element, falling back through several locating strategies.

        Args:
            selector: CSS selector, visible text, aria-label or title

        Returns:
            ToolResult
        """
        def attempt() -> ToolResult:
            last_error: Optional[BaseException] = None
            for name, strategy in self._click_strategies(selector):
                try:
                    if strategy():
                        self._wait(500)
                        return ToolResult(
                            success=True,
                            message=f"🖱️ Successfully clicked element: {selector}",
                            data={"strategy": name},
                        )
                except Exception as e:
                    last_error = e
            raise ClickError(
                f"Element not found or not clickable: {selector}. Last error: {last_error}"
            )

        try:
            return self._retry(attempt)
        except Exception as e:
            return ToolResult(
                success=False,
                message=f'❌ Failed to click element "{selector}": {describe_error(e)}',
            )

    def type_text(self, text: str, delay: int = 50) -> ToolResult:
        """Type text at the current focus with a per-key delay."""
        preview = text if len(text) <= 50 else text[:50] + "..."
        try:
            self._retry(lambda: self.page.keyboard.type(text, delay=delay))
            return ToolResult(success=True, message=f'⌨️ Successfully typed: "{preview}"')
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Failed to type text: {describe_error(e)}")

    def press_key(self, key: str) -> ToolResult:
        """Press a keyboard key (e.g. "Enter", "Tab", "Escape")."""
        def press() -> None:
            self.page.keyboard.press(key)
            self._wait(200)

        try:
            self._retry(press)
            return ToolResult(success=True, message=f"⌨️ Successfully pressed: {key}")
        except Exception as e:
            return ToolResult(success=False, message=f'❌ Failed to press key "{key}": {describe_error(e)}')

    # -------------------------------------------------------------------------
    # Forms and scrolling
    # -------------------------------------------------------------------------

    def fill_form(self, selector: str, text: str, clear: bool = True) -> ToolResult:
        """Fill a form field and notify page scripts of the change.

        Args:
            selector: Selector of an input, textarea or select
            text: Value to set
            clear: Clear the field before filling

        Returns:
            ToolResult
        """
        def attempt() -> ToolResult:
            if not self._find_element(selector):
                raise ValueError(f"Element not found: {selector}")

            info = self.page.evaluate(_ELEMENT_INFO_JS, selector)
            if not info:
                raise ValueError(f"Element not found: {selector}")

            tag = info.get("tagName")
            if tag not in FORM_TAGS:
                raise ValueError(f"Element is not a form field: {tag}")
            if info.get("disabled") or info.get("readonly"):
                raise ValueError("Element is disabled or readonly")

            if tag == "select":
                self.page.select_option(selector, text)
            else:
                if clear:
                    self.page.fill(selector, "")
                self.page.fill(selector, text)

            for event in ("input", "change", "blur"):
                self.page.dispatch_event(selector, event)

            if tag in ("input", "textarea"):
                self._verify_value(selector, text)

            return ToolResult(success=True, message=f'📝 Successfully filled "{selector}" with "{text}"')

        try:
            return self._retry(attempt)
        except Exception as e:
            return ToolResult(
                success=False,
                message=f'❌ Failed to fill form field "{selector}": {describe_error(e)}',
            )

    def _verify_value(self, selector: str, expected: str) -> None:
        try:
            actual = self.page.input_value(selector)
        except Exception as e:
            logger.debug(f"Could not read back value of {selector}: {e}")
            return

        if actual != expected:
            message = f'Expected "{expected}" but got "{actual}"'
            if self.strict_verification:
                raise FillVerificationError(message)
            logger.warning(f"Warning: {message}")

    def scroll(self, pixels: int, behavior: str = "smooth") -> ToolResult:
        """Scroll vertically and report how far the page actually moved.

        Args:
            pixels: Requested offset (positive = down, negative = up)
            behavior: "auto" or "smooth"

        Returns:
            ToolResult
        """
        try:
            before = self.page.evaluate("() => window.pageYOffset")
            self.page.evaluate(
                "({ y, scrollBehavior }) => window.scrollBy({ top: y, behavior: scrollBehavior })",
                {"y": pixels, "scrollBehavior": behavior},
            )
            self._wait(1000)
            after = self.page.evaluate("() => window.pageYOffset")
            moved = after - before
            return ToolResult(
                success=True,
                message=f"📜 Scrolled {moved}px (requested: {pixels}px). Position: {after}px",
                data={"requested": pixels, "moved": moved, "position": after},
            )
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Failed to scroll: {describe_error(e)}")

    # -------------------------------------------------------------------------
    # Reading the page
    # -------------------------------------------------------------------------

    def screenshot(self) -> ToolResult:
        """Capture a screenshot, trying full page, then viewport, then defaults.

        Returns:
            ToolResult with a file:// locator for the saved image
        """
        path = self.screenshots_dir / f"screenshot-{int(time.time() * 1000)}.png"
        strategies = [
            lambda: self.page.screenshot(full_page=True, path=str(path)),
            lambda: self.page.screenshot(full_page=False, path=str(path)),
            lambda: self.page.screenshot(path=str(path)),
        ]

        for strategy in strategies:
            try:
                strategy()
            except Exception as e:
                logger.warning(f"Screenshot strategy failed: {e}")
                continue

            url = f"file://{path}"
            return ToolResult(
                success=True,
                message=f"📸 Screenshot saved: {url}",
                data={"type": "image_url", "image_url": {"url": url}},
                screenshot_path=path,
            )

        return ToolResult(success=False, message="❌ Screenshot failed: All screenshot strategies failed")

    def wait_and_check(self, timeout: int = 10000) -> ToolResult:
        """Wait for the page to be ready and summarize what loaded."""
        try:
            self._wait_for_content_loaded(timeout)

            url = self.page.url
            title = self.page.title()
            body_text = self.page.evaluate(
                "() => document.body ? document.body.textContent.trim().substring(0, 100) : ''"
            ) or ""
            ellipsis = "..." if len(body_text) >= 100 else ""
            return ToolResult(
                success=True,
                message=(
                    f"✅ Page ready!\n🌍 URL: {url}\n📄 Title: {title}\n"
                    f"📝 Content preview: {body_text}{ellipsis}"
                ),
            )
        except Exception as e:
            return ToolResult(success=False, message=f"❌ Page check failed: {describe_error(e)}")

    def check_element(self, selector: str) -> ToolResult:
        """Report whether an element exists, is visible and is enabled."""
        try:
            if not self._find_element(selector, 3000):
                return ToolResult(
                    success=True,
                    message=f"❌ Element not found: {selector}",
                    data={"found": False},
                )

            try:
                visible = self.page.is_visible(selector)
            except Exception:
                visible = False
            try:
                enabled = self.page.is_enabled(selector)
            except Exception:
                enabled = False

            return ToolResult(
                success=True,
                message=f"✅ Element found: {selector}\n👁️ Visible: {visible}\n🖱️ Enabled: {enabled}",
                data={"found": True, "visible": visible, "enabled": enabled},
            )
        except Exception as e:
            return ToolResult(
                success=False,
                message=f'❌ Failed to check element "{selector}": {describe_error(e)}',
            )

    def get_page_content(self, selector: str = "body", max_length: int = 1000) -> ToolResult:
        """Extract the text content of the first element matching a selector."""
        try:
            content = self.page.evaluate(
                """
                ({ sel, max }) => {
                    const element = document.querySelector(sel);
                    if (!element) return null;
                    const text = element.textContent || element.innerText || '';
                    return text.trim().substring(0, max);
                }
                """,
                {"sel": selector, "max": max_length},
            )
        except Exception as e:
            return ToolResult(
                success=False,
                message=f'❌ Failed to get content from "{selector}": {describe_error(e)}',
            )

        if content is None:
            return ToolResult(success=False, message=f"❌ Element not found: {selector}")

        ellipsis = "..." if len(content) >= max_length else ""
        return ToolResult(
            success=True,
            message=f"📄 Content extracted from {selector}:\n{content}{ellipsis}",
            data={"text": content},
        )
