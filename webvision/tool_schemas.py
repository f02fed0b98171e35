"""
Typed tool schemas for WebVision.

Provides the closed set of tool kinds, one Pydantic model per tool with
argument validation, and the conversion into LangChain tools that can be
bound to a chat model.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Literal, Optional

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field, ValidationError, field_validator

if TYPE_CHECKING:
    from .tools import BrowserTools, ToolResult


class ToolKind(str, Enum):
    """Browser tools exposed to the model."""
    TAKE_SCREENSHOT = "take_screenshot"
    OPEN_BROWSER = "open_browser"
    OPEN_URL = "open_url"
    CLICK_SCREEN = "click_screen"
    CLICK_ELEMENT = "click_element"
    SEND_KEYS = "send_keys"
    FILL_FORM = "fill_form"
    SCROLL_PAGE = "scroll_page"
    PRESS_KEY = "press_key"
    WAIT_AND_CHECK = "wait_and_check"
    REFRESH_PAGE = "refresh_page"
    CHECK_ELEMENT = "check_element"
    GET_PAGE_CONTENT = "get_page_content"


# =============================================================================
# Browser Tool Schemas
# =============================================================================

class ScreenshotRequest(BaseModel):
    """Request to capture a screenshot."""


class OpenBrowserRequest(BaseModel):
    """Request to open a new browser tab."""


class OpenUrlRequest(BaseModel):
    """Request to navigate to a URL."""

    url: str = Field(description="URL to navigate to")
    force_reload: bool = Field(
        default=False,
        description="Force reload if already on this URL",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("URL cannot be empty")
        return v.strip()


class ClickScreenRequest(BaseModel):
    """Request to click at viewport coordinates."""

    x: float = Field(description="X coordinate in CSS pixels")
    y: float = Field(description="Y coordinate in CSS pixels")


class ClickElementRequest(BaseModel):
    """Request to click an element."""

    selector: str = Field(description="CSS selector, text content, or aria-label")

    @field_validator("selector")
    @classmethod
    def validate_selector(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Selector cannot be empty")
        return v.strip()


class SendKeysRequest(BaseModel):
    """Request to type text at the current focus."""

    text: str = Field(description="Text to type")
    delay: int = Field(
        default=50,
        ge=0,
        le=1000,
        description="Delay between keystrokes in ms (default: 50)",
    )


class FillFormRequest(BaseModel):
    """Request to fill a form field."""

    selector: str = Field(description="Selector of the input, textarea or select")
    text: str = Field(description="Value to set")
    clear: bool = Field(default=True, description="Clear field first (default: true)")

    @field_validator("selector")
    @classmethod
    def validate_selector(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Selector cannot be empty")
        return v.strip()


class ScrollPageRequest(BaseModel):
    """Request to scroll the page."""

    pixels: int = Field(description="Pixels to scroll (positive=down, negative=up)")
    behavior: Literal["auto", "smooth"] = Field(
        default="smooth",
        description="Scroll behavior (default: smooth)",
    )


class PressKeyRequest(BaseModel):
    """Request to press a keyboard key."""

    key: str = Field(description="Key to press (Enter, Tab, Escape, etc.)")

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Key cannot be empty")
        return v.strip()


class WaitAndCheckRequest(BaseModel):
    """Request to wait for the page to be ready."""

    timeout: int = Field(
        default=10000,
        ge=100,
        le=120000,
        description="Timeout in ms (default: 10000)",
    )


class RefreshPageRequest(BaseModel):
    """Request to reload the current page."""


class CheckElementRequest(BaseModel):
    """Request to check whether an element exists."""

    selector: str = Field(description="CSS selector or text to find")


class GetPageContentRequest(BaseModel):
    """Request to extract text content from the page."""

    selector: str = Field(
        default="body",
        description="CSS selector to extract content from (default: body)",
    )
    max_length: int = Field(
        default=1000,
        ge=1,
        le=50000,
        description="Maximum length of content (default: 1000)",
    )


# =============================================================================
# Schema Registry
# =============================================================================

TOOL_SCHEMAS: dict[ToolKind, type[BaseModel]] = {
    ToolKind.TAKE_SCREENSHOT: ScreenshotRequest,
    ToolKind.OPEN_BROWSER: OpenBrowserRequest,
    ToolKind.OPEN_URL: OpenUrlRequest,
    ToolKind.CLICK_SCREEN: ClickScreenRequest,
    ToolKind.CLICK_ELEMENT: ClickElementRequest,
    ToolKind.SEND_KEYS: SendKeysRequest,
    ToolKind.FILL_FORM: FillFormRequest,
    ToolKind.SCROLL_PAGE: ScrollPageRequest,
    ToolKind.PRESS_KEY: PressKeyRequest,
    ToolKind.WAIT_AND_CHECK: WaitAndCheckRequest,
    ToolKind.REFRESH_PAGE: RefreshPageRequest,
    ToolKind.CHECK_ELEMENT: CheckElementRequest,
    ToolKind.GET_PAGE_CONTENT: GetPageContentRequest,
}

TOOL_DESCRIPTIONS: dict[ToolKind, str] = {
    ToolKind.TAKE_SCREENSHOT: "Capture a screenshot and return local file path.",
    ToolKind.OPEN_BROWSER: "Open a new browser tab with optimal settings.",
    ToolKind.OPEN_URL: "Navigate to a URL with multiple fallback strategies for maximum reliability.",
    ToolKind.CLICK_SCREEN: "Click at screen coordinates with retry logic.",
    ToolKind.CLICK_ELEMENT: "Click an element using multiple selection strategies.",
    ToolKind.SEND_KEYS: "Type text with human-like timing.",
    ToolKind.FILL_FORM: "Fill form fields with comprehensive error handling and validation.",
    ToolKind.SCROLL_PAGE: "Scroll the page with smooth animation and position tracking.",
    ToolKind.PRESS_KEY: "Press keyboard keys with retry logic.",
    ToolKind.WAIT_AND_CHECK: "Wait for page to be ready and check if content loaded properly.",
    ToolKind.REFRESH_PAGE: "Refresh the current page with robust loading.",
    ToolKind.CHECK_ELEMENT: "Check if an element exists and is visible on the page.",
    ToolKind.GET_PAGE_CONTENT: "Extract text content from the current page.",
}


def parse_tool_kind(name: str) -> Optional[ToolKind]:
    """Get the ToolKind for a tool name, or None if unknown."""
    try:
        return ToolKind(name)
    except ValueError:
        return None


def validate_tool_args(kind: ToolKind, args: dict) -> tuple[bool, Optional[BaseModel], Optional[str]]:
    """Validate tool arguments against schema.

    Args:
        kind: Tool kind
        args: Arguments to validate

    Returns:
        Tuple of (is_valid, validated_model, error_message)
    """
    schema = TOOL_SCHEMAS[kind]
    try:
        return True, schema(**(args or {})), None
    except ValidationError as e:
        return False, None, str(e)


def build_langchain_tools(browser_tools: "BrowserTools") -> list[StructuredTool]:
    """Wrap the browser tool palette as LangChain tools.

    Each tool validates its arguments and delegates to BrowserTools.execute,
    so a tab switched by open_browser is picked up by later calls.
    """
    def make_func(kind: ToolKind):
        def run(**kwargs: Any) -> str:
            return browser_tools.execute(kind, kwargs).to_llm_text()
        return run

    return [
        StructuredTool.from_function(
            func=make_func(kind),
            name=kind.value,
            description=TOOL_DESCRIPTIONS[kind],
            args_schema=TOOL_SCHEMAS[kind],
        )
        for kind in ToolKind
    ]
