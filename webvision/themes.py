"""
Color themes for the WebVision terminal UI.

A theme maps role names (primary, secondary, ...) to functions that wrap
text in rich markup. The registry holds the fixed set of themes and a
single pointer to the active one.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from rich.markup import escape

StyleFn = Callable[[str], str]

ROLES = (
    "primary",
    "secondary",
    "success",
    "warning",
    "error",
    "text",
    "dim",
    "highlight",
)


def make_style(style: str) -> StyleFn:
    """Build a style function that wraps escaped text in rich markup."""
    def apply(text: str) -> str:
        return f"[{style}]{escape(str(text))}[/]"
    return apply


def identity(text: str) -> str:
    return text


@dataclass(frozen=True)
class Theme:
    """A named palette of role styles."""
    name: str
    label: str
    palette: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_styles(cls, name: str, label: str, **palette: str) -> "Theme":
        return cls(name=name, label=label, palette=palette)

    def style(self, role: str) -> Optional[StyleFn]:
        style = self.palette.get(role)
        return make_style(style) if style else None


THEMES: dict[str, Theme] = {
    "default": Theme.from_styles(
        "default", "🌟 Default (Blue)",
        primary="blue", secondary="cyan", success="green", warning="yellow",
        error="red", text="white", dim="bright_black", highlight="white on blue",
    ),
    "dark": Theme.from_styles(
        "dark", "🌙 Dark (Purple)",
        primary="magenta", secondary="purple", success="green", warning="yellow",
        error="red", text="white", dim="bright_black", highlight="white on magenta",
    ),
    "ocean": Theme.from_styles(
        "ocean", "🌊 Ocean (Cyan)",
        primary="cyan", secondary="blue", success="green", warning="yellow",
        error="red", text="white", dim="bright_black", highlight="black on cyan",
    ),
    "sakura": Theme.from_styles(
        "sakura", "🌸 Sakura (Pink)",
        primary="magenta", secondary="pink1", success="green", warning="yellow",
        error="red", text="white", dim="bright_black", highlight="white on magenta",
    ),
    "forest": Theme.from_styles(
        "forest", "🍃 Forest (Green)",
        primary="green", secondary="bright_green", success="green", warning="yellow",
        error="red", text="white", dim="bright_black", highlight="black on green",
    ),
}


class ThemeRegistry:
    """Lookup of themes plus the current selection."""

    def __init__(self, current: str = "default", themes: dict[str, Theme] | None = None):
        self.themes = dict(themes if themes is not None else THEMES)
        self.current = current if current in self.themes else "default"

    def names(self) -> list[str]:
        return list(self.themes)

    def label(self, name: str) -> str:
        theme = self.themes.get(name)
        return theme.label if theme else name

    def set_theme(self, name: str) -> bool:
        """Select a theme by name.

        Unknown names leave the current selection unchanged.

        Returns:
            True if the theme is known and now active
        """
        if name not in self.themes:
            return False
        self.current = name
        return True

    def style_for(self, role: str) -> StyleFn:
        """Get the active theme's style function for a role.

        Falls back to the identity function when either is missing.
        """
        theme = self.themes.get(self.current)
        if theme is None:
            return identity
        return theme.style(role) or identity

    def color_for(self, role: str, fallback: str = "blue") -> str:
        """Get the raw rich style string for a role (for borders and tables)."""
        theme = self.themes.get(self.current)
        if theme is None:
            return fallback
        return theme.palette.get(role, fallback)

    def primary(self, text: str) -> str:
        return self.style_for("primary")(text)

    def secondary(self, text: str) -> str:
        return self.style_for("secondary")(text)

    def success(self, text: str) -> str:
        return self.style_for("success")(text)

    def warning(self, text: str) -> str:
        return self.style_for("warning")(text)

    def error(self, text: str) -> str:
        return self.style_for("error")(text)

    def text(self, text: str) -> str:
        return self.style_for("text")(text)

    def dim(self, text: str) -> str:
        return self.style_for("dim")(text)

    def highlight(self, text: str) -> str:
        return self.style_for("highlight")(text)
