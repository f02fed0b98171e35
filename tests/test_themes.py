"""
Tests for color themes.
"""

from webvision.themes import THEMES, ThemeRegistry, identity, make_style


class TestStyles:
    """Tests for style functions."""

    def test_make_style_wraps_markup(self):
        assert make_style("blue")("hi") == "[blue]hi[/]"

    def test_markup_in_text_is_escaped(self):
        assert make_style("red")("[bold]x") == "[red]\\[bold]x[/]"

    def test_identity(self):
        assert identity("plain") == "plain"


class TestThemeRegistry:
    """Tests for theme selection."""

    def test_fixed_theme_set(self):
        registry = ThemeRegistry()
        assert registry.names() == ["default", "dark", "ocean", "sakura", "forest"]
        assert registry.current == "default"

    def test_set_theme(self):
        registry = ThemeRegistry()

        assert registry.set_theme("sakura") is True
        assert registry.current == "sakura"
        assert registry.secondary("x") == "[pink1]x[/]"
        assert registry.color_for("primary") == "magenta"

    def test_unknown_theme_is_ignored(self):
        registry = ThemeRegistry(current="ocean")

        assert registry.set_theme("neon") is False
        assert registry.current == "ocean"

    def test_unknown_initial_theme_falls_back(self):
        assert ThemeRegistry(current="neon").current == "default"

    def test_missing_role_uses_identity(self):
        registry = ThemeRegistry()
        assert registry.style_for("sparkle")("x") == "x"

    def test_every_theme_defines_every_role(self):
        for theme in THEMES.values():
            for role in ("primary", "secondary", "success", "warning", "error", "text", "dim", "highlight"):
                assert theme.style(role) is not None, f"{theme.name} lacks {role}"

    def test_labels(self):
        registry = ThemeRegistry()
        assert "Sakura" in registry.label("sakura")
        assert registry.label("neon") == "neon"
