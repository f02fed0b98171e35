"""
Tests for utility helpers.
"""

from webvision.utils import (
    looks_like_css,
    mask_secret,
    normalize_url,
    same_url,
    slugify,
    truncate_text,
    xpath_literal,
)


class TestUrls:
    """Tests for URL helpers."""

    def test_normalize_adds_https(self):
        assert normalize_url("example.com") == "https://example.com"
        assert normalize_url("  wikipedia.org/wiki/Python ") == "https://wikipedia.org/wiki/Python"

    def test_normalize_keeps_scheme(self):
        assert normalize_url("http://example.com") == "http://example.com"
        assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"

    def test_same_url_ignores_trailing_slash(self):
        assert same_url("https://example.com/", "https://example.com")
        assert not same_url("https://example.com/a", "https://example.com/b")


class TestSelectors:
    """Tests for selector helpers."""

    def test_looks_like_css(self):
        assert looks_like_css("#submit")
        assert looks_like_css(".btn-primary")
        assert looks_like_css('[name="q"]')
        assert not looks_like_css("Sign in")

    def test_xpath_literal(self):
        assert xpath_literal("Sign in") == "'Sign in'"
        assert xpath_literal("Don't") == '"Don\'t"'
        assert xpath_literal("""a'b"c""") == """concat('a', "'", 'b"c')"""


class TestText:
    """Tests for text helpers."""

    def test_truncate(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("abcdefghijkl", 8) == "abcde..."

    def test_slugify(self):
        assert slugify("Go to Google.com & search!") == "go_to_googlecom_search"
        assert len(slugify("x" * 100)) == 30

    def test_mask_secret(self):
        assert mask_secret("sk-abcdefghijklmnop") == "sk-a...mnop"
        assert mask_secret("short") == "*****"
