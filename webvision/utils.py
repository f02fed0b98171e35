"""
Utility functions for WebVision.

Provides helpers for text processing, URLs and selectors.
"""

import re


def truncate_text(text: str, max_chars: int, suffix: str = "...") -> str:
    """Truncate text to a maximum number of characters.

    Args:
        text: Text to truncate
        max_chars: Maximum number of characters
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars - len(suffix)] + suffix


def slugify(text: str, max_length: int = 30) -> str:
    """Convert text to a filesystem-safe slug."""
    slug = re.sub(r'[^\w\s-]', '', text.lower())
    slug = re.sub(r'[-\s]+', '_', slug).strip('_')
    return slug[:max_length]


def normalize_url(url: str) -> str:
    """Prefix scheme-less URLs with https://.

    Args:
        url: URL or bare domain as given by the model

    Returns:
        URL with an http(s) scheme
    """
    url = url.strip()
    if not re.match(r'^https?://', url, re.IGNORECASE):
        url = "https://" + url
    return url


def same_url(a: str, b: str) -> bool:
    """Compare two URLs, ignoring a trailing slash."""
    return a.rstrip("/") == b.rstrip("/")


def looks_like_css(selector: str) -> bool:
    """Check whether a selector looks like CSS rather than visible text."""
    return selector.startswith("[") or "#" in selector or "." in selector


def xpath_literal(value: str) -> str:
    """Quote a string for use inside an XPath expression.

    XPath 1.0 has no escape sequences, so values containing both quote
    characters are built with concat().
    """
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def mask_secret(secret: str, visible: int = 4) -> str:
    """Mask a secret, keeping a few characters at both ends.

    Args:
        secret: The secret to mask
        visible: Characters to keep at each end

    Returns:
        Masked secret such as "sk-a...wxyz"
    """
    if len(secret) <= visible * 2:
        return "*" * len(secret)
    return f"{secret[:visible]}...{secret[-visible:]}"
