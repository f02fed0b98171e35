"""
Tests for lazy browser management.
"""

from unittest.mock import patch

import pytest

from webvision.browser_manager import LazyBrowserManager
from webvision.config import AgentConfig


@pytest.fixture
def playwright():
    with patch("webvision.browser_manager.sync_playwright") as sync_pw:
        yield sync_pw.return_value.start.return_value


@pytest.fixture
def manager(playwright, tmp_path):
    return LazyBrowserManager(AgentConfig(headless=True, screenshots_dir=tmp_path))


class TestLazyBrowserManager:
    """Tests for on-demand browser startup and shutdown."""

    def test_browser_not_started_until_needed(self, manager, playwright):
        assert manager.is_browser_open() is False
        playwright.chromium.launch.assert_not_called()

    def test_browser_started_once(self, manager, playwright):
        first = manager.get_browser_tools()
        second = manager.get_browser_tools()

        assert first is second
        assert manager.is_browser_open() is True
        playwright.chromium.launch.assert_called_once()
        assert playwright.chromium.launch.call_args.kwargs["headless"] is True

    def test_config_reaches_tools(self, playwright, tmp_path):
        config = AgentConfig(screenshots_dir=tmp_path, strict_verification=True, max_retries=2)
        tools = LazyBrowserManager(config).get_browser_tools()

        assert tools.strict_verification is True
        assert tools.max_retries == 2
        assert tools.screenshots_dir == tmp_path.resolve()

    def test_close_releases_in_reverse_order(self, manager, playwright):
        manager.get_browser_tools()
        browser = playwright.chromium.launch.return_value
        context = browser.new_context.return_value

        closed = []
        context.close.side_effect = lambda: closed.append("context")
        browser.close.side_effect = lambda: closed.append("browser")
        playwright.stop.side_effect = lambda: closed.append("playwright")

        manager.close()

        assert closed == ["context", "browser", "playwright"]
        assert manager.is_browser_open() is False

    def test_close_is_idempotent(self, manager, playwright):
        manager.get_browser_tools()
        manager.close()
        manager.close()

        playwright.stop.assert_called_once()

    def test_close_without_browser(self, manager, playwright):
        manager.close()
        playwright.stop.assert_not_called()

    def test_closed_manager_refuses_tools(self, manager):
        manager.close()
        with pytest.raises(RuntimeError, match="closed"):
            manager.get_browser_tools()

    def test_context_manager_closes(self, playwright, tmp_path):
        with LazyBrowserManager(AgentConfig(screenshots_dir=tmp_path)) as manager:
            manager.get_browser_tools()
        playwright.stop.assert_called_once()

    def test_failed_launch_releases_driver(self, tmp_path):
        with patch("webvision.browser_manager.sync_playwright") as sync_pw:
            playwright = sync_pw.return_value.start.return_value
            playwright.chromium.launch.side_effect = [
                Exception("Executable doesn't exist"),
                playwright.chromium.launch.return_value,
            ]
            manager = LazyBrowserManager(AgentConfig(screenshots_dir=tmp_path))

            with pytest.raises(Exception, match="Executable"):
                manager.get_browser_tools()

            playwright.stop.assert_called_once()
            assert manager.is_browser_open() is False

            tools = manager.get_browser_tools()

            assert tools is not None
            assert sync_pw.return_value.start.call_count == 2
            assert playwright.chromium.launch.call_count == 2
            assert manager.is_browser_open() is True
