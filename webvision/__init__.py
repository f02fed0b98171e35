"""
WebVision - An interactive terminal agent that drives a real browser.

Controls Chromium via Playwright and lets an OpenAI chat model pick
browser actions from a fixed tool palette to complete user tasks.
"""

__version__ = "0.1.0"
__author__ = "WebVision Contributors"
