"""Factories for constructing components from configuration."""

from __future__ import annotations

from .browser.playwright_session import PlaywrightBrowserSession
from .config import BrowserConfig, DriverConfig
from .session import Session


def build_browser(config: BrowserConfig) -> PlaywrightBrowserSession:
    return PlaywrightBrowserSession(config)


def build_session(config: DriverConfig) -> Session:
    return Session(build_browser(config.browser), config)
