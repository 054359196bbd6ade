"""Playwright-powered remote document implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.sync_api import ElementHandle, Error, Frame, Page, sync_playwright

from ..config import BrowserConfig
from ..models import BrowsingContext, LocatorStrategy
from .. import scripts
from .base import BrowserActionError, BrowserSession, FrameTarget, RemoteElement

LOGGER = logging.getLogger(__name__)

# Runs a function body with ``arguments`` bound to the evaluate argument list.
_SCRIPT_WRAPPER = "(args) => (function () {{ {body} }}).apply(null, args)"


class PlaywrightElement(RemoteElement):
    """Remote element backed by a Playwright element handle."""

    def __init__(self, handle: ElementHandle) -> None:
        self.handle = handle

    def click(self, timeout: Optional[float] = None) -> None:
        try:
            self.handle.click(timeout=_to_timeout(timeout))
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def hover(self, timeout: Optional[float] = None) -> None:
        try:
            self.handle.hover(timeout=_to_timeout(timeout))
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def type_text(self, text: str) -> None:
        try:
            self.handle.type(text)
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def press(self, key: str) -> None:
        try:
            self.handle.press(key)
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def text(self) -> str:
        try:
            return self.handle.inner_text()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def attribute(self, name: str) -> Optional[str]:
        try:
            return self.handle.get_attribute(name)
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def value(self) -> Optional[str]:
        try:
            return self.handle.evaluate("el => (el.value === undefined ? null : el.value)")
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def is_displayed(self) -> bool:
        try:
            return self.handle.is_visible()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def is_enabled(self) -> bool:
        try:
            return self.handle.is_enabled()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc


class PlaywrightBrowserSession(BrowserSession):
    """Browser session backed by Playwright.

    The active browsing context is a page plus the chain of frames entered
    from its main frame. Window handles are stable labels handed out as
    pages open.
    """

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self._config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None
        self._pages: Dict[str, Page] = {}
        self._page_counter = 0
        self._active_handle: Optional[str] = None
        self._frame_chain: List[Frame] = []
        self._frame_path: List[int] = []

    def start(self) -> None:
        LOGGER.debug("Starting Playwright browser session")
        self._playwright = sync_playwright().start()
        launch_kwargs = {
            "headless": self._config.headless,
            "args": [
                "--no-sandbox",
                "--disable-dev-shm-usage",
                "--disable-gpu",
            ],
        }
        user_data_dir: Optional[Path] = self._config.profile_path
        viewport = {"width": self._config.viewport_width, "height": self._config.viewport_height}
        if user_data_dir:
            user_data_dir.mkdir(parents=True, exist_ok=True)
            self._context = self._playwright.chromium.launch_persistent_context(
                str(user_data_dir),
                **launch_kwargs,
                viewport=viewport,
            )
            pages = self._context.pages
            page = pages[0] if pages else self._context.new_page()
        else:
            self._browser = self._playwright.chromium.launch(**launch_kwargs)
            self._context = self._browser.new_context(viewport=viewport)
            page = self._context.new_page()
        for existing in self._context.pages:
            self._register_page(existing)
        self._context.on("page", self._register_page)
        self._activate(self._handle_for(page))

    def stop(self) -> None:
        LOGGER.debug("Stopping Playwright browser session")
        try:
            if self._context:
                self._context.close()
        finally:
            if self._browser:
                self._browser.close()
            if self._playwright:
                self._playwright.stop()
        self._context = None
        self._browser = None
        self._playwright = None
        self._pages.clear()
        self._active_handle = None
        self._frame_chain = []
        self._frame_path = []

    def navigate(self, url: str) -> None:
        page = self._page()
        LOGGER.info("Navigating to %s", url)
        try:
            page.goto(url, wait_until="load")
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        self.switch_to_root()

    def query(self, strategy: LocatorStrategy, selector: str) -> List[RemoteElement]:
        frame = self._frame()
        try:
            handles = frame.query_selector_all(_to_selector(strategy, selector))
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        return [PlaywrightElement(handle) for handle in handles]

    def execute_script(self, script: str, *args: Any) -> Any:
        frame = self._frame()
        arguments = [arg.handle if isinstance(arg, PlaywrightElement) else arg for arg in args]
        try:
            return frame.evaluate(_SCRIPT_WRAPPER.format(body=script), arguments)
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def window_handles(self) -> List[str]:
        return [handle for handle, page in self._pages.items() if not page.is_closed()]

    def current_window_handle(self) -> Optional[str]:
        return self._active_handle

    def switch_to_window(self, handle: str) -> None:
        page = self._pages.get(handle)
        if page is None or page.is_closed():
            raise BrowserActionError(f"No open window with handle {handle}")
        self._activate(handle)
        try:
            page.bring_to_front()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def switch_to_frame(self, target: FrameTarget) -> None:
        if isinstance(target, int):
            frames = self.query(LocatorStrategy.CSS, "iframe, frame")
            if target < 0 or target >= len(frames):
                raise BrowserActionError(f"No frame at index {target}")
            element = frames[target]
            index = target
        else:
            element = target
            index = int(self.execute_script(scripts.FRAME_INDEX, element))
        if not isinstance(element, PlaywrightElement):
            raise BrowserActionError("Frame target is not a Playwright element")
        try:
            frame = element.handle.content_frame()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        if frame is None:
            raise BrowserActionError("Element does not host a frame")
        self._frame_chain.append(frame)
        self._frame_path.append(index)

    def switch_to_root(self) -> None:
        self._frame_chain = []
        self._frame_path = []

    def current_context(self) -> BrowsingContext:
        return BrowsingContext(
            window_handle=self._active_handle,
            frame_path=tuple(self._frame_path),
        )

    def current_url(self) -> Optional[str]:
        return self._frame().url

    def title(self) -> Optional[str]:
        try:
            return self._frame().title()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def _register_page(self, page: Page) -> None:
        if any(existing is page for existing in self._pages.values()):
            return
        self._page_counter += 1
        handle = f"window-{self._page_counter}"
        self._pages[handle] = page
        LOGGER.debug("Registered window %s", handle)

    def _handle_for(self, page: Page) -> str:
        for handle, existing in self._pages.items():
            if existing is page:
                return handle
        self._register_page(page)
        return self._handle_for(page)

    def _activate(self, handle: str) -> None:
        self._active_handle = handle
        self.switch_to_root()

    def _page(self) -> Page:
        if not self._active_handle or self._active_handle not in self._pages:
            raise BrowserActionError("Browser session is not started")
        return self._pages[self._active_handle]

    def _frame(self) -> Frame:
        if self._frame_chain:
            frame = self._frame_chain[-1]
            if frame.is_detached():
                raise BrowserActionError("Active frame was detached")
            return frame
        return self._page().main_frame


def _to_selector(strategy: LocatorStrategy, selector: str) -> str:
    if strategy == LocatorStrategy.XPATH:
        return f"xpath={selector}"
    if strategy == LocatorStrategy.ID:
        return f"css=[id=\"{selector}\"]"
    return f"css={selector}"


def _to_timeout(timeout: Optional[float]) -> Optional[int]:
    if timeout is None:
        return None
    return int(timeout * 1000)
