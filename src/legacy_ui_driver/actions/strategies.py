"""Physical strategies and the canned chains built from them."""

from __future__ import annotations

import logging
from typing import List, Optional

from .. import scripts
from ..browser.base import BrowserActionError, RemoteDocument, RemoteElement
from ..config import TimingConfig
from ..models import ElementLocator
from ..sync.engine import SynchronizationEngine
from .executor import Strategy

LOGGER = logging.getLogger(__name__)


class StrategyFactory:
    """Build strategies that resolve their locator again on every attempt."""

    def __init__(
        self,
        document: RemoteDocument,
        sync: SynchronizationEngine,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._document = document
        self._sync = sync
        self._timing = timing or sync.timing

    def resolve(self, locator: ElementLocator) -> RemoteElement:
        element = self._document.find(locator)
        if element is None:
            LOGGER.debug("Lookup of %s returned nothing", locator)
            raise BrowserActionError(f"{locator} not found")
        return element

    def scroll_into_view(self, locator: ElementLocator) -> None:
        self._document.execute_script(scripts.SCROLL_INTO_VIEW, self.resolve(locator))

    def native_click(self, locator: ElementLocator, *, settle: Optional[float] = None) -> Strategy:
        def _attempt(timeout: float) -> None:
            self.resolve(locator).click(timeout=timeout)

        return self._strategy("native-click", _attempt, settle)

    def script_click(self, locator: ElementLocator, *, settle: Optional[float] = None) -> Strategy:
        def _attempt(timeout: float) -> None:
            self._document.execute_script(scripts.CLICK, self.resolve(locator))

        return self._strategy("script-click", _attempt, settle)

    def hover_then_click(
        self, locator: ElementLocator, *, settle: Optional[float] = None
    ) -> Strategy:
        def _attempt(timeout: float) -> None:
            self._document.execute_script(scripts.SCROLL_INTO_VIEW, self.resolve(locator))
            self.resolve(locator).hover(timeout=timeout)
            self._sync.stabilize(self._timing.hover_settle, f"hover over {locator}")
            self.resolve(locator).click(timeout=timeout)

        return self._strategy("hover-then-click", _attempt, settle)

    def synthetic_hover(
        self, locator: ElementLocator, *, settle: Optional[float] = None
    ) -> Strategy:
        def _attempt(timeout: float) -> None:
            self._document.execute_script(scripts.SYNTHETIC_HOVER, self.resolve(locator))

        return self._strategy("synthetic-hover", _attempt, settle)

    def pointer_hover(self, locator: ElementLocator, *, settle: Optional[float] = None) -> Strategy:
        def _attempt(timeout: float) -> None:
            self.resolve(locator).hover(timeout=timeout)

        return self._strategy("pointer-hover", _attempt, settle)

    def inline_handler(
        self,
        locator: ElementLocator,
        attribute: str = "onclick",
        *,
        settle: Optional[float] = None,
    ) -> Strategy:
        """Run the element's own inline event handler in the element's scope."""

        def _attempt(timeout: float) -> None:
            self._document.execute_script(
                scripts.INVOKE_INLINE_HANDLER, self.resolve(locator), attribute
            )

        return self._strategy(f"inline-{attribute}", _attempt, settle)

    def key_press(
        self, locator: ElementLocator, key: str, *, settle: Optional[float] = None
    ) -> Strategy:
        def _attempt(timeout: float) -> None:
            self.resolve(locator).press(key)

        return self._strategy(f"key-{key.lower()}", _attempt, settle)

    def reveal(self, container: ElementLocator, *, settle: Optional[float] = None) -> Strategy:
        """Force a hover-driven container visible when no event opens it."""

        def _attempt(timeout: float) -> None:
            self._document.execute_script(scripts.FORCE_VISIBLE, self.resolve(container))

        return self._strategy("force-visible", _attempt, settle)

    def click_chain(
        self, locator: ElementLocator, *, settle: Optional[float] = None
    ) -> List[Strategy]:
        return [
            self.native_click(locator, settle=settle),
            self.script_click(locator, settle=settle),
            self.hover_then_click(locator, settle=settle),
        ]

    def handler_first_chain(
        self,
        locator: ElementLocator,
        attribute: str = "onclick",
        *,
        settle: Optional[float] = None,
    ) -> List[Strategy]:
        """Chain for rows whose inline handler does the real work."""

        return [
            self.inline_handler(locator, attribute, settle=settle),
            self.hover_then_click(locator, settle=settle),
            self.native_click(locator, settle=settle),
            self.script_click(locator, settle=settle),
        ]

    def menu_chain(
        self,
        locator: ElementLocator,
        attribute: str = "onmouseup",
        *,
        settle: Optional[float] = None,
    ) -> List[Strategy]:
        return [
            self.native_click(locator, settle=settle),
            self.script_click(locator, settle=settle),
            self.inline_handler(locator, attribute, settle=settle),
            self.hover_then_click(locator, settle=settle),
        ]

    def confirm_chain(
        self, locator: ElementLocator, *, settle: Optional[float] = None
    ) -> List[Strategy]:
        return [
            self.native_click(locator, settle=settle),
            self.script_click(locator, settle=settle),
            self.key_press(locator, "Enter", settle=settle),
        ]

    def _strategy(self, name: str, attempt, settle: Optional[float]) -> Strategy:
        return Strategy(
            name=name,
            attempt=attempt,
            timeout=self._timing.strategy_timeout,
            settle=self._timing.click_settle if settle is None else settle,
        )
