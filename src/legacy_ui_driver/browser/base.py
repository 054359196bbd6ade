"""Remote document abstractions consumed by the interaction core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Union

from ..models import BrowsingContext, ElementLocator, LocatorStrategy


class BrowserActionError(RuntimeError):
    """Raised when a lookup or a physical interaction fails."""


class RemoteElement(ABC):
    """Handle to an element of the active browsing context.

    Handles are short-lived: callers resolve them from an
    :class:`ElementLocator` immediately before use and drop them afterwards.
    """

    @abstractmethod
    def click(self, timeout: Optional[float] = None) -> None:
        """Deliver a native click."""

    @abstractmethod
    def hover(self, timeout: Optional[float] = None) -> None:
        """Move the pointer over the element."""

    @abstractmethod
    def type_text(self, text: str) -> None:
        """Send ``text`` as keystrokes."""

    @abstractmethod
    def press(self, key: str) -> None:
        """Press a named key such as ``Enter`` or ``Tab``."""

    @abstractmethod
    def text(self) -> str:
        """Return the rendered text."""

    @abstractmethod
    def attribute(self, name: str) -> Optional[str]:
        """Return an attribute value or ``None``."""

    @abstractmethod
    def value(self) -> Optional[str]:
        """Return the current form value."""

    @abstractmethod
    def is_displayed(self) -> bool:
        """Whether the element is rendered visibly."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether the element accepts interaction."""


FrameTarget = Union[RemoteElement, int]


class RemoteDocument(ABC):
    """Capability set of a live browsing session.

    Every lookup and script runs against the single active browsing context.
    """

    @abstractmethod
    def query(self, strategy: LocatorStrategy, selector: str) -> List[RemoteElement]:
        """Return all raw matches for a selector in DOM order."""

    def find_all(self, locator: ElementLocator) -> List[RemoteElement]:
        elements = self.query(locator.strategy, locator.selector)
        if locator.text is None:
            return elements
        matches = []
        for element in elements:
            try:
                if locator.text in element.text():
                    matches.append(element)
            except BrowserActionError:
                continue
        return matches

    def find(self, locator: ElementLocator) -> Optional[RemoteElement]:
        elements = self.find_all(locator)
        return elements[0] if elements else None

    @abstractmethod
    def execute_script(self, script: str, *args: Any) -> Any:
        """Run a function body with ``arguments`` bound to ``args``."""

    @abstractmethod
    def window_handles(self) -> List[str]:
        """Return handles of all open windows."""

    @abstractmethod
    def current_window_handle(self) -> Optional[str]:
        """Return the handle of the active window."""

    @abstractmethod
    def switch_to_window(self, handle: str) -> None:
        """Activate the root context of another window."""

    @abstractmethod
    def switch_to_frame(self, target: FrameTarget) -> None:
        """Enter a child frame of the active context."""

    @abstractmethod
    def switch_to_root(self) -> None:
        """Return to the top-level document of the active window."""

    @abstractmethod
    def current_context(self) -> BrowsingContext:
        """Return the coordinate of the active context."""

    @abstractmethod
    def current_url(self) -> Optional[str]:
        """Return the URL of the active context."""

    @abstractmethod
    def title(self) -> Optional[str]:
        """Return the document title of the active context."""


class BrowserSession(RemoteDocument):
    """Remote document with a lifecycle, owned by a :class:`Session`."""

    @abstractmethod
    def start(self) -> None:
        """Launch the browser session."""

    @abstractmethod
    def stop(self) -> None:
        """Terminate the browser session."""

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Load ``url`` in the active window."""
