"""Polling-based synchronisation primitives."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from .. import scripts
from ..browser.base import BrowserActionError, RemoteDocument, RemoteElement
from ..config import TimingConfig
from ..errors import SynchronizationTimeout
from ..models import ElementLocator

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SynchronizationEngine:
    """Decide when the remote document is in an actionable state.

    All waiting happens on the calling thread through bounded polling loops.
    """

    def __init__(
        self,
        document: RemoteDocument,
        timing: Optional[TimingConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        ignored_exceptions: Tuple[Type[BaseException], ...] = (BrowserActionError,),
    ) -> None:
        self._document = document
        self._timing = timing or TimingConfig()
        self._clock = clock
        self._sleep = sleep
        self._ignored = ignored_exceptions

    @property
    def timing(self) -> TimingConfig:
        return self._timing

    def wait_until(
        self,
        predicate: Callable[[], Optional[T]],
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        *,
        description: str = "condition",
        critical: bool = True,
    ) -> Optional[T]:
        """Poll ``predicate`` until it returns a truthy value.

        Lookup failures raised inside the predicate count as "not yet". On
        timeout a critical wait raises :class:`SynchronizationTimeout`; a
        non-critical one logs a warning and returns ``None``.
        """

        limit = self._timing.default_timeout if timeout is None else timeout
        interval = self._timing.poll_interval if poll_interval is None else poll_interval
        start = self._clock()
        deadline = start + limit
        last_error: Optional[BaseException] = None
        while True:
            try:
                result = predicate()
            except self._ignored as exc:
                last_error = exc
                result = None
            if result:
                return result
            now = self._clock()
            if now >= deadline:
                break
            self._sleep(min(interval, deadline - now))
        elapsed = self._clock() - start
        if critical:
            raise SynchronizationTimeout(description, limit, elapsed, last_error=last_error)
        LOGGER.warning(
            "Gave up waiting for %s after %.2fs; continuing", description, elapsed
        )
        return None

    def stabilize(self, seconds: float, reason: str) -> None:
        """Unconditional delay for states that expose no observable signal."""

        if seconds <= 0:
            return
        LOGGER.debug("Settling %.2fs: %s", seconds, reason)
        self._sleep(seconds)

    def document_ready(self, timeout: Optional[float] = None, *, critical: bool = False) -> bool:
        """Wait for ``document.readyState == 'complete'``."""

        limit = self._timing.document_ready_timeout if timeout is None else timeout
        result = self.wait_until(
            lambda: self._document.execute_script(scripts.READY_STATE) == "complete",
            limit,
            description="document ready",
            critical=critical,
        )
        return bool(result)

    def network_idle(self, timeout: Optional[float] = None, *, critical: bool = False) -> bool:
        """Wait for the page's active request counter to reach zero.

        Pages that do not expose the counter are treated as idle.
        """

        limit = self._timing.network_idle_timeout if timeout is None else timeout
        result = self.wait_until(
            self._is_network_idle,
            limit,
            description="pending requests to finish",
            critical=critical,
        )
        return bool(result)

    def settle_after_load(self, timeout: Optional[float] = None) -> None:
        """Best-effort wait for a freshly loaded context."""

        self.document_ready(timeout)
        self.network_idle(timeout)

    def wait_for_element(
        self,
        locator: ElementLocator,
        *,
        visible: bool = False,
        interactable: bool = False,
        timeout: Optional[float] = None,
        critical: bool = True,
    ) -> Optional[RemoteElement]:
        """Wait until ``locator`` resolves, optionally visible and enabled."""

        def _lookup() -> Optional[RemoteElement]:
            element = self._document.find(locator)
            if element is None:
                return None
            if (visible or interactable) and not element.is_displayed():
                return None
            if interactable and not element.is_enabled():
                return None
            return element

        qualifier = "interactable" if interactable else "visible" if visible else "present"
        return self.wait_until(
            _lookup,
            timeout,
            description=f"{locator} to be {qualifier}",
            critical=critical,
        )

    def wait_for_absence(
        self,
        locator: ElementLocator,
        *,
        timeout: Optional[float] = None,
        critical: bool = True,
    ) -> bool:
        """Wait until ``locator`` is missing or no longer displayed."""

        def _gone() -> bool:
            element = self._document.find(locator)
            return element is None or not element.is_displayed()

        result = self.wait_until(
            _gone,
            timeout,
            description=f"{locator} to disappear",
            critical=critical,
        )
        return bool(result)

    def _is_network_idle(self) -> bool:
        active = self._document.execute_script(scripts.ACTIVE_REQUESTS)
        if active is None:
            return True
        return int(active) == 0
