"""Session object that owns one remote document and every component bound to it."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from .actions.executor import ActionExecutor
from .actions.instrumentation import ActionRecord, RecordingInstrumentation
from .actions.strategies import StrategyFactory
from .browser.base import BrowserSession, RemoteDocument
from .config import DriverConfig
from .context.resolver import ContextResolver
from .sync.engine import SynchronizationEngine
from .widgets.dropdown import CompositeDropdownAdapter
from .widgets.menu import HoverMenuNavigator
from .widgets.modal import ModalHandler
from .widgets.typeahead import TypeaheadAdapter

LOGGER = logging.getLogger(__name__)


class Session:
    """Wire the synchronisation, resolution, action and widget layers together.

    A session is passed explicitly to whatever drives the application; it is
    never shared between threads.
    """

    def __init__(
        self,
        document: RemoteDocument,
        config: Optional[DriverConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or DriverConfig()
        self.document = document
        timing = self.config.timing
        self._history = RecordingInstrumentation(max_entries=self.config.action_history_size)
        self.sync = SynchronizationEngine(document, timing, clock=clock, sleep=sleep)
        self.resolver = ContextResolver(document, self.sync, timing)
        self.strategies = StrategyFactory(document, self.sync, timing)
        self.executor = ActionExecutor(self.sync, instrumentation=self._history)
        self.typeahead = TypeaheadAdapter(
            document, self.sync, self.executor, self.strategies, self.config.typeahead, timing
        )
        self.dropdown = CompositeDropdownAdapter(
            document, self.sync, self.executor, self.strategies, self.config.dropdown, timing
        )
        self.modal = ModalHandler(
            document, self.sync, self.executor, self.strategies, self.config.modal, timing
        )
        self.menu = HoverMenuNavigator(
            self.sync, self.executor, self.strategies, self.resolver, self.modal, timing
        )

    def __enter__(self) -> "Session":
        if isinstance(self.document, BrowserSession):
            self.document.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if isinstance(self.document, BrowserSession):
            LOGGER.debug("Closing session")
            self.document.stop()

    def open(self, url: str) -> None:
        """Load ``url``, or a path relative to the configured base URL."""

        if not isinstance(self.document, BrowserSession):
            raise TypeError("Navigation needs a BrowserSession")
        base = self.config.browser.base_url
        if base and "://" not in url:
            url = f"{base.rstrip('/')}/{url.lstrip('/')}"
        self.document.navigate(url)
        self.sync.settle_after_load()

    def recent_actions(self) -> List[ActionRecord]:
        return self._history.records()
