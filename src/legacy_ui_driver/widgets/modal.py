"""Detection and dismissal of the application's modal confirmation overlay."""

from __future__ import annotations

import logging
from typing import Optional

from .. import scripts
from ..actions.executor import ActionExecutor
from ..actions.strategies import StrategyFactory
from ..browser.base import BrowserActionError, RemoteDocument, RemoteElement
from ..config import ModalConfig, TimingConfig
from ..errors import ActionExhausted, ModalDismissFailed, SynchronizationTimeout
from ..models import ElementLocator, ModalOutcome, ModalReport, ModalState
from ..sync.engine import SynchronizationEngine

LOGGER = logging.getLogger(__name__)


class ModalHandler:
    """Dismiss SweetAlert2-style overlays that block the page after saves."""

    def __init__(
        self,
        document: RemoteDocument,
        sync: SynchronizationEngine,
        executor: ActionExecutor,
        strategies: StrategyFactory,
        config: Optional[ModalConfig] = None,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._document = document
        self._sync = sync
        self._executor = executor
        self._strategies = strategies
        self._config = config or ModalConfig()
        self._timing = timing or sync.timing
        self._overlay = ElementLocator.css(self._config.overlay_css, description="modal overlay")
        self._confirm = ElementLocator.css(self._config.confirm_css, description="modal confirm")

    def detect(self, timeout: Optional[float] = None) -> ModalState:
        """Report whether an overlay is rendered within ``timeout`` seconds."""

        limit = self._timing.modal_detect_timeout if timeout is None else timeout
        try:
            self._sync.wait_until(
                self._rendered_overlay,
                limit,
                description="modal overlay",
            )
        except SynchronizationTimeout:
            LOGGER.debug("No modal overlay within %.2fs", limit)
            return ModalState.ABSENT
        return ModalState.VISIBLE

    def dismiss(self) -> None:
        """Confirm the overlay and wait for it to go away."""

        LOGGER.info("Dismissing modal overlay")
        try:
            self._sync.wait_for_element(
                self._confirm,
                interactable=True,
                timeout=self._timing.default_timeout,
            )
            self._executor.perform(
                "confirm modal",
                self._strategies.confirm_chain(
                    self._confirm, settle=self._timing.modal_click_settle
                ),
            )
            self._sync.wait_for_absence(self._overlay, timeout=self._timing.default_timeout)
        except (ActionExhausted, SynchronizationTimeout) as exc:
            LOGGER.error("Modal overlay could not be dismissed: %s", exc)
            raise ModalDismissFailed(
                f"Modal overlay still present: {exc}",
                details={"cause": exc.details, "url": self._safe_url()},
            ) from exc
        LOGGER.info("Modal overlay dismissed")

    def detect_and_dismiss(self, timeout: Optional[float] = None) -> ModalReport:
        """Dismiss an overlay if one shows up; otherwise do nothing."""

        if self.detect(timeout) == ModalState.ABSENT:
            return ModalReport(outcome=ModalOutcome.NOTHING_TO_DO)
        title = self._read_text(self._config.title_css)
        message = self._read_text(self._config.message_css)
        LOGGER.info("Modal overlay visible: title=%r message=%r", title, message)
        self.dismiss()
        return ModalReport(outcome=ModalOutcome.DISMISSED, title=title, message=message)

    def _rendered_overlay(self) -> Optional[RemoteElement]:
        element = self._document.find(self._overlay)
        if element is None or not element.is_displayed():
            return None
        if not self._document.execute_script(scripts.IS_RENDERED, element):
            return None
        return element

    def _read_text(self, css: str) -> Optional[str]:
        try:
            element = self._document.find(ElementLocator.css(css))
            return element.text() if element is not None else None
        except BrowserActionError as exc:
            LOGGER.debug("Could not read %s: %s", css, exc)
            return None

    def _safe_url(self) -> Optional[str]:
        try:
            return self._document.current_url()
        except BrowserActionError:
            return None
