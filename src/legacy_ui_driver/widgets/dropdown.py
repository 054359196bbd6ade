"""Driver for Select2-style composite dropdowns."""

from __future__ import annotations

import logging
from typing import Optional

from .. import scripts
from ..actions.executor import ActionExecutor, Strategy
from ..actions.strategies import StrategyFactory
from ..browser.base import BrowserActionError, RemoteDocument, RemoteElement
from ..config import DropdownConfig, TimingConfig
from ..errors import ValidationFailed
from ..models import DropdownMode, DropdownSelection, ElementLocator
from ..sync.engine import SynchronizationEngine

LOGGER = logging.getLogger(__name__)


class CompositeDropdownAdapter:
    """Select options of a styled container that shadows a hidden ``<select>``."""

    def __init__(
        self,
        document: RemoteDocument,
        sync: SynchronizationEngine,
        executor: ActionExecutor,
        strategies: StrategyFactory,
        config: Optional[DropdownConfig] = None,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._document = document
        self._sync = sync
        self._executor = executor
        self._strategies = strategies
        self._config = config or DropdownConfig()
        self._timing = timing or sync.timing

    def select_option(
        self,
        control_id: str,
        text: Optional[str] = None,
        value: Optional[str] = None,
    ) -> DropdownSelection:
        """Select by visible ``text`` through the widget, or by ``value`` directly."""

        if (text is None) == (value is None):
            raise ValueError("Pass exactly one of text or value")
        if value is not None:
            return self._select_by_value(control_id, value)
        return self._select_by_text(control_id, text)

    def select_option_direct(self, control_id: str, text: str) -> DropdownSelection:
        """Pick the underlying option by its text without opening the widget."""

        underlying = self._underlying(control_id)
        self._sync.wait_for_element(underlying, timeout=self._timing.default_timeout)
        chosen = self._document.execute_script(
            scripts.SELECT_BY_OPTION_TEXT, self._strategies.resolve(underlying), text
        )
        if chosen is None:
            available = self._document.execute_script(
                scripts.LIST_OPTION_TEXTS, self._strategies.resolve(underlying)
            )
            raise ValidationFailed(
                f"{control_id} has no option matching {text!r}",
                expected=text,
                details={"available": list(available or [])},
            )
        self._sync.stabilize(self._timing.dropdown_selection_settle, f"{control_id} change")
        self._sync.network_idle()
        LOGGER.info("Selected %r (value %r) on %s directly", text, chosen, control_id)
        return DropdownSelection(
            control_id=control_id,
            mode=DropdownMode.DIRECT,
            value=str(chosen),
            displayed_text=self._read_display(control_id),
        )

    def _select_by_text(self, control_id: str, text: str) -> DropdownSelection:
        LOGGER.info("Selecting %r on %s", text, control_id)
        self._sync.wait_for_element(
            self._underlying(control_id), timeout=self._timing.default_timeout
        )
        container = ElementLocator.id(
            f"{self._config.container_prefix}{control_id}",
            description=f"{control_id} dropdown container",
        )
        self._sync.wait_for_element(
            container, visible=True, timeout=self._timing.default_timeout
        )
        self._strategies.scroll_into_view(container)
        self._executor.perform(
            f"open {control_id}",
            [
                self._strategies.native_click(container, settle=self._timing.dropdown_open_settle),
                self._strategies.script_click(container, settle=self._timing.dropdown_open_settle),
            ],
        )
        self._sync.stabilize(self._timing.dropdown_render_delay, "option list render")

        rows = ElementLocator.css(self._config.option_rows_css, description="dropdown option")
        self._sync.wait_for_element(
            rows, visible=True, timeout=self._timing.default_timeout, critical=False
        )
        self._sync.wait_until(
            lambda: self._option_row(rows, text),
            self._timing.default_timeout,
            description=f"option {text!r} in {control_id}",
        )
        self._executor.perform(
            f"pick {text!r} in {control_id}",
            [
                Strategy(
                    name="native-click",
                    attempt=lambda timeout: self._require_row(rows, text).click(timeout=timeout),
                    timeout=self._timing.strategy_timeout,
                    settle=self._timing.dropdown_selection_settle,
                ),
                Strategy(
                    name="script-click",
                    attempt=lambda timeout: self._document.execute_script(
                        scripts.CLICK, self._require_row(rows, text)
                    ),
                    timeout=self._timing.strategy_timeout,
                    settle=self._timing.dropdown_selection_settle,
                ),
            ],
        )
        self._sync.network_idle()
        return self._validate_text(control_id, text)

    def _select_by_value(self, control_id: str, value: str) -> DropdownSelection:
        LOGGER.info("Setting %s to value %r", control_id, value)
        underlying = self._underlying(control_id)
        self._sync.wait_for_element(underlying, timeout=self._timing.default_timeout)
        label = self._document.execute_script(
            scripts.SET_SELECT_VALUE, self._strategies.resolve(underlying), value
        )
        if label is None:
            raise ValidationFailed(
                f"{control_id} has no option with value {value!r}",
                expected=value,
            )
        display = self._document.find(self._display(control_id))
        if display is not None:
            self._document.execute_script(scripts.SET_TEXT, display, label)
        self._sync.stabilize(self._timing.dropdown_selection_settle, f"{control_id} change")
        self._sync.network_idle()
        return DropdownSelection(
            control_id=control_id,
            mode=DropdownMode.VALUE,
            value=value,
            displayed_text=label,
        )

    def _option_row(self, rows: ElementLocator, text: str) -> Optional[RemoteElement]:
        candidates = self._document.find_all(rows.with_text(text))
        for element in candidates:
            if element.text().strip() == text:
                return element
        return candidates[0] if candidates else None

    def _require_row(self, rows: ElementLocator, text: str) -> RemoteElement:
        element = self._option_row(rows, text)
        if element is None:
            raise BrowserActionError(f"option {text!r} not found")
        return element

    def _validate_text(self, control_id: str, text: str) -> DropdownSelection:
        displayed = self._read_display(control_id)
        if displayed is None:
            value = self._read_value(control_id)
            if not value:
                raise ValidationFailed(
                    f"{control_id} has no selection after picking {text!r}",
                    expected=text,
                    actual=value,
                )
            LOGGER.info("%s display unreadable; underlying value is %r", control_id, value)
            return DropdownSelection(control_id=control_id, mode=DropdownMode.TEXT, value=value)
        if not displayed:
            raise ValidationFailed(
                f"{control_id} shows nothing after picking {text!r}",
                expected=text,
                actual=displayed,
            )
        if text not in displayed:
            LOGGER.warning("%s shows %r instead of %r", control_id, displayed, text)
        return DropdownSelection(
            control_id=control_id,
            mode=DropdownMode.TEXT,
            value=self._read_value(control_id),
            displayed_text=displayed,
        )

    def _read_display(self, control_id: str) -> Optional[str]:
        try:
            element = self._document.find(self._display(control_id))
            return element.text().strip() if element is not None else None
        except BrowserActionError as exc:
            LOGGER.debug("Could not read %s display: %s", control_id, exc)
            return None

    def _read_value(self, control_id: str) -> Optional[str]:
        try:
            element = self._document.find(self._underlying(control_id))
            return element.value() if element is not None else None
        except BrowserActionError as exc:
            LOGGER.debug("Could not read %s value: %s", control_id, exc)
            return None

    def _underlying(self, control_id: str) -> ElementLocator:
        return ElementLocator.id(control_id, description=f"{control_id} select")

    def _display(self, control_id: str) -> ElementLocator:
        return ElementLocator.css(
            f"#{self._config.container_prefix}{control_id} {self._config.display_css}",
            description=f"{control_id} displayed choice",
        )
