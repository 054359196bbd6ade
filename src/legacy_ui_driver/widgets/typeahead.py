"""Type-and-pick driver for server-generated suggestion lists."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .. import scripts
from ..actions.executor import ActionExecutor
from ..actions.strategies import StrategyFactory
from ..browser.base import BrowserActionError, RemoteDocument
from ..config import FieldPolicy, TimingConfig, TypeaheadConfig
from ..errors import SynchronizationTimeout, ValidationFailed
from ..models import ElementLocator, SuggestionSelection
from ..sync.engine import SynchronizationEngine

LOGGER = logging.getLogger(__name__)


class TypeaheadAdapter:
    """Fill a typeahead field by typing a prefix and picking a suggestion row.

    The suggestion feature only reacts to real keystrokes, and a raw click on
    a row often fails to populate the field, so the row's own inline handler
    is tried first.
    """

    def __init__(
        self,
        document: RemoteDocument,
        sync: SynchronizationEngine,
        executor: ActionExecutor,
        strategies: StrategyFactory,
        config: Optional[TypeaheadConfig] = None,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._document = document
        self._sync = sync
        self._executor = executor
        self._strategies = strategies
        self._config = config or TypeaheadConfig()
        self._timing = timing or sync.timing

    def select_suggestion(
        self,
        field: ElementLocator,
        typed_prefix: str,
        expected_full_text: str,
    ) -> SuggestionSelection:
        LOGGER.info("Selecting %r in %s (typing %r)", expected_full_text, field, typed_prefix)
        element = self._sync.wait_for_element(
            field, interactable=True, timeout=self._timing.default_timeout
        )
        current = element.value() or ""
        if expected_full_text in current:
            LOGGER.info("%s already holds %r", field, current)
            return SuggestionSelection(
                field=str(field),
                value=current,
                match_count=0,
                already_filled=True,
            )

        self._prepare_field(field)
        self._type_slowly(field, typed_prefix)
        candidates = self._await_matching_rows(field, typed_prefix, expected_full_text)
        if len(candidates) > 1:
            LOGGER.warning(
                "%d suggestion rows contain %r; picking the first in document order: %s",
                len(candidates),
                expected_full_text,
                candidates,
            )

        row = self._config.suggestion_rows.with_text(expected_full_text)
        self._executor.perform(
            f"select suggestion {expected_full_text!r}",
            self._strategies.handler_first_chain(row, "onclick", settle=self._timing.click_settle),
        )

        policy = self.policy_for(field)
        if policy.fire_completion:
            self._fire_completion_events(field, policy)
        else:
            LOGGER.info("Not firing completion events for %s; it clears itself on blur", field)
            self._sync.network_idle()

        value, exact = self._validate(field, typed_prefix, expected_full_text)
        return SuggestionSelection(
            field=str(field),
            value=value,
            match_count=len(candidates),
            candidates=candidates,
            completion_fired=policy.fire_completion,
            exact=exact,
        )

    def policy_for(self, field: ElementLocator) -> FieldPolicy:
        """Return the completion policy configured for ``field``."""

        selector = field.selector.lower()
        for policy in self._config.field_policies:
            if policy.match.lower() in selector:
                return policy
        return FieldPolicy(match="*", fire_completion=self._config.fire_completion_by_default)

    def _prepare_field(self, field: ElementLocator) -> None:
        # Key-based deletion would trigger the field's partial-state handlers.
        self._document.execute_script(scripts.RESET_VALUE, self._strategies.resolve(field))
        self._sync.stabilize(self._timing.field_prepare_settle, "field value reset")
        self._executor.perform(
            f"focus {field}",
            [
                self._strategies.native_click(field, settle=self._timing.field_prepare_settle),
                self._strategies.script_click(field, settle=self._timing.field_prepare_settle),
            ],
        )

    def _type_slowly(self, field: ElementLocator, text: str) -> None:
        for char in text:
            self._strategies.resolve(field).type_text(char)
            self._sync.stabilize(self._timing.keystroke_delay, "keystroke-driven suggestions")
        LOGGER.debug("Typed %d characters into %s", len(text), field)

    def _await_matching_rows(
        self, field: ElementLocator, typed_prefix: str, expected: str
    ) -> List[str]:
        self._sync.stabilize(self._timing.suggestion_render_delay, "suggestion list render")
        self._sync.wait_for_element(
            self._config.suggestion_rows,
            timeout=self._timing.default_timeout,
            critical=False,
        )
        try:
            found = self._sync.wait_until(
                lambda: self._row_texts(expected),
                self._timing.default_timeout,
                description=f"a suggestion containing {expected!r}",
            )
        except SynchronizationTimeout as exc:
            available = self._row_texts(None)
            LOGGER.error(
                "No suggestion for %r after typing %r into %s; visible rows: %s",
                expected,
                typed_prefix,
                field,
                available,
            )
            raise SynchronizationTimeout(
                exc.description,
                exc.timeout,
                exc.elapsed,
                last_error=exc.last_error,
                details={"typed": typed_prefix, "expected": expected, "available": available},
            ) from exc
        return found or []

    def _row_texts(self, containing: Optional[str]) -> List[str]:
        rows = self._config.suggestion_rows
        if containing is not None:
            rows = rows.with_text(containing)
        texts = []
        for element in self._document.find_all(rows):
            try:
                texts.append(element.text().strip())
            except BrowserActionError:
                continue
        return texts

    def _fire_completion_events(self, field: ElementLocator, policy: FieldPolicy) -> None:
        """Signal the field's dependent fetch; each signal is best effort."""

        LOGGER.info("Firing completion events for %s", field)
        for event in ("change", "blur"):
            self._best_effort(
                f"{event} event",
                lambda event=event: self._document.execute_script(
                    scripts.DISPATCH_EVENT, self._strategies.resolve(field), event
                ),
            )
            self._sync.stabilize(self._timing.completion_event_settle, f"{event} handlers")
        if policy.hook_script:
            hook = policy.hook_script
            self._best_effort(
                "completion hook",
                lambda: self._document.execute_script(hook, self._strategies.resolve(field)),
            )
            self._sync.stabilize(self._timing.completion_event_settle, "completion hook")
        self._best_effort("tab key", lambda: self._strategies.resolve(field).press("Tab"))
        self._sync.stabilize(self._timing.completion_fetch_delay, "dependent data fetch")
        self._sync.network_idle()

    def _best_effort(self, label: str, call: Callable[[], object]) -> None:
        try:
            call()
        except BrowserActionError as exc:
            LOGGER.warning("Could not fire %s: %s", label, exc)

    def _validate(
        self, field: ElementLocator, typed_prefix: str, expected: str
    ) -> tuple[str, bool]:
        element = self._sync.wait_for_element(field, timeout=self._timing.default_timeout)
        value = (element.value() or "").strip()
        if not value:
            raise ValidationFailed(
                f"{field} is empty after selecting a suggestion",
                expected=expected,
                actual=value,
            )
        upper_value, upper_expected = value.upper(), expected.upper()
        if value == typed_prefix and upper_value != upper_expected:
            raise ValidationFailed(
                f"{field} still holds the typed prefix; the selection did not apply",
                expected=expected,
                actual=value,
            )
        if upper_expected in upper_value:
            LOGGER.info("%s holds %r", field, value)
            return value, True
        if upper_value in upper_expected:
            LOGGER.warning("%s holds %r, only part of %r", field, value, expected)
            return value, False
        raise ValidationFailed(
            f"{field} holds {value!r}, which does not overlap {expected!r}",
            expected=expected,
            actual=value,
        )
