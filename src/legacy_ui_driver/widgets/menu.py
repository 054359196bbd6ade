"""Navigation through menu bars that open on mouse events."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..actions.executor import ActionExecutor
from ..actions.strategies import StrategyFactory
from ..config import TimingConfig
from ..context.resolver import ContextResolver
from ..models import (
    ActionOutcome,
    ContentTarget,
    MenuStep,
    MenuStepMode,
    ModalOutcome,
    Resolution,
)
from ..sync.engine import SynchronizationEngine
from .modal import ModalHandler

LOGGER = logging.getLogger(__name__)


class HoverMenuNavigator:
    """Walk a legacy menu bar step by step.

    Menu entries react to ``onmouseover``/``onmouseup`` handlers rather than
    clicks, so hover steps call the inline handler or synthesise the pointer
    events, then force the submenu visible when asked to.
    """

    def __init__(
        self,
        sync: SynchronizationEngine,
        executor: ActionExecutor,
        strategies: StrategyFactory,
        resolver: ContextResolver,
        modal: ModalHandler,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._sync = sync
        self._executor = executor
        self._strategies = strategies
        self._resolver = resolver
        self._modal = modal
        self._timing = timing or sync.timing

    def navigate(self, steps: Sequence[MenuStep]) -> List[ActionOutcome]:
        if not steps:
            raise ValueError("A menu path needs at least one step")
        self._resolver.return_to_root()
        outcomes = []
        for step in steps:
            outcomes.append(self._run_step(step))
            if step.reveal is not None:
                self._executor.perform(
                    f"reveal {step.reveal}",
                    [self._strategies.reveal(step.reveal, settle=self._timing.menu_settle)],
                )
        return outcomes

    def open(self, steps: Sequence[MenuStep], target: ContentTarget) -> Resolution:
        """Navigate ``steps`` and enter the context where ``target`` renders."""

        self._resolver.return_to_root()
        self._resolver.mark_trigger()
        self.navigate(steps)
        resolution = self._resolver.resolve_after_navigation_trigger(target)
        report = self._modal.detect_and_dismiss()
        if report.outcome == ModalOutcome.DISMISSED:
            LOGGER.info("Dismissed %r after opening %s", report.title, target.name)
        return resolution

    def _run_step(self, step: MenuStep) -> ActionOutcome:
        settle = self._timing.menu_settle
        if step.mode == MenuStepMode.HOVER:
            attribute = step.handler_attribute or "onmouseover"
            strategies = [
                self._strategies.inline_handler(step.locator, attribute, settle=settle),
                self._strategies.synthetic_hover(step.locator, settle=settle),
                self._strategies.pointer_hover(step.locator, settle=settle),
            ]
            return self._executor.perform(f"hover {step.locator}", strategies)
        attribute = step.handler_attribute or "onmouseup"
        return self._executor.perform(
            f"click {step.locator}",
            self._strategies.menu_chain(step.locator, attribute, settle=settle),
        )
