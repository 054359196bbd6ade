"""Execute a logical action through an ordered chain of physical strategies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..errors import ActionExhausted
from ..models import ActionOutcome, StrategyFailure
from ..sync.engine import SynchronizationEngine
from .instrumentation import ActionInstrumentation, NullInstrumentation

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """One self-contained physical technique for realising a logical action.

    ``attempt`` receives the strategy's own timeout and signals failure by
    raising. ``settle`` is waited only after a successful attempt.
    """

    name: str
    attempt: Callable[[float], object]
    timeout: float = 5.0
    settle: float = 0.0
    settle_reason: str = ""


class ActionExecutor:
    """Try strategies strictly in order and stop at the first that completes.

    No check is made that the business effect happened; callers verify side
    effects through the synchronisation engine.
    """

    def __init__(
        self,
        sync: SynchronizationEngine,
        *,
        instrumentation: Optional[ActionInstrumentation] = None,
    ) -> None:
        self._sync = sync
        self._instrumentation = instrumentation or NullInstrumentation()

    def perform(self, action: str, strategies: Sequence[Strategy]) -> ActionOutcome:
        if not strategies:
            raise ValueError(f"No strategies given for {action}")
        failures: List[StrategyFailure] = []
        for attempt, strategy in enumerate(strategies, start=1):
            LOGGER.debug("%s: trying %s (%d/%d)", action, strategy.name, attempt, len(strategies))
            try:
                strategy.attempt(strategy.timeout)
            except Exception as exc:  # each technique fails in its own way
                failure = StrategyFailure(
                    strategy=strategy.name,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
                failures.append(failure)
                LOGGER.debug("%s: %s failed: %s", action, strategy.name, exc)
                self._instrumentation.on_attempt_failed(action, failure)
                continue
            self._sync.stabilize(
                strategy.settle,
                strategy.settle_reason or f"{action} via {strategy.name}",
            )
            outcome = ActionOutcome(
                action=action,
                strategy=strategy.name,
                attempt=attempt,
                failures=failures,
            )
            LOGGER.info("%s done via %s", action, strategy.name)
            self._instrumentation.on_action_performed(outcome)
            return outcome
        LOGGER.error("%s: all %d strategies failed", action, len(failures))
        self._instrumentation.on_action_exhausted(action, failures)
        raise ActionExhausted(action, failures)
