"""Hooks for recording what the action executor attempted."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional, Protocol, Sequence

from ..models import ActionOutcome, StrategyFailure

LOGGER = logging.getLogger(__name__)


class ActionInstrumentation(Protocol):
    """Protocol for receiving action executor callbacks."""

    def on_attempt_failed(self, action: str, failure: StrategyFailure) -> None:
        """Record that one strategy of ``action`` raised."""

    def on_action_performed(self, outcome: ActionOutcome) -> None:
        """Record that ``action`` completed through one of its strategies."""

    def on_action_exhausted(self, action: str, failures: Sequence[StrategyFailure]) -> None:
        """Record that every strategy of ``action`` failed."""


@dataclass
class NullInstrumentation:
    """No-op implementation used when no recorder is configured."""

    def on_attempt_failed(self, action: str, failure: StrategyFailure) -> None:  # noqa: D401
        return

    def on_action_performed(self, outcome: ActionOutcome) -> None:  # noqa: D401
        return

    def on_action_exhausted(
        self, action: str, failures: Sequence[StrategyFailure]
    ) -> None:  # noqa: D401
        return


@dataclass
class ActionRecord:
    """One logical action as seen by the executor."""

    action: str
    succeeded: bool
    strategy: Optional[str] = None
    failures: List[StrategyFailure] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RecordingInstrumentation:
    """Keep a bounded history of executed actions for diagnostics."""

    def __init__(self, max_entries: int = 50) -> None:
        self._records: Deque[ActionRecord] = deque(maxlen=max(1, max_entries))

    def on_attempt_failed(self, action: str, failure: StrategyFailure) -> None:
        LOGGER.debug("%s: strategy %s failed: %s", action, failure.strategy, failure.message)

    def on_action_performed(self, outcome: ActionOutcome) -> None:
        self._records.append(
            ActionRecord(
                action=outcome.action,
                succeeded=True,
                strategy=outcome.strategy,
                failures=list(outcome.failures),
            )
        )

    def on_action_exhausted(self, action: str, failures: Sequence[StrategyFailure]) -> None:
        self._records.append(ActionRecord(action=action, succeeded=False, failures=list(failures)))

    def records(self) -> List[ActionRecord]:
        return list(self._records)
