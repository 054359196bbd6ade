"""Typed failures raised by the interaction core."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from .models import ContextDiagnostics, StrategyFailure


class DriverError(RuntimeError):
    """Base class for failures that carry structured context."""

    def __init__(self, message: str, *, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class SynchronizationTimeout(DriverError):
    """A bounded wait elapsed before its condition held."""

    def __init__(
        self,
        description: str,
        timeout: float,
        elapsed: float,
        *,
        last_error: Optional[BaseException] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        message = f"Timed out after {elapsed:.2f}s (limit {timeout:.2f}s) waiting for {description}"
        if last_error is not None:
            message += f"; last error: {last_error}"
        super().__init__(message, details=details)
        self.description = description
        self.timeout = timeout
        self.elapsed = elapsed
        self.last_error = last_error


class ContextResolutionFailed(DriverError):
    """No browsing context satisfied the anchor check."""

    def __init__(self, message: str, diagnostics: ContextDiagnostics) -> None:
        super().__init__(message, details=diagnostics.model_dump(mode="json"))
        self.diagnostics = diagnostics


class ActionExhausted(DriverError):
    """Every physical strategy of a logical action failed."""

    def __init__(self, action: str, failures: Iterable[StrategyFailure]) -> None:
        self.action = action
        self.failures = list(failures)
        summary = "; ".join(
            f"{failure.strategy}: {failure.error_type}: {failure.message}"
            for failure in self.failures
        )
        super().__init__(
            f"All {len(self.failures)} strategies failed for {action}: {summary}",
            details={"failures": [failure.model_dump() for failure in self.failures]},
        )


class ModalDismissFailed(DriverError):
    """A visible modal overlay could not be dismissed."""


class ValidationFailed(DriverError):
    """A post-action state check did not hold."""

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        merged = {"expected": expected, "actual": actual, **dict(details or {})}
        super().__init__(message, details=merged)
        self.expected = expected
        self.actual = actual
