"""Per-call metrics collected from lifecycle events."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pytest_bastion.events.base import BastionListener

if TYPE_CHECKING:
    from pytest_bastion.events.base import (
        BastionErrorEvent,
        BastionFailedEvent,
        BastionFinishedEvent,
        BastionStartedEvent,
    )
    from pytest_bastion.events.listeners import Outcome


@dataclass
class CallMetrics:
    """Outcome and timing of a single Bastion call.

    Attributes:
        descriptive_text: The text carried by the call's events.
        outcome: ``"passed"``, ``"failed"`` or ``"error"``.
        status_code: Response status code, if a model response was built.
        elapsed_ms: Time from the started to the finished event.
        error: Message of the failure or error cause, if any.
    """

    descriptive_text: str
    outcome: Outcome
    status_code: int | None = None
    elapsed_ms: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "descriptive_text": self.descriptive_text,
            "outcome": self.outcome,
            "status_code": self.status_code,
            "elapsed_ms": round(self.elapsed_ms, 2),
            "error": self.error,
        }


@dataclass
class RunMetrics:
    """Aggregate metrics across all recorded calls."""

    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    calls: list[CallMetrics] = field(default_factory=list)

    def record(self, call: CallMetrics) -> None:
        self.calls.append(call)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for c in self.calls if c.outcome == outcome)

    @property
    def total_calls(self) -> int:
        return len(self.calls)

    @property
    def passed_calls(self) -> int:
        return self._count("passed")

    @property
    def failed_calls(self) -> int:
        return self._count("failed")

    @property
    def errored_calls(self) -> int:
        return self._count("error")

    @property
    def success_rate(self) -> float:
        """Percentage of calls that passed."""
        if not self.calls:
            return 0.0
        return (self.passed_calls / self.total_calls) * 100

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return time.time() - self.start_time
        return self.end_time - self.start_time

    def finish(self) -> None:
        """Mark the run as finished."""
        self.end_time = time.time()

    def summary(self) -> str:
        return (
            f"{self.total_calls} calls: {self.passed_calls} passed, "
            f"{self.failed_calls} failed, {self.errored_calls} errored"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": round(self.duration_seconds, 2),
            "total_calls": self.total_calls,
            "passed_calls": self.passed_calls,
            "failed_calls": self.failed_calls,
            "errored_calls": self.errored_calls,
            "success_rate": round(self.success_rate, 1),
            "calls": [c.to_dict() for c in self.calls],
        }

    def write_json(self, path: str | Path) -> Path:
        """Write the metrics as JSON, creating parent directories.

        Returns:
            The path written to.
        """
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        return output


class MetricsListener(BastionListener):
    """Records one ``CallMetrics`` per finished call into a ``RunMetrics``."""

    def __init__(self, run_metrics: RunMetrics | None = None) -> None:
        self.run_metrics = run_metrics if run_metrics is not None else RunMetrics()
        self._started_at: float | None = None
        self._outcome: Outcome = "passed"
        self._error: str | None = None

    def call_started(self, event: BastionStartedEvent) -> None:
        self._started_at = time.perf_counter()
        self._outcome = "passed"
        self._error = None

    def call_failed(self, event: BastionFailedEvent) -> None:
        self._outcome = "failed"
        self._error = str(event.cause)

    def call_error(self, event: BastionErrorEvent) -> None:
        self._outcome = "error"
        self._error = f"{type(event.cause).__name__}: {event.cause}"

    def call_finished(self, event: BastionFinishedEvent) -> None:
        elapsed_ms = 0.0
        if self._started_at is not None:
            elapsed_ms = (time.perf_counter() - self._started_at) * 1000
        self.run_metrics.record(
            CallMetrics(
                descriptive_text=event.descriptive_text,
                outcome=self._outcome,
                status_code=event.model_response.status_code if event.model_response is not None else None,
                elapsed_ms=elapsed_ms,
                error=self._error,
            )
        )
        self._started_at = None
