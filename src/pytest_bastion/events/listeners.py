"""Built-in listeners."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pytest_bastion.events.base import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionListener,
    BastionStartedEvent,
)

if TYPE_CHECKING:
    BastionEvent = BastionStartedEvent | BastionFailedEvent | BastionErrorEvent | BastionFinishedEvent

Outcome = Literal["passed", "failed", "error"]


class LoggingListener(BastionListener):
    """Logs every lifecycle event through the standard ``logging`` module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("pytest_bastion")

    def call_started(self, event: BastionStartedEvent) -> None:
        self.logger.info("Bastion call started: %s", event.descriptive_text)

    def call_failed(self, event: BastionFailedEvent) -> None:
        self.logger.warning("Bastion call failed: %s: %s", event.descriptive_text, event.cause)

    def call_error(self, event: BastionErrorEvent) -> None:
        self.logger.error(
            "Bastion call errored: %s",
            event.descriptive_text,
            exc_info=(type(event.cause), event.cause, event.cause.__traceback__),
        )

    def call_finished(self, event: BastionFinishedEvent) -> None:
        status = event.model_response.status_code if event.model_response is not None else "-"
        self.logger.info("Bastion call finished: %s (status %s)", event.descriptive_text, status)


class EventRecorder(BastionListener):
    """Keeps every received event in arrival order.

    Useful in tests and as the source of outcomes for reporting.
    """

    def __init__(self) -> None:
        self.events: list[BastionEvent] = []

    def call_started(self, event: BastionStartedEvent) -> None:
        self.events.append(event)

    def call_failed(self, event: BastionFailedEvent) -> None:
        self.events.append(event)

    def call_error(self, event: BastionErrorEvent) -> None:
        self.events.append(event)

    def call_finished(self, event: BastionFinishedEvent) -> None:
        self.events.append(event)

    @property
    def failures(self) -> list[BastionFailedEvent]:
        return [e for e in self.events if isinstance(e, BastionFailedEvent)]

    @property
    def errors(self) -> list[BastionErrorEvent]:
        return [e for e in self.events if isinstance(e, BastionErrorEvent)]

    @property
    def outcome(self) -> Outcome | None:
        """Outcome of the most recent call, or ``None`` while it has not finished."""
        if not self.events or not isinstance(self.events[-1], BastionFinishedEvent):
            return None
        for event in reversed(self.events[:-1]):
            if isinstance(event, BastionFailedEvent):
                return "failed"
            if isinstance(event, BastionErrorEvent):
                return "error"
            if isinstance(event, BastionStartedEvent):
                break
        return "passed"

    def clear(self) -> None:
        self.events.clear()
