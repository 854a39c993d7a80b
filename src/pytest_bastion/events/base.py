"""Lifecycle events and the listener interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pytest_bastion.execution.response import ModelResponse


@dataclass(frozen=True)
class BastionStartedEvent:
    """Emitted once before the request is executed."""

    descriptive_text: str


@dataclass(frozen=True)
class BastionFailedEvent:
    """Emitted when decoding or the assertions raised ``AssertionError``.

    ``model_response`` is ``None`` when decoding failed.
    """

    descriptive_text: str
    model_response: ModelResponse[Any] | None
    cause: AssertionError


@dataclass(frozen=True)
class BastionErrorEvent:
    """Emitted when anything other than an assertion failed.

    ``model_response`` is ``None`` when the failure happened before decoding
    completed.
    """

    descriptive_text: str
    model_response: ModelResponse[Any] | None
    cause: Exception


@dataclass(frozen=True)
class BastionFinishedEvent:
    """Emitted last for every call, whatever the outcome."""

    descriptive_text: str
    model_response: ModelResponse[Any] | None


class BastionListener:
    """Receives the lifecycle events of Bastion calls.

    All methods are no-ops, so subclasses only override the events they care
    about. Listeners run synchronously on the calling thread; exceptions they
    raise are not caught by the dispatcher.

    Example:
        >>> class PrintingListener(BastionListener):
        ...     def call_failed(self, event):
        ...         print(f"FAILED {event.descriptive_text}: {event.cause}")
    """

    def call_started(self, event: BastionStartedEvent) -> None:
        pass

    def call_failed(self, event: BastionFailedEvent) -> None:
        pass

    def call_error(self, event: BastionErrorEvent) -> None:
        pass

    def call_finished(self, event: BastionFinishedEvent) -> None:
        pass
