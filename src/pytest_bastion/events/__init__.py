"""Lifecycle events and listeners."""

from __future__ import annotations

from pytest_bastion.events.base import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionListener,
    BastionStartedEvent,
)
from pytest_bastion.events.listeners import EventRecorder, LoggingListener

__all__ = [
    "BastionErrorEvent",
    "BastionFailedEvent",
    "BastionFinishedEvent",
    "BastionListener",
    "BastionStartedEvent",
    "EventRecorder",
    "LoggingListener",
]
