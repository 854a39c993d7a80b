"""Exception hierarchy for pytest-bastion."""

from __future__ import annotations


class BastionError(Exception):
    """Base class for errors raised by pytest-bastion."""


class BastionConfigurationError(BastionError):
    """A Bastion builder or configuration file was used incorrectly.

    Raised for a missing model binding at call time, a second ``bind()``,
    use of a builder after ``bind()`` consumed it, and unreadable config files.
    These are never routed to listeners.
    """


class RequestExecutionError(BastionError):
    """The transport failed to produce a response."""


class ModelDecodeError(AssertionError):
    """No registered converter produced a model of the bound type.

    This is an ``AssertionError`` so the orchestrator reports it as a test
    failure rather than an unexpected error.
    """

    def __init__(self, model_type: object) -> None:
        self.model_type = model_type
        name = getattr(model_type, "__name__", repr(model_type))
        super().__init__(f"Could not parse response into model object of type {name}")
