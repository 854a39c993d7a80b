"""Assertion and callback units run after a response was decoded."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_bastion.execution.response import ModelResponse


class Assertions(ABC):
    """Checks a decoded response; failure is signalled with ``AssertionError``.

    Any other exception raised from ``execute`` is reported as an unexpected
    error instead of a test failure.

    Example:
        Custom assertions::

            class IsCreated(Assertions):
                def execute(self, status_code, model_response, model):
                    assert status_code == 201, f"Expected 201, got {status_code}"
    """

    @abstractmethod
    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None: ...

    def and_then(self, other: Assertions | Callable[[int, ModelResponse[Any], Any], None]) -> Assertions:
        """Combine with another unit; both always run and failures are aggregated."""
        from pytest_bastion.assertions.response import CompositeAssertions

        members = self.assertions if isinstance(self, CompositeAssertions) else [self]
        return CompositeAssertions([*members, as_assertions(other)])


class FunctionAssertions(Assertions):
    """Adapts a plain function with the ``execute`` signature."""

    def __init__(self, func: Callable[[int, ModelResponse[Any], Any], None]) -> None:
        self.func = func

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        self.func(status_code, model_response, model)

    def __repr__(self) -> str:
        return f"FunctionAssertions({getattr(self.func, '__qualname__', self.func)!r})"


class _NoAssertions(Assertions):
    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        return None

    def __repr__(self) -> str:
        return "no_assertions()"


_NO_ASSERTIONS = _NoAssertions()


def no_assertions() -> Assertions:
    """Return the assertion unit that accepts every response."""
    return _NO_ASSERTIONS


def as_assertions(value: Any) -> Assertions:
    """Coerce an ``Assertions`` instance or a plain callable to ``Assertions``.

    Raises:
        TypeError: If ``value`` is ``None`` or neither kind of unit.
    """
    if value is None:
        msg = "assertions cannot be None; use no_assertions() instead"
        raise TypeError(msg)
    if isinstance(value, Assertions):
        return value
    if callable(value):
        return FunctionAssertions(value)
    msg = f"Expected Assertions or a callable, got {type(value).__name__}"
    raise TypeError(msg)


class Callback(ABC):
    """Follow-up action run after the assertions passed.

    Every exception raised from ``execute``, ``AssertionError`` included, is
    reported as an unexpected error.
    """

    @abstractmethod
    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None: ...


class FunctionCallback(Callback):
    """Adapts a plain function with the ``execute`` signature."""

    def __init__(self, func: Callable[[int, ModelResponse[Any], Any], None]) -> None:
        self.func = func

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        self.func(status_code, model_response, model)


class _NoCallback(Callback):
    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        return None

    def __repr__(self) -> str:
        return "no_callback()"


_NO_CALLBACK = _NoCallback()


def no_callback() -> Callback:
    """Return the callback that does nothing."""
    return _NO_CALLBACK


def as_callback(value: Any) -> Callback:
    """Coerce a ``Callback`` instance or a plain callable to ``Callback``.

    Raises:
        TypeError: If ``value`` is ``None`` or neither kind of unit.
    """
    if value is None:
        msg = "callback cannot be None; use no_callback() instead"
        raise TypeError(msg)
    if isinstance(value, Callback):
        return value
    if callable(value):
        return FunctionCallback(value)
    msg = f"Expected Callback or a callable, got {type(value).__name__}"
    raise TypeError(msg)
