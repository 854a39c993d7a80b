"""The Bastion builder: one API test call from request to assertions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pytest_bastion.assertions.base import as_assertions, as_callback, no_assertions, no_callback
from pytest_bastion.events.base import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionStartedEvent,
)
from pytest_bastion.exceptions import BastionConfigurationError, ModelDecodeError
from pytest_bastion.execution.response import ModelResponse
from pytest_bastion.model.converters import DecodingHints, is_instance_of

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_bastion.assertions.base import Assertions, Callback
    from pytest_bastion.events.base import BastionListener
    from pytest_bastion.execution.client import RequestExecutor
    from pytest_bastion.execution.response import Response
    from pytest_bastion.model.converters import ResponseModelConverter
    from pytest_bastion.request.base import Request

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")
BoundT = TypeVar("BoundT")


class Bastion(Generic[ModelT]):
    """Builds and runs a single API test call.

    A builder is obtained from :meth:`api` (or a :class:`BastionFactory`),
    bound to a model type, optionally given assertions and a callback, and
    then called::

        Bastion.api("Fetch user", GeneralRequest.get("/users/1")) \\
            .bind(User) \\
            .with_assertions(StatusCodeAssertions.expecting(200)) \\
            .then_do(lambda status, response, user: print(user.name)) \\
            .call()

    ``call()`` returns nothing: the outcome is reported to registered
    listeners as a started event, then a failed event (decode mismatch or
    ``AssertionError`` from the assertions) or an error event (anything else),
    and always a finished event last.

    A builder represents one call and is not thread-safe. Listeners and
    converters must be registered before ``call()``.
    """

    def __init__(self, message: str | None, request: Request, executor: RequestExecutor) -> None:
        """Initialize an unbound builder.

        Args:
            message: Human-readable description appended to the request name in
                events. May be empty.
            request: The request to execute. Referenced, not copied.
            executor: Transport used to execute the request.
        """
        if request is None:
            msg = "request cannot be None"
            raise TypeError(msg)
        if executor is None:
            msg = "executor cannot be None"
            raise TypeError(msg)
        self.message = message or ""
        self.request = request
        self.executor = executor
        self._listeners: list[BastionListener] = []
        self._converters: list[ResponseModelConverter] = []
        self._model_type: Any = None
        self._suppress_assertions = False
        self._assertions: Assertions = no_assertions()
        self._callback: Callback = no_callback()
        self._consumed = False

    @staticmethod
    def api(message: str | None, request: Request) -> Bastion[Any]:
        """Create an unbound builder from the default factory."""
        from pytest_bastion.factory import get_default_factory

        return get_default_factory().get_bastion(message, request)

    @property
    def model_type(self) -> Any:
        return self._model_type

    @property
    def listeners(self) -> tuple[BastionListener, ...]:
        return tuple(self._listeners)

    @property
    def converters(self) -> tuple[ResponseModelConverter, ...]:
        return tuple(self._converters)

    @property
    def assertions(self) -> Assertions:
        return self._assertions

    @property
    def callback(self) -> Callback:
        return self._callback

    @property
    def suppress_assertions(self) -> bool:
        return self._suppress_assertions

    @suppress_assertions.setter
    def suppress_assertions(self, value: bool) -> None:
        self.set_suppress_assertions(value)

    def _ensure_usable(self) -> None:
        if self._consumed:
            msg = "This Bastion builder was consumed by bind(); continue with the builder bind() returned."
            raise BastionConfigurationError(msg)

    def set_suppress_assertions(self, suppress_assertions: bool) -> None:
        """Skip the assertion unit when ``True``. The callback still runs."""
        self._ensure_usable()
        self._suppress_assertions = bool(suppress_assertions)

    def register_listener(self, listener: BastionListener) -> None:
        """Append a listener. Registering the same listener twice notifies it twice."""
        self._ensure_usable()
        if listener is None:
            msg = "listener cannot be None"
            raise TypeError(msg)
        self._listeners.append(listener)

    def register_model_converter(self, converter: ResponseModelConverter) -> None:
        """Append a converter; converters are tried in registration order."""
        self._ensure_usable()
        if converter is None:
            msg = "converter cannot be None"
            raise TypeError(msg)
        self._converters.append(converter)

    def bind(self, model_type: type[BoundT]) -> Bastion[BoundT]:
        """Declare the type the response is decoded into.

        Returns a new builder carrying this builder's configuration. This
        builder is consumed: any further use raises
        :class:`BastionConfigurationError`.

        Raises:
            TypeError: If ``model_type`` is ``None``.
            BastionConfigurationError: If this builder is already bound.
        """
        self._ensure_usable()
        if model_type is None:
            msg = "model_type cannot be None"
            raise TypeError(msg)
        if self._model_type is not None:
            msg = (
                f"Bastion builder is already bound to {getattr(self._model_type, '__name__', self._model_type)}; "
                "a model type can only be bound once."
            )
            raise BastionConfigurationError(msg)

        bound: Bastion[BoundT] = Bastion(self.message, self.request, self.executor)
        bound._listeners = list(self._listeners)
        bound._converters = list(self._converters)
        bound._suppress_assertions = self._suppress_assertions
        bound._assertions = self._assertions
        bound._callback = self._callback
        bound._model_type = model_type
        self._consumed = True
        return bound

    def with_assertions(
        self,
        assertions: Assertions | Callable[[int, ModelResponse[Any], Any], None],
    ) -> Bastion[ModelT]:
        """Set the assertion unit, replacing any previous one."""
        self._ensure_usable()
        self._assertions = as_assertions(assertions)
        return self

    def then_do(self, callback: Callback | Callable[[int, ModelResponse[Any], Any], None]) -> Bastion[ModelT]:
        """Set the callback run after the assertions, replacing any previous one."""
        self._ensure_usable()
        self._callback = as_callback(callback)
        return self

    def descriptive_text(self) -> str:
        """The text events carry: the request name, plus the message if any."""
        if not self.message:
            return self.request.name
        return f"{self.request.name} - {self.message}"

    def call(self) -> None:
        """Execute the request and run decoding, assertions and callback.

        Raises:
            BastionConfigurationError: If no model type was bound. No events
                are emitted in that case.
        """
        self._ensure_usable()
        if self._model_type is None:
            msg = (
                "Bastion instance was configured incorrectly: no model type is bound. "
                "Remember to bind your Bastion request to a model type."
            )
            raise BastionConfigurationError(msg)

        model_response: ModelResponse[ModelT] | None = None
        in_callback = False
        try:
            self._notify_started(BastionStartedEvent(self.descriptive_text()))
            response = self.executor.execute(self.request)
            model = self._decode_model(response)
            model_response = ModelResponse(response, model)
            self._execute_assertions(model_response)
            in_callback = True
            self._callback.execute(model_response.status_code, model_response, model)
        except Exception as e:
            if isinstance(e, AssertionError) and not in_callback:
                self._notify_failed(BastionFailedEvent(self.descriptive_text(), model_response, e))
            else:
                self._notify_error(BastionErrorEvent(self.descriptive_text(), model_response, e))
        finally:
            self._notify_finished(BastionFinishedEvent(self.descriptive_text(), model_response))

    def _decode_model(self, response: Response) -> ModelT:
        hints = DecodingHints(self._model_type)
        for converter in self._converters:
            decoded = converter.decode(response, hints)
            if decoded is not None:
                logger.debug("Response decoded by %s", type(converter).__name__)
                break
        else:
            raise ModelDecodeError(self._model_type)

        if not is_instance_of(decoded.value, self._model_type):
            raise ModelDecodeError(self._model_type)
        return decoded.value

    def _execute_assertions(self, model_response: ModelResponse[ModelT]) -> None:
        if self._suppress_assertions:
            logger.debug("Assertions suppressed for %s", self.descriptive_text())
            return
        self._assertions.execute(model_response.status_code, model_response, model_response.model)

    def _notify_started(self, event: BastionStartedEvent) -> None:
        for listener in self._listeners:
            listener.call_started(event)

    def _notify_failed(self, event: BastionFailedEvent) -> None:
        for listener in self._listeners:
            listener.call_failed(event)

    def _notify_error(self, event: BastionErrorEvent) -> None:
        for listener in self._listeners:
            listener.call_error(event)

    def _notify_finished(self, event: BastionFinishedEvent) -> None:
        for listener in self._listeners:
            listener.call_finished(event)

    def __repr__(self) -> str:
        bound = getattr(self._model_type, "__name__", self._model_type)
        return f"Bastion({self.descriptive_text()!r}, model_type={bound})"
