"""Factories that create pre-configured Bastion builders."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pytest_bastion.bastion import Bastion
from pytest_bastion.config import BastionConfig
from pytest_bastion.events.listeners import LoggingListener
from pytest_bastion.execution.client import HttpxRequestExecutor
from pytest_bastion.model.converters import default_converters

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pytest_bastion.events.base import BastionListener
    from pytest_bastion.execution.client import RequestExecutor
    from pytest_bastion.model.converters import ResponseModelConverter
    from pytest_bastion.request.base import Request

logger = logging.getLogger(__name__)


class BastionFactory:
    """Creates Bastion builders sharing an executor, converters and listeners.

    Every builder gets, in order: the built-in converters followed by any
    extra converters, and a ``LoggingListener`` (when ``config.log_events``)
    followed by the factory's listeners.

    Example:
        >>> factory = BastionFactory(BastionConfig(base_url="https://api.example.com"))
        >>> builder = factory.get_bastion("Fetch status", GeneralRequest.get("/status"))
    """

    def __init__(
        self,
        config: BastionConfig | None = None,
        *,
        executor: RequestExecutor | None = None,
        converters: Iterable[ResponseModelConverter] = (),
        listeners: Iterable[BastionListener] = (),
    ) -> None:
        """Initialize the factory.

        Args:
            config: Shared settings. Defaults to ``BastionConfig()``.
            executor: Transport for every builder. Defaults to an
                ``HttpxRequestExecutor`` built from ``config``.
            converters: Converters tried after the built-in ones.
            listeners: Listeners registered on every builder.
        """
        self.config = config or BastionConfig()
        self.executor = executor if executor is not None else HttpxRequestExecutor.from_config(self.config)
        self.converters = list(converters)
        self.listeners = list(listeners)

    def add_listener(self, listener: BastionListener) -> None:
        """Register a listener on every builder created from now on."""
        self.listeners.append(listener)

    def add_converter(self, converter: ResponseModelConverter) -> None:
        """Register a converter on every builder created from now on."""
        self.converters.append(converter)

    def get_bastion(self, message: str | None, request: Request) -> Bastion[Any]:
        """Create an unbound builder for ``request``."""
        bastion: Bastion[Any] = Bastion(message, request, self.executor)
        for converter in [*default_converters(), *self.converters]:
            bastion.register_model_converter(converter)
        if self.config.log_events:
            bastion.register_listener(LoggingListener())
        for listener in self.listeners:
            bastion.register_listener(listener)
        bastion.set_suppress_assertions(self.config.suppress_assertions)
        return bastion


_default_factory: BastionFactory | None = None


def get_default_factory() -> BastionFactory:
    """Return the process-wide factory behind ``Bastion.api()``.

    Created lazily from the ``[tool.bastion]`` section of ``./pyproject.toml``.
    """
    global _default_factory
    if _default_factory is None:
        from pytest_bastion.config import load_config_from_pyproject

        _default_factory = BastionFactory(load_config_from_pyproject())
        logger.debug("Created default Bastion factory for base URL %r", _default_factory.config.base_url)
    return _default_factory


def set_default_factory(factory: BastionFactory | None) -> None:
    """Replace the default factory; ``None`` resets it to be recreated lazily."""
    global _default_factory
    _default_factory = factory
