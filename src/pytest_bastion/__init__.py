"""pytest-bastion: fluent, listener-driven API test calls."""

from __future__ import annotations

from pytest_bastion.__metadata__ import __version__
from pytest_bastion.assertions import (
    Assertions,
    Callback,
    CompositeAssertions,
    ContentTypeAssertions,
    JsonResponseAssertions,
    JsonSchemaAssertions,
    ResponseHeaderAssertions,
    StatusCodeAssertions,
    no_assertions,
    no_callback,
)
from pytest_bastion.auth import APIKeyAuth, AuthProvider, BearerTokenAuth, CompositeAuth, NoAuth
from pytest_bastion.bastion import Bastion
from pytest_bastion.config import BastionConfig, load_config_from_pyproject, merge_configs
from pytest_bastion.events import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionListener,
    BastionStartedEvent,
    EventRecorder,
    LoggingListener,
)
from pytest_bastion.exceptions import (
    BastionConfigurationError,
    BastionError,
    ModelDecodeError,
    RequestExecutionError,
)
from pytest_bastion.execution import (
    AsgiRequestExecutor,
    HttpxRequestExecutor,
    ModelResponse,
    RequestExecutor,
    Response,
)
from pytest_bastion.factory import BastionFactory, get_default_factory, set_default_factory
from pytest_bastion.model import (
    BytesConverter,
    DataclassConverter,
    Decoded,
    DecodingHints,
    JsonConverter,
    PydanticConverter,
    ResponseModelConverter,
    StringConverter,
)
from pytest_bastion.reporting import CallMetrics, MetricsListener, RunMetrics
from pytest_bastion.request import FormUrlEncodedRequest, GeneralRequest, HttpMethod, JsonRequest, Request

api = Bastion.api

__all__ = [
    "__version__",
    "api",
    # Core
    "Bastion",
    "BastionFactory",
    "get_default_factory",
    "set_default_factory",
    # Requests
    "FormUrlEncodedRequest",
    "GeneralRequest",
    "HttpMethod",
    "JsonRequest",
    "Request",
    # Execution
    "AsgiRequestExecutor",
    "HttpxRequestExecutor",
    "ModelResponse",
    "RequestExecutor",
    "Response",
    # Models
    "BytesConverter",
    "DataclassConverter",
    "Decoded",
    "DecodingHints",
    "JsonConverter",
    "PydanticConverter",
    "ResponseModelConverter",
    "StringConverter",
    # Assertions
    "Assertions",
    "Callback",
    "CompositeAssertions",
    "ContentTypeAssertions",
    "JsonResponseAssertions",
    "JsonSchemaAssertions",
    "ResponseHeaderAssertions",
    "StatusCodeAssertions",
    "no_assertions",
    "no_callback",
    # Events
    "BastionErrorEvent",
    "BastionFailedEvent",
    "BastionFinishedEvent",
    "BastionListener",
    "BastionStartedEvent",
    "EventRecorder",
    "LoggingListener",
    # Errors
    "BastionConfigurationError",
    "BastionError",
    "ModelDecodeError",
    "RequestExecutionError",
    # Auth
    "APIKeyAuth",
    "AuthProvider",
    "BearerTokenAuth",
    "CompositeAuth",
    "NoAuth",
    # Config
    "BastionConfig",
    "load_config_from_pyproject",
    "merge_configs",
    # Reporting
    "CallMetrics",
    "MetricsListener",
    "RunMetrics",
]
