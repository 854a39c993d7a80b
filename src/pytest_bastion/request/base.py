"""Request descriptions handed to a request executor."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import urlencode

from pytest_bastion.request.method import HttpMethod

if TYPE_CHECKING:
    from collections.abc import Mapping

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@runtime_checkable
class Request(Protocol):
    """Protocol for a single outbound HTTP call.

    Executors read these attributes to build the wire request. Implementations
    are expected to be immutable once handed to a Bastion builder.
    """

    @property
    def name(self) -> str: ...

    @property
    def method(self) -> HttpMethod: ...

    @property
    def url(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def query_params(self) -> Mapping[str, str]: ...

    @property
    def route_params(self) -> Mapping[str, str]: ...

    @property
    def content_type(self) -> str | None: ...

    def encoded_body(self) -> bytes | None: ...


def format_path(path: str, params: Mapping[str, Any]) -> str:
    """Substitute route parameters into a URL template.

    Both ``{param}`` and ``{param:type}`` placeholders are replaced.

    Args:
        path: The URL template.
        params: Parameter values keyed by name.

    Returns:
        The URL with every known placeholder substituted.
    """
    result = path
    for name, value in params.items():
        pattern = rf"\{{{re.escape(name)}(?::[^}}]+)?\}}"
        result = re.sub(pattern, lambda _: str(value), result)
    return result


@dataclass(frozen=True)
class GeneralRequest:
    """A plain request with an optional text or binary body.

    Use the verb class methods to create one and the ``with_*`` methods to
    derive modified copies.

    Example:
        >>> request = (
        ...     GeneralRequest.get("/users/{id}")
        ...     .with_route_param("id", "42")
        ...     .with_header("Accept", "application/json")
        ... )
        >>> request.name
        'GET /users/{id}'
    """

    method: HttpMethod
    url: str
    body: str | bytes | None = None
    content_type: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    route_params: Mapping[str, str] = field(default_factory=dict)
    request_name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.method, HttpMethod):
            msg = f"method must be an HttpMethod, got {type(self.method).__name__}"
            raise TypeError(msg)
        if self.body is not None and not isinstance(self.body, (str, bytes)):
            msg = f"body must be str, bytes or None, got {type(self.body).__name__}"
            raise TypeError(msg)
        # Own copies so later changes to the caller's dicts are not observed.
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(self, "query_params", dict(self.query_params))
        object.__setattr__(self, "route_params", dict(self.route_params))

    @property
    def name(self) -> str:
        """Human-readable request name used in lifecycle events."""
        return self.request_name or f"{self.method} {self.url}"

    @property
    def formatted_url(self) -> str:
        """The URL with route parameters substituted."""
        return format_path(self.url, self.route_params)

    def encoded_body(self) -> bytes | None:
        """Return the body as bytes, encoding text as UTF-8."""
        if self.body is None:
            return None
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @classmethod
    def create(cls, method: HttpMethod, url: str, body: Any = None) -> GeneralRequest:
        return cls(method=method, url=url, body=body)

    @classmethod
    def get(cls, url: str) -> GeneralRequest:
        return cls.create(HttpMethod.GET, url)

    @classmethod
    def head(cls, url: str) -> GeneralRequest:
        return cls.create(HttpMethod.HEAD, url)

    @classmethod
    def options(cls, url: str) -> GeneralRequest:
        return cls.create(HttpMethod.OPTIONS, url)

    @classmethod
    def post(cls, url: str, body: Any = None) -> GeneralRequest:
        return cls.create(HttpMethod.POST, url, body)

    @classmethod
    def put(cls, url: str, body: Any = None) -> GeneralRequest:
        return cls.create(HttpMethod.PUT, url, body)

    @classmethod
    def patch(cls, url: str, body: Any = None) -> GeneralRequest:
        return cls.create(HttpMethod.PATCH, url, body)

    @classmethod
    def delete(cls, url: str, body: Any = None) -> GeneralRequest:
        return cls.create(HttpMethod.DELETE, url, body)

    def with_name(self, name: str) -> GeneralRequest:
        return replace(self, request_name=name)

    def with_header(self, name: str, value: str) -> GeneralRequest:
        return replace(self, headers={**self.headers, name: value})

    def with_query_param(self, name: str, value: str) -> GeneralRequest:
        return replace(self, query_params={**self.query_params, name: value})

    def with_route_param(self, name: str, value: str) -> GeneralRequest:
        return replace(self, route_params={**self.route_params, name: value})

    def with_content_type(self, content_type: str) -> GeneralRequest:
        return replace(self, content_type=content_type)

    def with_body(self, body: Any) -> GeneralRequest:
        return replace(self, body=body)


@dataclass(frozen=True)
class JsonRequest(GeneralRequest):
    """A request whose body is JSON.

    Bodies given as strings must already be valid JSON; any other value is
    serialized with :func:`json.dumps`. The content type defaults to
    ``application/json``.

    Raises:
        ValueError: If a string body is not valid JSON.
    """

    content_type: str | None = JSON_CONTENT_TYPE

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            try:
                json.loads(self.body)
            except json.JSONDecodeError as e:
                msg = f"Request body is not valid JSON: {e}"
                raise ValueError(msg) from e
        elif self.body is not None and not isinstance(self.body, bytes):
            object.__setattr__(self, "body", json.dumps(self.body))
        super().__post_init__()


@dataclass(frozen=True)
class FormUrlEncodedRequest(GeneralRequest):
    """A request carrying ``application/x-www-form-urlencoded`` data.

    Mapping bodies are encoded with :func:`urllib.parse.urlencode`.
    """

    content_type: str | None = FORM_CONTENT_TYPE

    def __post_init__(self) -> None:
        if self.body is not None and not isinstance(self.body, (str, bytes)):
            object.__setattr__(self, "body", urlencode(self.body))
        super().__post_init__()
