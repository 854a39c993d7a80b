"""Authentication providers applied by request executors.

Credential values prefixed with ``$`` are read from the environment when the
request is sent, so secrets never need to live in ``pyproject.toml``::

    [tool.bastion.auth]
    bearer_token = "$API_TOKEN"
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def resolve_env_value(spec: str) -> str:
    """Resolve ``$NAME`` to the value of environment variable ``NAME``.

    Raises:
        ValueError: If the referenced variable is not set.
    """
    if not spec.startswith("$"):
        return spec
    env_var = spec[1:]
    value = os.environ.get(env_var)
    if value is None:
        msg = f"Environment variable '{env_var}' is not set"
        raise ValueError(msg)
    return value


class AuthProvider(ABC):
    """Supplies the headers and query parameters that authenticate a request."""

    @abstractmethod
    def get_headers(self) -> dict[str, str]: ...

    @abstractmethod
    def get_query_params(self) -> dict[str, str]: ...


class NoAuth(AuthProvider):
    """Sends requests unauthenticated."""

    def get_headers(self) -> dict[str, str]:
        return {}

    def get_query_params(self) -> dict[str, str]:
        return {}


class BearerTokenAuth(AuthProvider):
    """Adds ``Authorization: Bearer <token>``.

    Example:
        >>> BearerTokenAuth("secret").get_headers()
        {'Authorization': 'Bearer secret'}
    """

    def __init__(self, token: str) -> None:
        self._token_spec = token

    @property
    def token(self) -> str:
        return resolve_env_value(self._token_spec)

    def get_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def get_query_params(self) -> dict[str, str]:
        return {}


class APIKeyAuth(AuthProvider):
    """Sends an API key as a header, a query parameter, or both.

    With neither ``header_name`` nor ``query_param`` given the key goes into an
    ``X-API-Key`` header.
    """

    def __init__(self, key: str, *, header_name: str | None = None, query_param: str | None = None) -> None:
        self._key_spec = key
        self.header_name = header_name
        self.query_param = query_param
        if header_name is None and query_param is None:
            self.header_name = "X-API-Key"

    @property
    def key(self) -> str:
        return resolve_env_value(self._key_spec)

    def get_headers(self) -> dict[str, str]:
        return {self.header_name: self.key} if self.header_name else {}

    def get_query_params(self) -> dict[str, str]:
        return {self.query_param: self.key} if self.query_param else {}


class CompositeAuth(AuthProvider):
    """Merges several providers; later providers win on name clashes."""

    def __init__(self, providers: Sequence[AuthProvider]) -> None:
        self.providers = list(providers)

    def get_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        for provider in self.providers:
            headers.update(provider.get_headers())
        return headers

    def get_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for provider in self.providers:
            params.update(provider.get_query_params())
        return params
