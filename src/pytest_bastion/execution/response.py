"""Responses produced by request executors."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class Response:
    """A fully read HTTP response.

    Attributes:
        status_code: The HTTP status code.
        status_text: The reason phrase, if the transport reported one.
        headers: Case-insensitive response headers.
        body: The raw response body.
    """

    status_code: int
    status_text: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> Response:
        """Build a Response from an already read ``httpx.Response``."""
        return cls(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            headers=httpx.Headers(response.headers),
            body=response.content,
        )

    @property
    def content_type(self) -> str | None:
        """The media type of the body without parameters such as charset."""
        content_type = self.headers.get("content-type")
        if not content_type:
            return None
        return content_type.split(";")[0].strip().lower()

    @property
    def text(self) -> str:
        """The body decoded with the declared charset, falling back to UTF-8."""
        charset = "utf-8"
        for part in self.headers.get("content-type", "").split(";")[1:]:
            key, _, value = part.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                charset = value.strip().strip('"')
        try:
            return self.body.decode(charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.text)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)


@dataclass(frozen=True)
class ModelResponse(Generic[ModelT]):
    """A response paired with the model decoded from it.

    Only created once decoding succeeded, so ``model`` is always an instance
    of the type the Bastion builder was bound to.
    """

    response: Response
    model: ModelT

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def status_text(self) -> str:
        return self.response.status_text

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def body(self) -> bytes:
        return self.response.body

    @property
    def text(self) -> str:
        return self.response.text

    @property
    def content_type(self) -> str | None:
        return self.response.content_type

    def json(self) -> Any:
        return self.response.json()

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.response.get_header(name, default)
