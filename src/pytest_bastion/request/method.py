"""HTTP verbs used to tag requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class HttpMethod:
    """An HTTP method that can be sent with a request.

    The standard methods are available as class attributes (``HttpMethod.GET``,
    ``HttpMethod.POST`` and so on). Other verbs can be created directly; two
    methods are equal when their values are equal.

    Example:
        >>> HttpMethod.GET == HttpMethod("GET")
        True
        >>> str(HttpMethod("PROPFIND"))
        'PROPFIND'
    """

    GET: ClassVar[HttpMethod]
    POST: ClassVar[HttpMethod]
    PUT: ClassVar[HttpMethod]
    PATCH: ClassVar[HttpMethod]
    DELETE: ClassVar[HttpMethod]
    OPTIONS: ClassVar[HttpMethod]
    HEAD: ClassVar[HttpMethod]

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            msg = f"HTTP method must be a non-empty string, got {self.value!r}"
            raise ValueError(msg)

    def __str__(self) -> str:
        return self.value


HttpMethod.GET = HttpMethod("GET")
HttpMethod.POST = HttpMethod("POST")
HttpMethod.PUT = HttpMethod("PUT")
HttpMethod.PATCH = HttpMethod("PATCH")
HttpMethod.DELETE = HttpMethod("DELETE")
HttpMethod.OPTIONS = HttpMethod("OPTIONS")
HttpMethod.HEAD = HttpMethod("HEAD")
