"""Request executors backed by httpx."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from pytest_bastion.exceptions import RequestExecutionError
from pytest_bastion.execution.response import Response
from pytest_bastion.request.base import format_path

if TYPE_CHECKING:
    from collections.abc import Coroutine, Mapping

    from pytest_bastion.auth import AuthProvider
    from pytest_bastion.config import BastionConfig
    from pytest_bastion.request.base import Request

logger = logging.getLogger(__name__)


@runtime_checkable
class RequestExecutor(Protocol):
    """Turns a request description into a response.

    Implementations block until the response has been fully read and signal
    transport failures by raising; they never return partial responses.
    """

    def execute(self, request: Request) -> Response: ...


def _merge_headers(
    default_headers: Mapping[str, str],
    auth: AuthProvider | None,
    request: Request,
) -> dict[str, str]:
    headers = dict(default_headers)
    if auth is not None:
        headers.update(auth.get_headers())
    if request.content_type:
        headers["Content-Type"] = request.content_type
    headers.update(request.headers)
    return headers


def _merge_params(auth: AuthProvider | None, request: Request) -> dict[str, str]:
    params = dict(auth.get_query_params()) if auth is not None else {}
    params.update(request.query_params)
    return params


class HttpxRequestExecutor:
    """Executes requests with a synchronous :class:`httpx.Client`.

    A new client is opened per request unless one is supplied, in which case
    the caller owns its lifecycle. Request URLs are resolved against
    ``base_url``; request headers override auth headers, which override the
    default headers.

    Example:
        >>> executor = HttpxRequestExecutor(base_url="https://api.example.com")
        >>> response = executor.execute(GeneralRequest.get("/status"))  # doctest: +SKIP
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        auth: AuthProvider | None = None,
        follow_redirects: bool = False,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            base_url: Base URL that relative request URLs are joined to.
            timeout: Request timeout in seconds.
            headers: Headers sent with every request.
            auth: Authentication applied to every request.
            follow_redirects: Whether redirects are followed.
            transport: Custom httpx transport, e.g. ``httpx.MockTransport``.
            client: Pre-configured client to reuse instead of opening one per call.
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.auth = auth
        self.follow_redirects = follow_redirects
        self.transport = transport
        self._client = client

    @classmethod
    def from_config(cls, config: BastionConfig, **kwargs: Any) -> HttpxRequestExecutor:
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=config.resolved_headers(),
            auth=config.auth,
            follow_redirects=config.follow_redirects,
            **kwargs,
        )

    def _send(self, client: httpx.Client, request: Request) -> httpx.Response:
        return client.request(
            method=str(request.method),
            url=format_path(request.url, request.route_params),
            params=_merge_params(self.auth, request) or None,
            content=request.encoded_body(),
            headers=_merge_headers(self.headers, self.auth, request),
        )

    def execute(self, request: Request) -> Response:
        """Send the request and read the whole response.

        Raises:
            RequestExecutionError: If httpx fails to complete the exchange.
        """
        logger.debug("Sending %s %s", request.method, request.url)
        try:
            if self._client is not None:
                http_response = self._send(self._client, request)
            else:
                with httpx.Client(
                    base_url=self.base_url,
                    timeout=self.timeout,
                    follow_redirects=self.follow_redirects,
                    transport=self.transport,
                ) as client:
                    http_response = self._send(client, request)
        except httpx.HTTPError as e:
            msg = f"{request.method} {request.url} failed: {e}"
            raise RequestExecutionError(msg) from e
        logger.debug("Received %s for %s %s", http_response.status_code, request.method, request.url)
        return Response.from_httpx(http_response)


def _run_to_completion(coro: Coroutine[Any, Any, httpx.Response]) -> httpx.Response:
    """Run a coroutine on the caller's thread, or a worker thread inside a running loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


class AsgiRequestExecutor:
    """Executes requests in-process against an ASGI application.

    The call still blocks: the request runs with :func:`asyncio.run`, moving to
    a worker thread when the caller is already inside an event loop.
    """

    def __init__(
        self,
        app: Any,
        base_url: str = "http://test",
        *,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        auth: AuthProvider | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            app: The ASGI application.
            base_url: Base URL for requests.
            timeout: Request timeout in seconds.
            headers: Headers sent with every request.
            auth: Authentication applied to every request.
        """
        self.app = app
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.auth = auth
        self.transport = httpx.ASGITransport(app=app)

    async def _request(self, request: Request) -> httpx.Response:
        async with httpx.AsyncClient(transport=self.transport, base_url=self.base_url, timeout=self.timeout) as client:
            return await client.request(
                method=str(request.method),
                url=format_path(request.url, request.route_params),
                params=_merge_params(self.auth, request) or None,
                content=request.encoded_body(),
                headers=_merge_headers(self.headers, self.auth, request),
            )

    def execute(self, request: Request) -> Response:
        """Send the request to the app and read the whole response.

        Raises:
            RequestExecutionError: If httpx fails to complete the exchange.
        """
        try:
            http_response = _run_to_completion(self._request(request))
        except httpx.HTTPError as e:
            msg = f"{request.method} {request.url} failed: {e}"
            raise RequestExecutionError(msg) from e
        return Response.from_httpx(http_response)
