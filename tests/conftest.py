"""Shared test fixtures."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from pytest_bastion.events.listeners import EventRecorder
from pytest_bastion.execution.client import HttpxRequestExecutor
from pytest_bastion.execution.response import Response
from pytest_bastion.factory import set_default_factory

pytest_plugins = ["pytester"]


def json_response(status_code: int, payload: Any, content_type: str = "application/json") -> Response:
    """Build a Response with a JSON body."""
    return Response(
        status_code=status_code,
        headers={"content-type": content_type},
        body=json.dumps(payload).encode("utf-8"),
    )


class StubExecutor:
    """Returns a canned response (or raises) and records every request."""

    def __init__(self, response: Response | None = None, error: Exception | None = None) -> None:
        self.response = response if response is not None else Response(status_code=200)
        self.error = error
        self.requests: list[Any] = []

    def execute(self, request: Any) -> Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def _reset_default_factory():
    """Keep Bastion.api() from leaking a factory between tests."""
    yield
    set_default_factory(None)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def stub_executor() -> StubExecutor:
    return StubExecutor(json_response(200, {"code": 200}))


@pytest.fixture
def echo_transport() -> httpx.MockTransport:
    """Transport answering every request with a JSON echo of what it received."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/boom":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "path": request.url.path,
                "query": dict(request.url.params),
                "headers": {k.lower(): v for k, v in request.headers.items()},
                "body": request.content.decode("utf-8"),
            },
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def echo_executor(echo_transport: httpx.MockTransport) -> HttpxRequestExecutor:
    return HttpxRequestExecutor(base_url="http://testserver", transport=echo_transport)


@pytest.fixture
def asgi_app():
    """Minimal ASGI application serving /status and /users/{id}."""

    async def app(scope, receive, send):
        assert scope["type"] == "http"
        path = scope["path"]
        if path == "/status":
            status, payload = 200, {"code": 200}
        elif path.startswith("/users/"):
            status, payload = 200, {"id": int(path.rsplit("/", 1)[1]), "name": "Alice"}
        else:
            status, payload = 404, {"detail": "Not Found"}
        body = json.dumps(payload).encode("utf-8")
        await send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [(b"content-type", b"application/json"), (b"content-length", str(len(body)).encode())],
            }
        )
        await send({"type": "http.response.body", "body": body})

    return app
