"""Request execution and responses."""

from __future__ import annotations

from pytest_bastion.execution.client import AsgiRequestExecutor, HttpxRequestExecutor, RequestExecutor
from pytest_bastion.execution.response import ModelResponse, Response

__all__ = [
    "AsgiRequestExecutor",
    "HttpxRequestExecutor",
    "ModelResponse",
    "RequestExecutor",
    "Response",
]
