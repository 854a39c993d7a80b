"""Request descriptions for pytest-bastion."""

from __future__ import annotations

from pytest_bastion.request.base import (
    FormUrlEncodedRequest,
    GeneralRequest,
    JsonRequest,
    Request,
    format_path,
)
from pytest_bastion.request.method import HttpMethod

__all__ = [
    "FormUrlEncodedRequest",
    "GeneralRequest",
    "HttpMethod",
    "JsonRequest",
    "Request",
    "format_path",
]
