"""Assertion and callback units for pytest-bastion."""

from __future__ import annotations

from pytest_bastion.assertions.base import (
    Assertions,
    Callback,
    FunctionAssertions,
    FunctionCallback,
    as_assertions,
    as_callback,
    no_assertions,
    no_callback,
)
from pytest_bastion.assertions.response import (
    CompositeAssertions,
    ContentTypeAssertions,
    JsonResponseAssertions,
    JsonSchemaAssertions,
    ResponseHeaderAssertions,
    StatusCodeAssertions,
)

__all__ = [
    "Assertions",
    "Callback",
    "CompositeAssertions",
    "ContentTypeAssertions",
    "FunctionAssertions",
    "FunctionCallback",
    "JsonResponseAssertions",
    "JsonSchemaAssertions",
    "ResponseHeaderAssertions",
    "StatusCodeAssertions",
    "as_assertions",
    "as_callback",
    "no_assertions",
    "no_callback",
]
