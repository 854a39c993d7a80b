"""Built-in assertions for common response checks."""

from __future__ import annotations

import copy
import difflib
import json
from typing import TYPE_CHECKING, Any

from pytest_bastion.assertions.base import Assertions, as_assertions

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from pytest_bastion.execution.response import ModelResponse

# Display limits
MAX_DISPLAYED_CODES = 10
MAX_DISPLAYED_BODY = 500


def _format_codes(codes: Sequence[int]) -> str:
    shown = list(codes[:MAX_DISPLAYED_CODES])
    return f"{shown}{'...' if len(codes) > MAX_DISPLAYED_CODES else ''}"


def _truncate(text: str) -> str:
    if len(text) > MAX_DISPLAYED_BODY:
        return text[:MAX_DISPLAYED_BODY] + "..."
    return text


class StatusCodeAssertions(Assertions):
    """Assert that the status code is one of the expected codes.

    Example:
        >>> assertions = StatusCodeAssertions.expecting(200, 201)
    """

    def __init__(self, expected_codes: Iterable[int]) -> None:
        self.expected_codes = list(expected_codes)
        if not self.expected_codes:
            msg = "At least one expected status code is required"
            raise ValueError(msg)

    @classmethod
    def expecting(cls, *codes: int) -> StatusCodeAssertions:
        return cls(codes)

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        if status_code not in self.expected_codes:
            msg = (
                f"Expected status code to be one of {_format_codes(self.expected_codes)}, but was {status_code}.\n"
                f"Response body: {_truncate(model_response.text)}"
            )
            raise AssertionError(msg)


class ContentTypeAssertions(Assertions):
    """Assert the media type of the ``Content-Type`` header.

    Parameters such as ``charset`` are ignored; comparison is case-insensitive.
    """

    def __init__(self, expected_type: str = "application/json") -> None:
        self.expected_type = expected_type.split(";")[0].strip().lower()

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        media_type = model_response.content_type
        if media_type != self.expected_type:
            full_header = model_response.get_header("content-type")
            msg = f"Expected Content-Type '{self.expected_type}', but was '{media_type}'. Full header: {full_header}"
            raise AssertionError(msg)


class ResponseHeaderAssertions(Assertions):
    """Assert that a header is present and, optionally, has a given value."""

    def __init__(self, name: str, value: str | None = None) -> None:
        self.name = name
        self.value = value

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        actual = model_response.get_header(self.name)
        if actual is None:
            msg = f"Expected response header '{self.name}' to be present"
            raise AssertionError(msg)
        if self.value is not None and actual != self.value:
            msg = f"Expected response header '{self.name}' to be '{self.value}', but was '{actual}'"
            raise AssertionError(msg)


def _remove_pointer(data: Any, pointer: str) -> None:
    """Delete the value at a JSON pointer (``/a/0/b``); missing paths are ignored."""
    parts = [p.replace("~1", "/").replace("~0", "~") for p in pointer.lstrip("/").split("/")]
    target = data
    for part in parts[:-1]:
        if isinstance(target, dict) and part in target:
            target = target[part]
        elif isinstance(target, list) and part.isdigit() and int(part) < len(target):
            target = target[int(part)]
        else:
            return
    last = parts[-1]
    if isinstance(target, dict):
        target.pop(last, None)
    elif isinstance(target, list) and last.isdigit() and int(last) < len(target):
        del target[int(last)]


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, default=str)


class JsonResponseAssertions(Assertions):
    """Assert that the body is JSON equal to an expected document.

    The status code must be one of ``status_codes`` (``200`` by default) and the
    content type must be ``application/json``. Fields named by JSON pointers in
    ``ignore_fields`` are removed from both documents before comparing, which
    is useful for generated ids and timestamps.

    Example:
        >>> assertions = JsonResponseAssertions(
        ...     {"id": 1, "name": "Alice", "created": "..."},
        ...     ignore_fields=["/created"],
        ... )
    """

    def __init__(
        self,
        expected: Any,
        *,
        status_codes: Iterable[int] = (200,),
        ignore_fields: Iterable[str] = (),
        content_type: str = "application/json",
    ) -> None:
        if isinstance(expected, str):
            try:
                expected = json.loads(expected)
            except json.JSONDecodeError as e:
                msg = f"Expected JSON is not valid: {e}"
                raise ValueError(msg) from e
        self.expected = expected
        self.status_codes = StatusCodeAssertions(status_codes)
        self.content_type = ContentTypeAssertions(content_type)
        self.ignore_fields = list(ignore_fields)

    def _without_ignored(self, data: Any) -> Any:
        data = copy.deepcopy(data)
        for pointer in self.ignore_fields:
            _remove_pointer(data, pointer)
        return data

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        self.status_codes.execute(status_code, model_response, model)
        self.content_type.execute(status_code, model_response, model)
        try:
            actual = model_response.json()
        except ValueError as e:
            msg = f"Response body is not valid JSON: {e}"
            raise AssertionError(msg) from e

        expected = self._without_ignored(self.expected)
        actual = self._without_ignored(actual)
        if actual != expected:
            diff = difflib.unified_diff(
                _dump(expected).splitlines(),
                _dump(actual).splitlines(),
                fromfile="expected",
                tofile="actual",
                lineterm="",
            )
            msg = "Response JSON does not match the expected JSON:\n" + "\n".join(diff)
            raise AssertionError(msg)


class JsonSchemaAssertions(Assertions):
    """Assert that the JSON body validates against a JSON Schema.

    Requires the ``jsonschema`` library (``pip install pytest-bastion[jsonschema]``).

    Raises:
        ImportError: On construction, if ``jsonschema`` is not installed.
    """

    def __init__(self, schema: dict[str, Any] | str) -> None:
        if isinstance(schema, str):
            schema = json.loads(schema)
        self.schema = schema
        try:
            from jsonschema import Draft7Validator
        except ImportError as e:
            msg = "jsonschema library required for schema assertions. Install with: pip install jsonschema"
            raise ImportError(msg) from e
        self._validator = Draft7Validator(schema)

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        try:
            data = model_response.json()
        except ValueError as e:
            msg = f"Response body is not valid JSON: {e}"
            raise AssertionError(msg) from e

        errors = []
        for error in self._validator.iter_errors(data):
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            errors.append(f"{path}: {error.message}")
        if errors:
            msg = f"JSON Schema validation failed: {'; '.join(errors)}"
            raise AssertionError(msg)


class CompositeAssertions(Assertions):
    """Run several assertion units and report all failures together.

    Every member runs even after an earlier one failed. Only ``AssertionError``
    is aggregated; any other exception propagates immediately.

    Example:
        >>> assertions = CompositeAssertions(
        ...     [
        ...         StatusCodeAssertions.expecting(200),
        ...         ContentTypeAssertions("application/json"),
        ...     ]
        ... )
    """

    def __init__(self, assertions: Iterable[Assertions | Callable[[int, ModelResponse[Any], Any], None]]) -> None:
        self.assertions = [as_assertions(a) for a in assertions]

    def execute(self, status_code: int, model_response: ModelResponse[Any], model: Any) -> None:
        failures: list[AssertionError] = []
        for assertions in self.assertions:
            try:
                assertions.execute(status_code, model_response, model)
            except AssertionError as e:
                failures.append(e)

        if len(failures) == 1:
            raise failures[0]
        if failures:
            msg = f"{len(failures)} assertions failed:\n" + "\n".join(f"  - {failure}" for failure in failures)
            raise AssertionError(msg)
