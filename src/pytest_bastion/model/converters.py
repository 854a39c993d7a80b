"""Converters that decode responses into typed models.

A Bastion builder tries its converters in registration order and keeps the
first result. Converters report "cannot handle this" by returning ``None``
and must never raise for an unsupported type or a malformed body, so the next
converter in the chain still gets its turn.
"""

from __future__ import annotations

import dataclasses
import json
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytest_bastion.execution.response import Response


@dataclass(frozen=True)
class DecodingHints:
    """Information passed to every converter attempt.

    Attributes:
        model_type: The type the Bastion builder was bound to.
    """

    model_type: Any


@dataclass(frozen=True)
class Decoded:
    """A successful decode attempt.

    Wrapping the value keeps a decoded ``None`` (JSON ``null``) apart from a
    converter declining to decode.
    """

    value: Any


class ResponseModelConverter(ABC):
    """Strategy that attempts to produce a model from a response."""

    @abstractmethod
    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        """Attempt to decode the response.

        Args:
            response: The response to decode. Must not be modified.
            hints: Decoding hints carrying the requested model type.

        Returns:
            A ``Decoded`` value, or ``None`` when this converter cannot produce
            the requested type from this response.
        """
        ...


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def is_instance_of(value: Any, model_type: Any) -> bool:
    """Check a decoded value against a model type.

    Parameterized generics are checked against their origin (``list[int]``
    against ``list``) and unions against any member. ``Any`` and ``object``
    accept every value.
    """
    if model_type is Any or model_type is object:
        return True
    if model_type is None or model_type is type(None):
        return value is None
    if _is_union(model_type):
        return any(is_instance_of(value, arg) for arg in get_args(model_type))
    origin = get_origin(model_type) or model_type
    if isinstance(origin, type):
        return isinstance(value, origin)
    return False


def _is_json_media_type(content_type: str | None) -> bool:
    return content_type is not None and (content_type == "application/json" or content_type.endswith("+json"))


def _parse_json(response: Response) -> Decoded | None:
    if not response.body:
        return None
    try:
        return Decoded(response.json())
    except (ValueError, RecursionError):
        return None


class StringConverter(ResponseModelConverter):
    """Decodes the body as text for ``str``, ``object`` and ``Any`` models."""

    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        if hints.model_type in (str, object, Any):
            return Decoded(response.text)
        return None


class BytesConverter(ResponseModelConverter):
    """Hands out the raw body for ``bytes`` models."""

    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        if hints.model_type is bytes:
            return Decoded(response.body)
        return None


class JsonConverter(ResponseModelConverter):
    """Parses JSON bodies into plain Python values.

    ``dict`` and ``list`` models (including parameterized forms) are parsed
    whatever the content type. ``object`` and ``Any`` models are only parsed
    when the response declares a JSON media type, leaving other bodies to
    :class:`StringConverter`.
    """

    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        model_type = hints.model_type
        origin = get_origin(model_type) or model_type
        if origin in (dict, list):
            decoded = _parse_json(response)
            if decoded is None or not isinstance(decoded.value, origin):
                return None
            return decoded
        if model_type in (object, Any) and _is_json_media_type(response.content_type):
            return _parse_json(response)
        return None


_SCALAR_TYPES = (bool, int, float, str)


def _field_types(cls: type, localns: Mapping[str, Any] | None) -> dict[str, Any]:
    """Resolve the field annotations of a dataclass.

    Annotations naming something that cannot be resolved, such as a class
    defined inside a function, map to ``Any`` so their values pass through.
    """
    namespace = {cls.__name__: cls, **(localns or {})}
    try:
        return get_type_hints(cls, localns=namespace)
    except NameError:
        pass

    resolved: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        holder = type("_FieldAnnotation", (), {"__annotations__": {f.name: f.type}, "__module__": cls.__module__})
        try:
            resolved[f.name] = get_type_hints(holder, localns=namespace).get(f.name, Any)
        except NameError:
            resolved[f.name] = Any
    return resolved


def _coerce(tp: Any, value: Any, localns: Mapping[str, Any] | None) -> Any:
    """Convert a JSON value to the annotated type.

    Raises:
        TypeError: If the value cannot have the annotated type.
    """
    if tp is type(None):
        if value is not None:
            msg = f"Expected null, got {type(value).__name__}"
            raise TypeError(msg)
        return value
    if _is_union(tp):
        for arg in get_args(tp):
            try:
                return _coerce(arg, value, localns)
            except TypeError:
                continue
        msg = f"{value!r} matches no member of {tp}"
        raise TypeError(msg)
    if tp in _SCALAR_TYPES:
        # bool is an int subclass; ints are accepted where floats are expected
        matches = isinstance(value, tp) and (tp is bool or not isinstance(value, bool))
        if tp is float:
            matches = isinstance(value, (int, float)) and not isinstance(value, bool)
        if not matches:
            msg = f"Expected {tp.__name__}, got {type(value).__name__}"
            raise TypeError(msg)
        return value
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        if not isinstance(value, dict):
            msg = f"Expected an object for {tp.__name__}, got {type(value).__name__}"
            raise TypeError(msg)
        return build_dataclass(tp, value, localns)
    if tp is list or get_origin(tp) is list:
        if not isinstance(value, list):
            msg = f"Expected an array, got {type(value).__name__}"
            raise TypeError(msg)
        args = get_args(tp)
        item_type = args[0] if args else Any
        return [_coerce(item_type, item, localns) for item in value]
    return value


def build_dataclass(cls: type, data: dict[str, Any], localns: Mapping[str, Any] | None = None) -> Any:
    """Instantiate a dataclass from a JSON object.

    Keys without a matching init field are ignored. Nested dataclasses,
    ``list[...]`` of dataclasses and optional dataclasses are built recursively.
    Values annotated ``bool``, ``int``, ``float`` or ``str`` must already have
    that JSON type.

    Args:
        cls: The dataclass to build.
        data: The parsed JSON object.
        localns: Extra names for resolving string annotations, e.g. classes
            defined inside a function.

    Raises:
        TypeError: If a required field is missing or a value has the wrong type.
    """
    hints = _field_types(cls, localns)
    kwargs = {
        f.name: _coerce(hints.get(f.name, Any), data[f.name], localns)
        for f in dataclasses.fields(cls)
        if f.init and f.name in data
    }
    return cls(**kwargs)


class DataclassConverter(ResponseModelConverter):
    """Builds dataclass models from JSON object bodies.

    Example:
        Classes defined inside a function are not visible to annotation
        lookup; pass them in to have them built rather than left as dicts::

            converter = DataclassConverter(localns={"Address": Address})
    """

    def __init__(self, localns: Mapping[str, Any] | None = None) -> None:
        self.localns = dict(localns or {})

    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        model_type = hints.model_type
        if not (isinstance(model_type, type) and dataclasses.is_dataclass(model_type)):
            return None
        decoded = _parse_json(response)
        if decoded is None or not isinstance(decoded.value, dict):
            return None
        try:
            return Decoded(build_dataclass(model_type, decoded.value, self.localns))
        except (TypeError, ValueError, RecursionError):
            return None


def _is_pydantic_model(typ: Any) -> bool:
    """Check if type is a Pydantic model."""
    try:
        from pydantic import BaseModel

        return isinstance(typ, type) and issubclass(typ, BaseModel)
    except ImportError:
        return False


class PydanticConverter(ResponseModelConverter):
    """Validates JSON bodies into Pydantic models.

    Declines every type when ``pydantic`` is not installed.
    """

    def decode(self, response: Response, hints: DecodingHints) -> Decoded | None:
        if not _is_pydantic_model(hints.model_type) or not response.body:
            return None
        from pydantic import ValidationError

        try:
            return Decoded(hints.model_type.model_validate_json(response.body))
        except (ValidationError, RecursionError):
            return None


def default_converters() -> list[ResponseModelConverter]:
    """Return a fresh list of the built-in converters, most specific first."""
    return [PydanticConverter(), DataclassConverter(), JsonConverter(), StringConverter(), BytesConverter()]
