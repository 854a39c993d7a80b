"""Response model decoding."""

from __future__ import annotations

from pytest_bastion.model.converters import (
    BytesConverter,
    DataclassConverter,
    Decoded,
    DecodingHints,
    JsonConverter,
    PydanticConverter,
    ResponseModelConverter,
    StringConverter,
    build_dataclass,
    default_converters,
    is_instance_of,
)

__all__ = [
    "BytesConverter",
    "DataclassConverter",
    "Decoded",
    "DecodingHints",
    "JsonConverter",
    "PydanticConverter",
    "ResponseModelConverter",
    "StringConverter",
    "build_dataclass",
    "default_converters",
    "is_instance_of",
]
