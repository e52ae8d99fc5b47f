"""
Structured values: the in-memory form of parsed parameter documents.

Parsed documents are plain Python data. The tagged union is:

- None  -> ValueKind.NULL
- bool  -> ValueKind.BOOL
- int   -> ValueKind.INT (exact, signed 64-bit range)
- float -> ValueKind.FLOAT
- str   -> ValueKind.STRING
- list  -> ValueKind.SEQUENCE
- dict  -> ValueKind.MAPPING (string keys, insertion ordered)

Mappings and sequences own their children; nothing is shared between
trees handed out by the codec or the merge engine.
"""

from __future__ import annotations

import enum as _enum
import typing as _typing

import layerparams.constants as constants


class ValueKind(_enum.Enum):
    """Tag of a structured value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def kind_of(value: _typing.Any) -> ValueKind:
    """
    Return the tag of a structured value.

    Raises:
        TypeError: If value is not one of the structured value types.
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    raise TypeError(f"Not a structured value: {type(value).__name__}")


def is_mapping(value: _typing.Any) -> bool:
    """Check if a value is a mapping, the only kind that merges and is never a ledger leaf."""
    return isinstance(value, dict)


def fits_int64(number: int) -> bool:
    """Check if an integer fits in a signed 64-bit range."""
    return constants.INT64_MIN <= number <= constants.INT64_MAX


def widen_int(number: int) -> int | float:
    """Keep an integer exact when it fits 64 bits, otherwise widen to float."""
    if fits_int64(number):
        return number
    return float(number)
