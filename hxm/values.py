"""Typed literal codec shared by the assembler and the image reader.

Every operand and resource in an HXM image is a fixed-width little-endian
scalar. The width of each type is fixed here and nowhere else.
"""

from __future__ import annotations

import re
import struct
from enum import Enum
from typing import Dict, Union

from .errors import ValueFormatError


class ValueType(Enum):
    UINT = "uint"  # uint32
    USHORT = "ushort"  # uint16
    BYTE = "byte"  # uint8
    INT = "int"  # int32
    SHORT = "short"  # int16
    CHAR = "char"  # ASCII, one byte
    WIDECHAR = "widechar"  # UTF-16 code unit
    FLOAT = "float"  # float32
    DOUBLE = "double"  # float64
    LONG = "long"  # int64
    ULONG = "ulong"  # uint64


_WIDTHS: Dict[ValueType, int] = {
    ValueType.UINT: 4,
    ValueType.USHORT: 2,
    ValueType.BYTE: 1,
    ValueType.INT: 4,
    ValueType.SHORT: 2,
    ValueType.CHAR: 1,
    ValueType.WIDECHAR: 2,
    ValueType.FLOAT: 4,
    ValueType.DOUBLE: 8,
    ValueType.LONG: 8,
    ValueType.ULONG: 8,
}

_STRUCTS: Dict[ValueType, struct.Struct] = {
    ValueType.UINT: struct.Struct("<I"),
    ValueType.USHORT: struct.Struct("<H"),
    ValueType.BYTE: struct.Struct("<B"),
    ValueType.INT: struct.Struct("<i"),
    ValueType.SHORT: struct.Struct("<h"),
    ValueType.FLOAT: struct.Struct("<f"),
    ValueType.DOUBLE: struct.Struct("<d"),
    ValueType.LONG: struct.Struct("<q"),
    ValueType.ULONG: struct.Struct("<Q"),
}

_FLOAT_TYPES = frozenset({ValueType.FLOAT, ValueType.DOUBLE})
_CHAR_LIMITS = {ValueType.CHAR: 0xFF, ValueType.WIDECHAR: 0xFFFF}

INT_LITERAL_RE = re.compile(r"\s*[+-]?[0-9]+\s*")

Value = Union[int, float, str]


def byte_width(value_type: ValueType) -> int:
    """Return the encoded size of ``value_type`` in bytes."""

    return _WIDTHS[value_type]


def _parse_int(value_type: ValueType, text: str) -> int:
    if not isinstance(text, str) or not INT_LITERAL_RE.fullmatch(text):
        raise ValueFormatError(f"'{text}' is not a valid {value_type.value} literal")
    return int(text)


def _parse_float(value_type: ValueType, text: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError) as exc:
        raise ValueFormatError(f"'{text}' is not a valid {value_type.value} literal") from exc


def _encode_char(value_type: ValueType, text: str) -> bytes:
    if not isinstance(text, str) or len(text) != 1:
        raise ValueFormatError(f"{value_type.value} literal must be exactly one character, got '{text}'")
    code = ord(text)
    if code > _CHAR_LIMITS[value_type]:
        raise ValueFormatError(f"character {text!r} cannot be encoded as {value_type.value}")
    return code.to_bytes(byte_width(value_type), "little")


def encode_value(value_type: ValueType, text: str) -> bytes:
    """Encode the literal ``text`` as ``value_type``.

    Integers are decimal with an optional sign; surrounding whitespace is
    ignored. Values outside the type's range are rejected rather than
    wrapped. Raises :class:`ValueFormatError` on any failure, including a
    ``value_type`` that is not a :class:`ValueType` member.
    """

    if not isinstance(value_type, ValueType):
        raise ValueFormatError(f"unsupported value type {value_type!r}")
    if value_type in _CHAR_LIMITS:
        return _encode_char(value_type, text)
    if value_type in _FLOAT_TYPES:
        number: Union[int, float] = _parse_float(value_type, text)
    else:
        number = _parse_int(value_type, text)
    try:
        return _STRUCTS[value_type].pack(number)
    except (struct.error, OverflowError) as exc:
        raise ValueFormatError(f"{text.strip()} is out of range for {value_type.value}") from exc


def decode_value(value_type: ValueType, data: bytes) -> Value:
    """Decode one value previously produced by :func:`encode_value`."""

    width = byte_width(value_type)
    if len(data) != width:
        raise ValueFormatError(f"{value_type.value} expects {width} bytes, got {len(data)}")
    if value_type in _CHAR_LIMITS:
        return chr(int.from_bytes(data, "little"))
    return _STRUCTS[value_type].unpack(data)[0]


def parse_binary_byte(text: str) -> int:
    """Parse an 8-digit binary literal such as ``0000 0001``; spaces are ignored."""

    digits = text.replace(" ", "")
    if len(digits) < 8:
        raise ValueFormatError(f"binary byte '{text}' needs 8 digits, found {len(digits)}")
    if len(digits) > 8 or digits.strip("01"):
        raise ValueFormatError(f"binary byte '{text}' must be exactly 8 digits of 0 or 1")
    return int(digits, 2)


def encode_binary_byte(text: str) -> bytes:
    return bytes([parse_binary_byte(text)])


def encode_string(text: str) -> bytes:
    """ASCII-encode ``text``; characters outside ASCII become ``?``."""

    return text.encode("ascii", "replace")


__all__ = [
    "ValueType",
    "Value",
    "byte_width",
    "encode_value",
    "decode_value",
    "parse_binary_byte",
    "encode_binary_byte",
    "encode_string",
]
