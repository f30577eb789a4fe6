"""Attribute type classification and value coercion.

Declared attribute types arrive as free-text type names (``"integer"``,
``"bigdecimal"``, ``"list"`` ...). They are mapped once, through
:data:`TYPE_NAME_TABLE`, onto a closed set of wire types; any name missing from
the table is the string case.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class WireType(str, Enum):
    """Type names used in the discovery document attribute schema."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


class NumberKind(str, Enum):
    """Numeric subtype used to parse number values and defaults."""

    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BIGDECIMAL = "bigdecimal"


class ValueType(str, Enum):
    """Type tag the domain model reports for an attribute value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


TYPE_NAME_TABLE: dict[str, tuple[WireType, NumberKind | None]] = {
    "integer": (WireType.NUMBER, NumberKind.INTEGER),
    "int": (WireType.NUMBER, NumberKind.INTEGER),
    "long": (WireType.NUMBER, NumberKind.LONG),
    "float": (WireType.NUMBER, NumberKind.FLOAT),
    "double": (WireType.NUMBER, NumberKind.DOUBLE),
    "bigdecimal": (WireType.NUMBER, NumberKind.BIGDECIMAL),
    "list": (WireType.ARRAY, None),
    "set": (WireType.ARRAY, None),
    "collection": (WireType.ARRAY, None),
    "map": (WireType.ARRAY, None),
    "boolean": (WireType.BOOLEAN, None),
    "string": (WireType.STRING, None),
    "": (WireType.STRING, None),
}


def classify(type_name: str | None) -> tuple[WireType, NumberKind | None]:
    """Map a declared type name onto its wire type and numeric subtype."""
    if type_name is None:
        return WireType.STRING, None
    # Qualified names such as ``java.lang.Integer`` classify by their last segment.
    key = type_name.rsplit(".", 1)[-1].strip().lower()
    return TYPE_NAME_TABLE.get(key, (WireType.STRING, None))


def parse_number(value: str, kind: NumberKind | None) -> int | float | Decimal:
    """Parse ``value`` with the given numeric subtype.

    NaN and infinities, including literals that overflow a float, are rejected
    since JSON cannot represent them.

    Raises:
        ValueError: If ``value`` is not a valid finite number of that subtype.
    """
    text = value.strip()
    number: int | float | Decimal
    if kind in (NumberKind.INTEGER, NumberKind.LONG):
        number = int(text)
    elif kind in (NumberKind.FLOAT, NumberKind.DOUBLE):
        number = float(text)
    elif kind is NumberKind.BIGDECIMAL:
        try:
            number = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal literal: {value!r}") from exc
    else:
        try:
            number = int(text)
        except ValueError:
            number = float(text)
    if not _is_finite(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


def _is_finite(number: int | float | Decimal) -> bool:
    if isinstance(number, Decimal):
        if not number.is_finite():
            return False
        # Fractional decimals are rendered as floats.
        return number == number.to_integral_value() or math.isfinite(float(number))
    if isinstance(number, float):
        return math.isfinite(number)
    return True


def parse_boolean(value: str) -> bool:
    """Parse ``"true"``/``"false"`` (case-insensitive).

    Raises:
        ValueError: For any other literal.
    """
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"invalid boolean literal: {value!r}")


def coerce_default(default: str | None, type_name: str | None) -> Any:
    """Convert a declared default value into its wire type.

    Raises:
        ValueError: When the default cannot be represented in the wire type.
    """
    if default is None:
        return None
    wire_type, number_kind = classify(type_name)
    if wire_type is WireType.NUMBER:
        return json_number(parse_number(default, number_kind))
    if wire_type is WireType.BOOLEAN:
        return parse_boolean(default)
    return default


def json_number(value: int | float | Decimal) -> int | float:
    """Return a JSON-serialisable form of a parsed number."""
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


__all__ = [
    "NumberKind",
    "TYPE_NAME_TABLE",
    "ValueType",
    "WireType",
    "classify",
    "coerce_default",
    "json_number",
    "parse_boolean",
    "parse_number",
]
