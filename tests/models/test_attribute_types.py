from __future__ import annotations

from decimal import Decimal

import pytest

from occi_codec.models.attributes import (
    NumberKind,
    WireType,
    classify,
    coerce_default,
    json_number,
    parse_boolean,
    parse_number,
)


@pytest.mark.parametrize(
    ("type_name", "expected"),
    [
        ("integer", WireType.NUMBER),
        ("Int", WireType.NUMBER),
        ("java.lang.Long", WireType.NUMBER),
        ("double", WireType.NUMBER),
        ("BigDecimal", WireType.NUMBER),
        ("list", WireType.ARRAY),
        ("java.util.Map", WireType.ARRAY),
        ("boolean", WireType.BOOLEAN),
        ("string", WireType.STRING),
        ("enum", WireType.STRING),
        ("ipv4address", WireType.STRING),
        (None, WireType.STRING),
    ],
)
def test_classify_type_names(type_name, expected) -> None:
    assert classify(type_name)[0] is expected


def test_parse_number_by_kind() -> None:
    assert parse_number("12", NumberKind.INTEGER) == 12
    assert parse_number(" 4.5 ", NumberKind.DOUBLE) == 4.5
    assert parse_number("1.10", NumberKind.BIGDECIMAL) == Decimal("1.10")
    assert parse_number("7", None) == 7
    assert parse_number("7.5", None) == 7.5
    with pytest.raises(ValueError):
        parse_number("4.5", NumberKind.INTEGER)
    with pytest.raises(ValueError):
        parse_number("abc", NumberKind.BIGDECIMAL)


def test_parse_boolean() -> None:
    assert parse_boolean("TRUE") is True
    assert parse_boolean("false") is False
    with pytest.raises(ValueError):
        parse_boolean("yes")


def test_coerce_default_to_wire_type() -> None:
    assert coerce_default("2", "integer") == 2
    assert coerce_default("2.50", "bigdecimal") == 2.5
    assert coerce_default("true", "boolean") is True
    assert coerce_default("eth0", "string") == "eth0"
    assert coerce_default(None, "integer") is None
    with pytest.raises(ValueError):
        coerce_default("two", "integer")


def test_json_number_converts_decimals() -> None:
    assert json_number(Decimal("3")) == 3
    assert isinstance(json_number(Decimal("3.0")), int)
    assert json_number(Decimal("0.25")) == 0.25
    assert json_number(5) == 5


@pytest.mark.parametrize(
    ("literal", "kind"),
    [
        ("NaN", NumberKind.DOUBLE),
        ("inf", NumberKind.FLOAT),
        ("-Infinity", None),
        ("1e400", NumberKind.DOUBLE),
        ("NaN", NumberKind.BIGDECIMAL),
    ],
)
def test_non_finite_numbers_are_rejected(literal, kind) -> None:
    with pytest.raises(ValueError):
        parse_number(literal, kind)
    with pytest.raises(ValueError):
        coerce_default(literal, kind.value if kind else "double")


def test_large_integral_decimals_are_kept() -> None:
    assert parse_number("1e400", NumberKind.BIGDECIMAL) == Decimal("1e400")
