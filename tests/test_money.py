from decimal import Decimal

import pytest

from presupuestos import constants
from presupuestos.parsing.money import (
    NumberParseError,
    canonical,
    format_es,
    format_eur,
    parse_number,
    to_canonical,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1.234,56", Decimal("1234.56")),
        ("1234,56", Decimal("1234.56")),
        ("121,00", Decimal("121.00")),
        ("121.00", Decimal("121.00")),
        ("1.234.567,8", Decimal("1234567.8")),
        ("1 234,56 €", Decimal("1234.56")),
        ("21,00%", Decimal("21.00")),
        ("-15,5", Decimal("-15.5")),
        (15.5, Decimal("15.5")),
        (21, Decimal("21")),
    ],
)
def test_parse_number_spanish_formats(value, expected):
    assert parse_number(value) == expected


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_number_absent_is_zero(value):
    assert parse_number(value, strict=True) == Decimal("0")


@pytest.mark.parametrize("value", ["abc", "12,3,4", "NaN", "Infinity", float("nan")])
def test_parse_number_malformed_lenient(value):
    assert parse_number(value, strict=False) == Decimal("0")


def test_parse_number_malformed_strict():
    with pytest.raises(NumberParseError) as exc:
        parse_number("doce", field="amount", strict=True)
    assert "amount" in str(exc.value)
    assert exc.value.value == "doce"


def test_parse_number_strict_from_env_constant(monkeypatch):
    monkeypatch.setattr(constants, "STRICT_NUMBERS", True)
    with pytest.raises(NumberParseError):
        parse_number("x")
    assert parse_number("x", strict=False) == Decimal("0")


def test_to_canonical_rounds_half_up():
    assert to_canonical(Decimal("2.345")) == "2.35"
    assert to_canonical(Decimal("-15.5")) == "-15.50"
    assert to_canonical(Decimal("-0.001")) == "0.00"
    assert to_canonical(Decimal("1234567.891")) == "1234567.89"


def test_canonical_is_idempotent():
    once = canonical("1.234,56")
    assert once == "1234.56"
    assert canonical(once) == once


def test_spanish_display_format():
    assert format_es(Decimal("1234.5")) == "1.234,50"
    assert format_es(Decimal("21"), decimals=0) == "21"
    assert format_eur(Decimal("4995")) == "4.995,00 €"
