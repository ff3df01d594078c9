from decimal import Decimal

import pytest

from sms_ledger.amounts import format_amount, normalize_amount


@pytest.mark.parametrize(
    "text",
    [
        "1000",
        "1,000.00",
        "1,000.00Tk",
        "Tk 1000.00",
        "৳1000",
        "１000",
        "BDT 1 000",
        "১০০০",
    ],
)
def test_currency_text_variants_normalize_to_same_value(text):
    assert normalize_amount(text) == Decimal("1000")


def test_equality_is_numeric_not_textual():
    assert normalize_amount("500") == normalize_amount("500.00")
    assert normalize_amount("Tk 500") == normalize_amount("৳ 500.0")
    assert normalize_amount("500") != normalize_amount("50")


def test_full_width_decimal_point():
    assert normalize_amount("１２．５０") == Decimal("12.5")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Tk 5²", "5"),
        ("½", "0"),
        ("3½", "3"),
        ("Tk ⑤00", "0"),
    ],
)
def test_non_decimal_numerals_are_dropped(text, expected):
    assert normalize_amount(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", None, "   ", "Tk", "abc", "."])
def test_empty_or_non_numeric_is_zero(text):
    assert normalize_amount(text) == Decimal("0")


def test_extra_decimal_points_keep_leading_number():
    assert normalize_amount("1.000.50") == Decimal("1.000")


def test_fractional_amounts():
    assert normalize_amount("Tk 12.50") == Decimal("12.5")


def test_format_amount_two_decimals():
    assert format_amount(Decimal("1234.5")) == "1,234.50"
    assert format_amount(Decimal("0")) == "0.00"
