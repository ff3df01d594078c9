"""
Amount normalization.

SMS notifications write the same amount in many ways ("Tk 1,000.00",
"৳1000", "1000", full-width digits from some handsets). Matching compares the
normalized ``Decimal`` values, never the raw text.

Known weak point: empty or non-numeric text normalizes to ``0``, so a blank
amount would match a zero amount. Verification only allows that when
``ALLOW_ZERO_AMOUNT_MATCH`` is enabled.
"""
import re
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Optional

ZERO = Decimal("0")

# Longest leading "digits[.digits]" run once everything else is stripped.
_NUMERIC_PREFIX = re.compile(r"\d*(?:\.\d*)?")

# ASCII and full-width full stop
_DECIMAL_POINTS = {".", "．"}


def _ascii_digits_and_points(text: str) -> str:
    kept = []
    for ch in text:
        if ch in _DECIMAL_POINTS:
            kept.append(".")
        elif ch.isdecimal():
            # full-width, Bengali, Arabic-Indic, ... digits; not "²" or "½"
            kept.append(str(unicodedata.decimal(ch)))
    return "".join(kept)


def normalize_amount(text: Optional[str]) -> Decimal:
    """Convert free-text currency into a comparable ``Decimal`` (``0`` when unparseable)."""
    if text is None:
        return ZERO

    cleaned = _ascii_digits_and_points(str(text))
    prefix = _NUMERIC_PREFIX.match(cleaned).group(0)
    if not any(ch.isdigit() for ch in prefix):
        return ZERO

    try:
        return Decimal(prefix)
    except InvalidOperation:
        return ZERO


def format_amount(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01')):,.2f}"
