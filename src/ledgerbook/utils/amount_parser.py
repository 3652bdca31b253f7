"""Parsing of user-entered amounts."""

from decimal import Decimal, InvalidOperation
import re

CURRENCY_SYMBOLS = "$€£¥₿Ξ₮"

_NOISE = re.compile(rf"[{re.escape(CURRENCY_SYMBOLS)},\s]")
_ACCOUNTING_NEGATIVE = re.compile(r"^\((?P<inner>.*)\)$")


def parse_amount(text: str) -> Decimal:
    """Turn a typed amount into a finite Decimal in major units.

    Accepts plain numbers ("123.45", "-50"), thousands separators
    ("1,234.56"), a leading currency symbol ("$20", "€ 20", "₿0.005")
    and accounting negatives ("(99.90)").

    Raises:
        ValueError: If nothing numeric is left after cleanup, or the value is
            NaN or infinite.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("Empty amount string")

    sign = 1
    match = _ACCOUNTING_NEGATIVE.match(cleaned)
    if match:
        sign = -1
        cleaned = match.group("inner")
    cleaned = _NOISE.sub("", cleaned)

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{text}'") from None
    if not value.is_finite():
        raise ValueError(f"Could not parse amount '{text}'")
    return value * sign
