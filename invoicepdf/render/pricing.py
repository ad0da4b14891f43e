from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

CENT = Decimal("0.01")


def _minor_units_to_str(value: int | float) -> str:
    try:
        amount = (Decimal(value) / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        # nan / inf
        return str(value)
    return f"{amount:.2f}"


def pretty_price(value: object, currency: Optional[str] = None) -> str:
    """
    Display string for an amount.

    Numbers are integer counts of minor currency units (cents) and render with
    two decimals; strings are already formatted and pass through untouched.
    A missing value renders as empty text. A non-empty currency code is always
    appended after a single space, even to empty text.
    """
    if isinstance(value, bool):
        text = str(value)
    elif isinstance(value, (int, float)):
        text = _minor_units_to_str(value)
    elif value is None:
        text = ""
    else:
        text = str(value)

    if currency:
        return f"{text} {currency}"
    return text
