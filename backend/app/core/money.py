"""Decimal helpers for monetary values received as text.

The backend serialises every amount as a string and the payment dialog
receives amounts typed by the user, so all parsing goes through here and
is converted exactly once.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def parse_amount_or_none(value: Any) -> Decimal | None:
    """Parse a monetary value, returning None when it is empty or not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int | float):
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def parse_amount(value: Any) -> Decimal:
    """Parse a monetary value, falling back to zero on any parse failure."""
    amount = parse_amount_or_none(value)
    return ZERO if amount is None else amount


def parse_non_negative_amount(value: Any) -> Decimal:
    amount = parse_amount(value)
    return amount if amount > ZERO else ZERO

