"""Amount coercion utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any, Optional

CENT = Decimal("0.01")

# Ledger columns hold 14 digits, 2 of them after the point.
MAX_AMOUNT = Decimal("999999999999.99")


def parse_amount(value: Any) -> Decimal:
    """Coerce a source amount into a Decimal rounded to cents.

    Accepts Decimal, int, float (via its shortest repr, so 12.1 stays 12.10)
    and strings such as "12.50", "$1,234.56" or "(10.00)" for negatives.
    Booleans are rejected.

    Raises:
        ValueError: If the value cannot be interpreted as an amount
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Could not parse amount {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("Empty amount string")
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1]
        text = re.sub(r"[$€£¥,\s]", "", text)
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Could not parse amount '{value}'") from e
        if negative:
            amount = -amount

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"Amount {value!r} is out of range")
    try:
        return amount.quantize(CENT)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{value}'") from e


def parse_optional_amount(value: Any) -> Optional[Decimal]:
    """Like parse_amount, but None passes through."""
    if value is None:
        return None
    return parse_amount(value)
