"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥₦₹]|\b(?:USD|GBP|EUR)\b")
_DIRECTION_SUFFIX = re.compile(r"\s*(CR|DR|DB)$", re.IGNORECASE)


def parse_amount(amount_str: str | int | float | Decimal) -> Decimal:
    """Parse an amount string into a signed Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45" / "£1,234.56"
    - "-123.45" / "-$123.45" / "+$2,345.67"
    - "(123.45)" (negative in parentheses)
    - "500.00 DR" (negative) / "500.00 CR"
    - native numbers from JSON or spreadsheet cells

    Args:
        amount_str: Amount string or number

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if isinstance(amount_str, bool):
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if isinstance(amount_str, (Decimal, int, float)):
        # str() first so floats from spreadsheets keep their printed value
        amount = amount_str if isinstance(amount_str, Decimal) else Decimal(str(amount_str))
        if not amount.is_finite():
            raise ValueError(f"Could not parse amount '{amount_str}'")
        return amount

    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = str(amount_str).strip().replace("−", "-")

    # Trailing CR/DR markers
    is_negative = False
    suffix = _DIRECTION_SUFFIX.search(amount_str)
    if suffix:
        is_negative = suffix.group(1).upper() in ("DR", "DB")
        amount_str = amount_str[: suffix.start()]

    # Trailing minus ("5.50-")
    if amount_str.endswith("-") and len(amount_str) > 1:
        is_negative = True
        amount_str = amount_str[:-1].rstrip()

    # Handle parentheses notation (negative)
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = _CURRENCY_SYMBOLS.sub("", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Remove whitespace again
    amount_str = amount_str.replace(" ", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -abs(amount) if is_negative else amount


def parse_comma_decimal(amount_str: str) -> Decimal:
    """Parse a SWIFT style amount where ',' is the decimal mark ("1234,56")."""
    cleaned = amount_str.strip().replace(".", "").replace(",", ".")
    if cleaned.endswith("."):
        cleaned += "0"
    try:
        return Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
