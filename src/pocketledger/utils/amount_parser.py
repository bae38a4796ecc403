"""Amount parsing and minor-unit conversion utilities."""

from decimal import Decimal, InvalidOperation
import re

CENTS_PER_UNIT = 100


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R$123.45" / "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"R\$|[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def to_cents(amount: Decimal | int | float | str) -> int:
    """Convert an amount in major units to integer cents.

    Floats go through their string form so 19.99 becomes 1999, not 1998.

    Raises:
        ValueError: If the amount is not a number or has more than two decimal places
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    cents = value * CENTS_PER_UNIT
    if cents != cents.to_integral_value():
        raise ValueError(f"Amount {amount} has more than two decimal places")
    return int(cents)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a Decimal amount in major units."""
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(Decimal("0.01"))


def format_cents(cents: int, currency: str | None = None) -> str:
    """Format cents for display, e.g. ``-1234`` -> ``-12.34 BRL``."""
    text = f"{from_cents(cents):,.2f}"
    return f"{text} {currency}" if currency else text
