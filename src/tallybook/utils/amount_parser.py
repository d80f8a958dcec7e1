"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
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

    # Remove currency symbols, thousands separators and whitespace
    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_line_amount(spec: str) -> tuple[str, Decimal]:
    """Parse a "CODE:AMOUNT" line specification.

    Args:
        spec: Account code and amount separated by a colon, e.g. "1020:250.00"

    Returns:
        Tuple of (account code, amount)

    Raises:
        ValueError: If the specification is malformed
    """
    code, sep, amount = spec.rpartition(":")
    if not sep or not code.strip():
        raise ValueError(f"Invalid line '{spec}'. Expected CODE:AMOUNT, e.g. 1020:250.00")
    return code.strip(), parse_amount(amount)


def format_amount(amount: Decimal) -> str:
    """Format an amount with thousands separators and two decimals.

    Negative amounts are shown in parentheses, e.g. "(1,234.50)".
    """
    value = Decimal(amount).quantize(CENT)
    if value < 0:
        return f"({-value:,.2f})"
    return f"{value:,.2f}"
