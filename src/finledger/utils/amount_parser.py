"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from finledger.domain.currency import CURRENCIES

_SYMBOLS = re.compile("[" + re.escape("".join(info.symbol for info in CURRENCIES.values())) + "]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45", "€123.45", "₺123.45"
    - "1,234.56"
    - "123.45 USD"

    Sign is kept; range checks belong to the record validation.

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

    # Remove currency symbols and trailing codes
    amount_str = _SYMBOLS.sub("", amount_str)
    amount_str = re.sub(r"\s+[A-Za-z]{3}$", "", amount_str)

    # Remove thousands separators
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount
