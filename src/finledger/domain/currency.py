"""Currency metadata and display formatting."""

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_BASE_CURRENCY = "TRY"


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    label: str
    symbol: str


CURRENCIES: Mapping[str, CurrencyInfo] = MappingProxyType(
    {
        info.code: info
        for info in (
            CurrencyInfo("TRY", "Turkish Lira", "₺"),
            CurrencyInfo("USD", "US Dollar", "$"),
            CurrencyInfo("EUR", "Euro", "€"),
        )
    }
)


def supported_codes() -> list[str]:
    """Return currency codes in table order."""
    return list(CURRENCIES)


def is_supported(code: str) -> bool:
    return code in CURRENCIES


def is_currency_code(code: object) -> bool:
    """Return True for three-letter upper-case codes, known or not."""
    return isinstance(code, str) and len(code) == 3 and code.isalpha() and code.isupper()


def get_symbol(code: str) -> str:
    """Return the display symbol for a currency, falling back to the code itself."""
    info = CURRENCIES.get(code)
    return info.symbol if info else code


def format_currency(amount: Optional[Decimal], code: str) -> str:
    """Format an amount with its currency symbol and two decimals.

    Args:
        amount: Amount to format, or None when unknown
        code: Currency code

    Returns:
        Formatted string such as "₺1,234.50", or "-" for a missing amount
    """
    if amount is None:
        return "-"
    sign = "-" if amount < 0 else ""
    return f"{sign}{get_symbol(code)}{abs(amount):,.2f}"
