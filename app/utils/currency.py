"""
Ledgerline - Currency Helpers

Decimal conversion, rounding to cents, and display formatting.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "PHP": "₱",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "NGN": "₦",
    "JPY": "¥",
}


def to_decimal(value: Any) -> Decimal:
    """Convert numbers (and numeric strings) to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round_currency(value: Any) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Any, currency: str = "PHP") -> str:
    """
    Format an amount for display, e.g. ``format_currency(1234.5)`` -> "₱1,234.50".

    Unknown currency codes are shown as a prefix ("CHF 1,234.50").
    """
    value = round_currency(amount)
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
