"""Currency formatting tools."""

import math
from decimal import Decimal
from errors import UnsupportedFormatError
from models.budget_entry import BudgetEntry, INCOME

DEFAULT_CURRENCY = "USD"

# Codes with a dedicated symbol. Any other code is used as its own prefix.
CURRENCY_SYMBOLS = {
    "USD": "$",
}


def currency_prefix(currency_code: str) -> str:
    """Get the display prefix for a currency code (falls back to the code itself)."""
    if not currency_code:
        currency_code = DEFAULT_CURRENCY
    return CURRENCY_SYMBOLS.get(currency_code.upper(), currency_code)


def format_currency(amount, currency_code: str = DEFAULT_CURRENCY) -> str:
    """Format the absolute value of an amount with a currency prefix.

    Uses thousands separators and two decimal places. The sign is never
    rendered; callers prepend it based on the entry type.

    Args:
        amount: Decimal, int, or float amount.
        currency_code: ISO currency code, e.g. "USD".

    Returns:
        Formatted string, e.g. format_currency(1234.5, "USD") -> "$1,234.50".

    Raises:
        UnsupportedFormatError: If amount is NaN, infinite, or not a number.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise UnsupportedFormatError(f"Cannot format non-numeric amount {amount!r}")

    if isinstance(amount, Decimal):
        if not amount.is_finite():
            raise UnsupportedFormatError(f"Cannot format non-finite amount {amount}")
    elif not math.isfinite(amount):
        raise UnsupportedFormatError(f"Cannot format non-finite amount {amount}")

    return f"{currency_prefix(currency_code)}{abs(amount):,.2f}"


def signed_amount(entry: BudgetEntry, currency_code: str = DEFAULT_CURRENCY) -> str:
    """Format an entry's amount with '+' for income and '-' for everything else."""
    sign = "+" if entry.type == INCOME else "-"
    return f"{sign}{format_currency(entry.amount, currency_code)}"
