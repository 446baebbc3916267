"""Display-only currency conversion from the base currency (TRY)."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from quotedesk.app.schemas.quote_draft import Currency

BASE_CURRENCY = Currency.TRY

# TRY per one unit of the currency; approximate, not fetched.
CURRENCY_RATES: dict[Currency, Decimal] = {
    Currency.TRY: Decimal("1"),
    Currency.USD: Decimal("34.50"),
    Currency.EUR: Decimal("37.80"),
}

CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.TRY: "₺",
    Currency.USD: "$",
    Currency.EUR: "€",
}


def resolve_rate(currency: Currency, manual_rate: Optional[Decimal] = None) -> Decimal:
    """Return the rate for ``currency``; a positive manual rate overrides the table for non-base currencies."""
    currency = Currency(currency)
    rate = CURRENCY_RATES[currency]
    if currency != BASE_CURRENCY and manual_rate is not None and manual_rate > 0:
        rate = Decimal(manual_rate)
    return rate


def convert(amount: Decimal, currency: Currency, manual_rate: Optional[Decimal] = None) -> Decimal:
    return Decimal(amount) / resolve_rate(currency, manual_rate)


def format_amount(amount: Decimal, currency: Currency) -> str:
    """Format as tr-TR currency text: ``₺1.234,56``."""
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    grouped = f"{abs(quantized):,.2f}"
    # swap separators: 1,234.56 -> 1.234,56
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{CURRENCY_SYMBOLS[Currency(currency)]}{localized}"


def present(amount: Decimal, currency: Currency, manual_rate: Optional[Decimal] = None) -> str:
    return format_amount(convert(amount, currency, manual_rate), currency)
