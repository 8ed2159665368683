"""Currency formatting and conversion.

Amounts in the tracker are always tagged with an ISO currency code; budgets
never mix currencies.  Conversion is only used for display and goes through
a :class:`RateProvider` so a live rate source can be plugged in later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Mapping, Optional, Union

from .budget_progress import to_decimal

CURRENCIES: Dict[str, Dict[str, str]] = {
    'USD': {'symbol': '$', 'name': 'US Dollar'},
    'EUR': {'symbol': '€', 'name': 'Euro'},
    'GBP': {'symbol': '£', 'name': 'British Pound'},
    'JPY': {'symbol': '¥', 'name': 'Japanese Yen'},
    'CAD': {'symbol': 'C$', 'name': 'Canadian Dollar'},
    'AUD': {'symbol': 'A$', 'name': 'Australian Dollar'},
    'CHF': {'symbol': 'Fr', 'name': 'Swiss Franc'},
    'CNY': {'symbol': '¥', 'name': 'Chinese Yuan'},
    'INR': {'symbol': '₹', 'name': 'Indian Rupee'},
}

# Currencies displayed without minor units
ZERO_DECIMAL_CURRENCIES = {'JPY'}


class UnknownCurrency(KeyError):
    """Raised when a currency code has no symbol or exchange rate."""


def currency_symbol(code: str) -> str:
    """Return the display symbol for ``code``.

    Raises:
        UnknownCurrency: If the code is not in :data:`CURRENCIES`.
    """
    try:
        return CURRENCIES[code]['symbol']
    except KeyError:
        raise UnknownCurrency(code) from None


def format_currency(amount: Union[Decimal, float, int], currency: str = 'USD', include_sign: bool = True) -> str:
    """Format a currency amount with thousands separators.

    Args:
        amount: The amount to format
        currency: ISO currency code used for the symbol and decimal places
        include_sign: Whether to include the currency symbol

    Returns:
        Formatted currency string (e.g. "$1,234.56" or "¥1,235")

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(1234.56, 'EUR', include_sign=False)
        '1,234.56'
    """
    places = 0 if currency in ZERO_DECIMAL_CURRENCIES else 2
    quantum = Decimal(1).scaleb(-places)
    value = to_decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    formatted = f"{abs(value):,.{places}f}"
    sign = '-' if value < 0 else ''
    return f"{sign}{currency_symbol(currency)}{formatted}" if include_sign else f"{sign}{formatted}"


class RateProvider(ABC):
    """Source of exchange rates expressed relative to a base currency."""

    base: str = 'USD'

    @abstractmethod
    def rates(self) -> Mapping[str, Decimal]:
        """Return units of each currency per one unit of :attr:`base`."""


class StaticRateProvider(RateProvider):
    """Fixed exchange rates, used until a live rate source is configured."""

    DEFAULT_RATES = {
        'USD': '1',
        'EUR': '0.85',
        'GBP': '0.73',
        'JPY': '110',
        'CAD': '1.25',
        'AUD': '1.35',
        'CHF': '0.92',
        'CNY': '6.45',
        'INR': '74.5',
    }

    def __init__(self, rates: Optional[Mapping[str, Any]] = None, base: str = 'USD'):
        source = rates if rates is not None else self.DEFAULT_RATES
        self.base = base
        self._rates = {code: to_decimal(rate) for code, rate in source.items()}
        self._rates.setdefault(base, Decimal(1))

    def rates(self) -> Mapping[str, Decimal]:
        return dict(self._rates)


def convert(amount: Any, from_code: str, to_code: str, provider: RateProvider) -> Decimal:
    """Convert ``amount`` between currencies using ``provider``'s rates.

    Raises:
        UnknownCurrency: If either code has no rate.
    """
    value = to_decimal(amount)
    if from_code == to_code:
        return value
    rates = provider.rates()
    for code in (from_code, to_code):
        if code not in rates or not rates[code]:
            raise UnknownCurrency(code)
    return value / rates[from_code] * rates[to_code]
