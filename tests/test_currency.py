from decimal import Decimal

import pytest

from finance_tracker.currency import (
    StaticRateProvider,
    UnknownCurrency,
    convert,
    currency_symbol,
    format_currency,
)


@pytest.mark.parametrize("amount, currency, expected", [
    (1234.56, 'USD', '$1,234.56'),
    (Decimal('0.005'), 'USD', '$0.01'),
    (1234.5, 'JPY', '¥1,235'),
    (-5, 'GBP', '-£5.00'),
    ('1000000', 'EUR', '€1,000,000.00'),
])
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_format_currency_without_symbol():
    assert format_currency(1234.56, 'EUR', include_sign=False) == '1,234.56'


def test_unknown_currency():
    with pytest.raises(UnknownCurrency):
        currency_symbol('XYZ')
    with pytest.raises(UnknownCurrency):
        format_currency(1, 'XYZ')


def test_convert_with_static_rates():
    provider = StaticRateProvider()
    assert convert(100, 'USD', 'EUR', provider) == Decimal('85')
    assert convert(42, 'GBP', 'GBP', provider) == Decimal('42')


def test_convert_with_custom_rates():
    provider = StaticRateProvider({'EUR': '2'}, base='USD')
    assert provider.rates()['USD'] == 1
    assert convert(10, 'EUR', 'USD', provider) == Decimal('5')
    with pytest.raises(UnknownCurrency):
        convert(10, 'USD', 'JPY', provider)
