import random
import pytest
from decimal import Decimal

from apps.exchange.infrastructure.providers.fallback import FallbackRateSource


@pytest.fixture
def source():
    return FallbackRateSource(rng=random.Random(1234))


@pytest.mark.parametrize("target", ["MXN", "PHP", "INR", "NGN", "EUR"])
def test_rate_within_one_percent_of_table(source, target):
    """
    Test that the returned rate stays within ±1% of the table value.
    """
    table_rate = FallbackRateSource.RATES["USD"][target]

    for _ in range(50):
        rate = source.fetch_pair_rate("USD", target)
        assert table_rate * Decimal("0.99") <= rate <= table_rate * Decimal("1.01")


def test_rate_has_six_decimal_places(source):
    rate = source.fetch_pair_rate("USD", "MXN")

    assert rate.as_tuple().exponent == -6


def test_unknown_pair_returns_none(source):
    assert source.fetch_pair_rate("USD", "XYZ") is None
    assert source.fetch_pair_rate("EUR", "MXN") is None


def test_rates_vary_between_calls(source):
    rates = {source.fetch_pair_rate("USD", "KES") for _ in range(10)}

    assert len(rates) > 1


def test_base_rate_lookup():
    assert FallbackRateSource().base_rate("USD", "MXN") == Decimal("17.15")
