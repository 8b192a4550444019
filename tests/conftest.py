import pytest
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache

from apps.exchange.application import factory as exchange_factory
from apps.transfers.application import factory as transfers_factory
from apps.transfers.infrastructure.persistence.models import CustomerProfile, KycStatus, Recipient


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_services():
    """Each test gets a fresh service graph and an empty quote cache."""
    exchange_factory.reset_services()
    transfers_factory.reset_services()
    cache.clear()
    yield
    exchange_factory.reset_services()
    transfers_factory.reset_services()
    cache.clear()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 21, 12, 0, tzinfo=dt_timezone.utc))


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="maria", password="secret-pass")


@pytest.fixture
def verified_user(user):
    CustomerProfile.objects.create(user=user, kyc_status=KycStatus.VERIFIED)
    return user


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username="jose", password="secret-pass")


@pytest.fixture
def recipient(user):
    return Recipient.objects.create(
        owner=user,
        first_name="Ana",
        last_name="Lopez",
        email="ana@example.com",
        phone="+525512345678",
        country="MEX",
        country_currency="MXN",
        delivery_method="bank_deposit",
        bank_name="Banorte",
        bank_account_number="012345678901234567",
    )


@pytest.fixture
def wallet_recipient(user):
    return Recipient.objects.create(
        owner=user,
        first_name="Juan",
        last_name="Santos",
        country="PHL",
        country_currency="PHP",
        delivery_method="mobile_wallet",
        mobile_wallet_number="09171234567",
    )


@pytest.fixture
def fixed_rate_settings(settings):
    """Route rate lookups to the fallback table with no API key configured."""
    settings.RATE_SOURCE = "fallback"
    settings.EXCHANGE_RATE_API_KEY = ""
    return settings


@pytest.fixture
def usd_mxn_rate():
    return Decimal("17.15")
