import threading
import pytest
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

from apps.exchange.application.config import ExchangeConfig
from apps.exchange.domain.exceptions import InvalidAmount, RateUnavailable
from apps.exchange.domain.interfaces import BaseRateSource
from apps.exchange.domain.models import ExchangeRate, RateResult
from apps.exchange.domain.services import SUPPORTED_CURRENCIES, ExchangeRateService, QuoteService
from apps.exchange.infrastructure.cache.rate_cache import RateCache
from apps.exchange.infrastructure.providers.exchange_rate import ExchangeRateApiSource


class InMemoryRateRepository:
    """Dict-backed stand-in for CurrencyExchangeRateRepository."""

    def __init__(self):
        self.rows = {}

    def get(self, base_currency, target_currency):
        return self.rows.get((base_currency, target_currency))

    def upsert(self, base_currency, target_currency, rate, fetched_at):
        entry = ExchangeRate(base_currency, target_currency, rate, fetched_at)
        self.rows[(base_currency, target_currency)] = entry
        return entry


@pytest.fixture
def source():
    source = MagicMock(spec=BaseRateSource)
    source.fetch_pair_rate.return_value = Decimal("17.15")
    return source


@pytest.fixture
def rate_cache(clock):
    return RateCache(InMemoryRateRepository(), ttl=timedelta(minutes=30), clock=clock)


@pytest.fixture
def service(source, rate_cache, clock):
    return ExchangeRateService(source=source, cache=rate_cache, config=ExchangeConfig(), clock=clock)


class TestExchangeRateService:
    """Tests for rate resolution: cache, fetch, stale fallback."""

    def test_fetches_and_caches_on_miss(self, service, source, rate_cache, clock):
        result = service.get_rate("usd", "mxn")

        assert result == RateResult("USD", "MXN", Decimal("17.15"), clock.now)
        source.fetch_pair_rate.assert_called_once_with("USD", "MXN")
        assert rate_cache.get_any("USD", "MXN").rate == Decimal("17.15")

    def test_cached_rate_served_within_ttl(self, service, source, clock):
        """
        Test that a rate cached at T0 is returned unchanged at T0+29min.
        """
        first = service.get_rate("USD", "MXN")
        source.fetch_pair_rate.return_value = Decimal("18.00")

        clock.advance(minutes=29)
        second = service.get_rate("USD", "MXN")

        assert second.rate == first.rate
        assert second.timestamp == first.timestamp
        assert second.stale is False
        assert source.fetch_pair_rate.call_count == 1

    def test_expired_rate_is_refetched(self, service, source, clock):
        """
        Test that a lookup at T0+31min goes back to the source.
        """
        service.get_rate("USD", "MXN")
        source.fetch_pair_rate.return_value = Decimal("18.00")

        clock.advance(minutes=31)
        result = service.get_rate("USD", "MXN")

        assert result.rate == Decimal("18.00")
        assert result.timestamp == clock.now
        assert source.fetch_pair_rate.call_count == 2

    def test_stale_rate_served_when_source_fails(self, service, source, rate_cache, clock):
        """
        Test that an hour-old entry is returned with stale=True when the fetch fails.
        """
        fetched_at = clock.now
        rate_cache.put("USD", "MXN", Decimal("17.05"))
        clock.advance(minutes=60)
        source.fetch_pair_rate.return_value = None

        result = service.get_rate("USD", "MXN")

        assert result.stale is True
        assert result.rate == Decimal("17.05")
        assert result.timestamp == fetched_at

    def test_stale_rate_served_when_source_raises(self, service, source, rate_cache, clock):
        rate_cache.put("USD", "MXN", Decimal("17.05"))
        clock.advance(minutes=60)
        source.fetch_pair_rate.side_effect = AttributeError("'list' object has no attribute 'get'")

        result = service.get_rate("USD", "MXN")

        assert result.stale is True
        assert result.rate == Decimal("17.05")

    def test_source_error_without_cache_is_rate_unavailable(self, service, source):
        source.fetch_pair_rate.side_effect = RuntimeError("boom")

        with pytest.raises(RateUnavailable):
            service.get_rate("USD", "MXN")

    def test_non_object_upstream_body_serves_stale(self, rate_cache, clock, mocker):
        """
        Test that a 200 response carrying a JSON list falls back to the cached rate.
        """
        rate_cache.put("USD", "MXN", Decimal("17.05"))
        clock.advance(minutes=60)
        response = mocker.Mock()
        response.json.return_value = ["oops"]
        response.raise_for_status.return_value = None
        mocker.patch("requests.get", return_value=response)
        source = ExchangeRateApiSource(base_url="https://example.test/v6", api_key="key")
        service = ExchangeRateService(source, rate_cache, ExchangeConfig(), clock=clock)

        result = service.get_rate("USD", "MXN")

        assert result.stale is True
        assert result.rate == Decimal("17.05")

    def test_rate_unavailable_without_any_cache(self, service, source):
        source.fetch_pair_rate.return_value = None

        with pytest.raises(RateUnavailable) as exc_info:
            service.get_rate("USD", "XYZ")

        assert exc_info.value.status_code == 503
        assert "USD/XYZ" in exc_info.value.message

    def test_wait_timeout_falls_back_to_stale(self, source, rate_cache, clock):
        rate_cache.put("USD", "MXN", Decimal("17.05"))
        clock.advance(hours=2)
        single_flight = MagicMock()
        single_flight.do.side_effect = FutureTimeout()
        service = ExchangeRateService(source, rate_cache, ExchangeConfig(), single_flight=single_flight, clock=clock)

        result = service.get_rate("USD", "MXN")

        assert result.stale is True
        assert result.rate == Decimal("17.05")

    def test_wait_timeout_without_cache_raises(self, source, rate_cache, clock):
        single_flight = MagicMock()
        single_flight.do.side_effect = FutureTimeout()
        service = ExchangeRateService(source, rate_cache, ExchangeConfig(), single_flight=single_flight, clock=clock)

        with pytest.raises(RateUnavailable):
            service.get_rate("USD", "MXN")

    def test_concurrent_misses_share_one_fetch(self, rate_cache, clock):
        """
        Test that N concurrent lookups of an uncached pair make one upstream call.
        """
        started = threading.Event()
        release = threading.Event()
        calls = []

        class SlowSource(BaseRateSource):
            def fetch_pair_rate(self, base_currency, target_currency):
                calls.append((base_currency, target_currency))
                started.set()
                release.wait(5)
                return Decimal("55.89")

        service = ExchangeRateService(SlowSource(), rate_cache, ExchangeConfig(), clock=clock)
        results = []

        def lookup():
            results.append(service.get_rate("USD", "PHP"))

        threads = [threading.Thread(target=lookup) for _ in range(8)]
        threads[0].start()
        assert started.wait(5)
        for thread in threads[1:]:
            thread.start()
        release.set()
        for thread in threads:
            thread.join(5)

        assert calls == [("USD", "PHP")]
        assert len(results) == 8
        assert {result.rate for result in results} == {Decimal("55.89")}

    def test_get_all_rates_skips_unavailable(self, service, source):
        def fetch(base_currency, target_currency):
            return None if target_currency == "NGN" else Decimal("2.5")
        source.fetch_pair_rate.side_effect = fetch

        result = service.get_all_rates("usd")

        assert result["base"] == "USD"
        assert "NGN" not in result["rates"]
        assert len(result["rates"]) == len(SUPPORTED_CURRENCIES) - 1
        assert result["rates"]["MXN"] == Decimal("2.5")


class TestQuoteService:
    """Tests for quote issuing."""

    @pytest.fixture
    def quote_service(self, service, clock):
        return QuoteService(service, ExchangeConfig(), clock=clock)

    def test_issue_quote(self, quote_service, clock):
        quote = quote_service.issue(Decimal("100"), "USD", "MXN")

        assert quote.send_amount == Decimal("100.00")
        assert quote.fee == Decimal("2.99")
        assert quote.total_amount == Decimal("102.99")
        assert quote.receive_amount == Decimal("1715.00")
        assert quote.issued_at == clock.now
        assert quote.expires_at == clock.now + timedelta(minutes=15)
        assert quote.stale is False

    def test_quote_expiry_boundary(self, quote_service, clock):
        quote = quote_service.issue(Decimal("100"), "USD", "MXN")

        assert not quote.is_expired(clock.now + timedelta(minutes=14, seconds=59))
        assert quote.is_expired(clock.now + timedelta(minutes=15))

    def test_stale_rate_marks_quote_stale(self, quote_service, source, rate_cache, clock):
        rate_cache.put("USD", "MXN", Decimal("17.00"))
        clock.advance(hours=1)
        source.fetch_pair_rate.return_value = None

        quote = quote_service.issue(Decimal("200"), "USD", "MXN")

        assert quote.stale is True
        assert quote.exchange_rate == Decimal("17.000000")

    @pytest.mark.parametrize("amount", ["0", "-10", "9.99", "10000.01", "abc"])
    def test_invalid_amount_rejected_before_rate_lookup(self, quote_service, source, amount):
        with pytest.raises(InvalidAmount):
            quote_service.issue(amount, "USD", "MXN")

        source.fetch_pair_rate.assert_not_called()

    def test_bounds_are_inclusive(self, quote_service):
        assert quote_service.issue(Decimal("10"), "USD", "MXN").send_amount == Decimal("10.00")
        assert quote_service.issue(Decimal("10000"), "USD", "MXN").send_amount == Decimal("10000.00")
