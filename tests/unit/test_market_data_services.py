"""
Unit tests for the quote, NAV and margin-rate pollers.

Tests cover:
- QuoteService caching and FX rate lookup
- NavService provider filtering
- MarginRateService wholesale replacement, empty parse and reload cooldown
"""

import threading

import pytest

from portfolio_helper.core.exceptions import RateLimitedError
from portfolio_helper.domain.models import CurrencyRates, RateTier
from portfolio_helper.services import MarginRateService, NavService, QuoteService

from tests.conftest import (
    DeterministicMarketProvider,
    FailingMarketProvider,
    FakeMarginRateProvider,
    FakeNavProvider,
    wait_until,
)


# =============================================================================
# QUOTE SERVICE TESTS
# =============================================================================


class TestQuoteService:
    """Tests for QuoteService."""

    def test_fetch_all_caches_quotes(self, quote_service: QuoteService):
        """
        GIVEN the deterministic provider
        WHEN AAPL and MSFT are fetched
        THEN both quotes are cached with price and previous close
        """
        quote_service.fetch_all(["AAPL", "MSFT"])

        quote = quote_service.get_quote("AAPL")
        assert quote.current_price == 150.00
        assert quote.previous_close == 148.00
        assert quote_service.get_quote("MSFT") is not None

    def test_get_quote_never_fetches(self, quote_service: QuoteService, market_provider):
        assert quote_service.get_quote("AAPL") is None
        assert market_provider.calls == []

    def test_unknown_symbol_stays_absent(self, quote_service: QuoteService):
        quote_service.fetch_all(["AAPL", "NOPE"])

        assert quote_service.get_quote("NOPE") is None
        assert quote_service.get_quote("AAPL") is not None

    def test_failing_provider_leaves_cache_empty(self, failing_provider: FailingMarketProvider):
        service = QuoteService(failing_provider)
        try:
            service.fetch_all(["AAPL"])
            assert service.snapshot() == {}
        finally:
            service.shutdown()

    def test_request_market_data_starts_polling(self, quote_service: QuoteService):
        quote_service.request_market_data(["AAPL"], interval_seconds=3600)

        assert wait_until(lambda: quote_service.get_quote("AAPL") is not None)
        assert quote_service.polled_keys == ["AAPL"]


class TestFxRate:
    """Tests for QuoteService.fx_rate."""

    def test_usd_is_always_one(self, quote_service: QuoteService):
        assert quote_service.fx_rate("USD") == 1.0
        assert quote_service.fx_rate("usd") == 1.0

    def test_missing_pair_is_none(self, quote_service: QuoteService):
        assert quote_service.fx_rate("HKD") is None

    def test_pair_uses_current_price(self, quote_service: QuoteService):
        quote_service.fetch_all(["HKDUSD=X"])

        assert quote_service.fx_rate("HKD") == pytest.approx(0.1282)

    def test_pair_falls_back_to_previous_close(self):
        provider = DeterministicMarketProvider({"EURUSD=X": (None, 1.08)})
        service = QuoteService(provider)
        try:
            service.fetch_all(["EURUSD=X"])
            assert service.fx_rate("EUR") == pytest.approx(1.08)
        finally:
            service.shutdown()


# =============================================================================
# NAV SERVICE TESTS
# =============================================================================


class TestNavService:
    """Tests for NavService."""

    def test_supported_symbols_filters_unknown(self, nav_service: NavService):
        assert nav_service.supported_symbols(["AAPL", "CTA", "CTA"]) == ["CTA"]

    def test_request_nav_polls_only_supported(self, nav_service: NavService, nav_providers):
        """
        GIVEN a provider for CTA only
        WHEN NAV is requested for AAPL and CTA
        THEN only CTA is polled and cached
        """
        nav_service.request_nav(["AAPL", "CTA"], interval_seconds=3600)

        assert wait_until(lambda: nav_service.get_nav("CTA") == 25.40)
        assert nav_service.polled_keys == ["CTA"]
        assert nav_service.get_nav("AAPL") is None

    def test_no_supported_symbols_stops_polling(self, nav_service: NavService):
        nav_service.request_nav(["CTA"], interval_seconds=3600)
        assert nav_service.is_polling

        nav_service.request_nav(["AAPL", "MSFT"], interval_seconds=3600)

        assert not nav_service.is_polling

    def test_fetch_item_without_provider_returns_none(self, nav_service: NavService):
        assert nav_service.fetch_item("AAPL") is None

    def test_schedule_is_passed_through(self):
        provider = FakeNavProvider("CTA", 25.0)
        service = NavService({"CTA": provider})
        try:
            service.request_nav(["CTA"], schedule=lambda: 0.05)
            assert wait_until(lambda: provider.calls >= 2)
        finally:
            service.shutdown()


# =============================================================================
# MARGIN RATE SERVICE TESTS
# =============================================================================


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def margin_provider() -> FakeMarginRateProvider:
    return FakeMarginRateProvider()


@pytest.fixture
def margin_service(margin_provider, clock):
    service = MarginRateService(margin_provider, reload_cooldown_seconds=600, clock=clock)
    yield service
    service.shutdown()


class TestMarginRateService:
    """Tests for MarginRateService."""

    def test_rates_empty_before_first_fetch(self, margin_service: MarginRateService):
        assert margin_service.rates() == {}
        assert margin_service.get_rates("USD") is None
        assert margin_service.last_fetch_ms is None

    def test_start_fetches_table(self, margin_service: MarginRateService, clock):
        margin_service.start(interval_seconds=3600)

        assert wait_until(lambda: margin_service.get_rates("usd") is not None)
        assert margin_service.get_rates("USD").base_rate == 6.83
        assert margin_service.last_fetch_ms == int(clock.now * 1000)

    def test_table_replaced_wholesale(self, margin_service: MarginRateService, margin_provider):
        """
        GIVEN a cached table with USD and HKD
        WHEN the next fetch returns only EUR
        THEN the table holds EUR only (no merge)
        """
        margin_service.fetch_all(["IBKR"])
        margin_provider.table = {"EUR": CurrencyRates("EUR", (RateTier(None, 4.0),))}

        margin_service.fetch_all(["IBKR"])

        assert sorted(margin_service.rates()) == ["EUR"]

    def test_empty_parse_keeps_previous_table(self, margin_service: MarginRateService, margin_provider):
        margin_service.fetch_all(["IBKR"])
        margin_provider.table = {}

        margin_service.fetch_all(["IBKR"])

        assert sorted(margin_service.rates()) == ["HKD", "USD"]


class TestMarginReloadCooldown:
    """Tests for manual reload gating."""

    def test_reload_allowed_before_any_fetch(self, margin_service: MarginRateService):
        assert margin_service.can_reload()
        assert margin_service.reload_now().result(timeout=2) is True

    def test_reload_inside_cooldown_is_rejected(self, margin_service: MarginRateService, clock):
        """
        GIVEN a successful fetch just now
        WHEN a manual reload is requested 5 minutes later
        THEN RateLimitedError carries the remaining 5 minutes
        """
        margin_service.fetch_all(["IBKR"])
        clock.now += 300

        with pytest.raises(RateLimitedError) as exc_info:
            margin_service.reload_now()

        assert exc_info.value.retry_after_seconds == pytest.approx(300)
        assert not margin_service.can_reload()

    def test_reload_after_cooldown_fetches(self, margin_service: MarginRateService, margin_provider, clock):
        margin_service.fetch_all(["IBKR"])
        clock.now += 601

        margin_service.reload_now().result(timeout=2)

        assert margin_provider.calls == 2

    def test_failed_fetch_does_not_start_cooldown(self, margin_provider, clock):
        margin_provider.table = {}
        service = MarginRateService(margin_provider, reload_cooldown_seconds=600, clock=clock)
        try:
            service.fetch_all(["IBKR"])
            assert service.can_reload()
        finally:
            service.shutdown()

    def test_reload_while_in_flight_returns_same_future(self, margin_provider, clock):
        """
        GIVEN a manual reload whose page fetch has not finished
        WHEN a second manual reload is requested
        THEN the same future is returned and the page is fetched once
        """
        release = threading.Event()
        fetch_rates = margin_provider.fetch_rates

        def slow_fetch():
            release.wait(timeout=2.0)
            return fetch_rates()

        margin_provider.fetch_rates = slow_fetch
        service = MarginRateService(margin_provider, reload_cooldown_seconds=600, clock=clock)
        try:
            first = service.reload_now()
            second = service.reload_now()
            release.set()

            assert second is first
            assert first.result(timeout=2) is True
            assert margin_provider.calls == 1
        finally:
            service.shutdown()
