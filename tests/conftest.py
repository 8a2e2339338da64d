"""
Pytest configuration and fixtures for portfolio helper tests.

This module provides:
- Deterministic and failing fake providers (quotes, NAV, margin rates)
- Data directory fixtures with holdings and cash files
- Service fixtures that are shut down after each test
- An AppContext wired to fakes and a FastAPI test client
- Polling helpers for asserting on background threads
"""

import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from portfolio_helper.app_context import AppContext
from portfolio_helper.config.settings import Settings, reset_settings, set_settings
from portfolio_helper.core.exceptions import EmptyParseError, FetchError
from portfolio_helper.core.timezone import EASTERN_TZ
from portfolio_helper.domain.models import (
    CurrencyRates,
    MarginRateTable,
    MarketQuote,
    NavRecord,
    RateTier,
)
from portfolio_helper.main import create_app
from portfolio_helper.services import (
    NavService,
    PortfolioRegistry,
    QuoteService,
    UpdateBroadcaster,
)


# =============================================================================
# TIME HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


# =============================================================================
# FAKE PROVIDERS
# =============================================================================


class DeterministicMarketProvider:
    """
    Market data provider with fixed quotes and no randomness.

    Unknown symbols raise FetchError. Quotes can be changed at runtime
    with ``set_quote`` to simulate a new polling round.
    """

    FIXED_QUOTES = {
        "AAPL": (150.00, 148.00),  # +2.00 / +1.35%
        "MSFT": (378.25, 376.80),
        "SPY": (485.25, 484.10),
        "CTA": (26.00, 25.50),
        "IVV": (505.00, 500.00),  # +1.00%
        "HKDUSD=X": (0.1282, 0.1281),
    }

    def __init__(self, quotes: Optional[dict[str, tuple]] = None):
        self._quotes = dict(self.FIXED_QUOTES if quotes is None else quotes)
        self._lock = threading.Lock()
        self.calls: list[str] = []

    def set_quote(self, symbol: str, price: Optional[float], previous_close: Optional[float]) -> None:
        with self._lock:
            self._quotes[symbol] = (price, previous_close)

    def remove_quote(self, symbol: str) -> None:
        with self._lock:
            self._quotes.pop(symbol, None)

    def fetch_quote(self, symbol: str) -> MarketQuote:
        with self._lock:
            self.calls.append(symbol)
            prices = self._quotes.get(symbol)
        if prices is None:
            raise FetchError(symbol, "unknown symbol")
        price, previous_close = prices
        return MarketQuote(symbol=symbol, current_price=price, previous_close=previous_close)


class FailingMarketProvider:
    """Market provider that always raises."""

    def fetch_quote(self, symbol: str) -> MarketQuote:
        raise ConnectionError("Network unavailable")


class FakeNavProvider:
    def __init__(self, symbol: str, nav: float):
        self.symbol = symbol
        self.nav = nav
        self.calls = 0

    def fetch_nav(self) -> NavRecord:
        self.calls += 1
        return NavRecord(symbol=self.symbol, nav=self.nav)


class FakeMarginRateProvider:
    """Returns ``table`` on each call; raises EmptyParseError when it is empty."""

    def __init__(self, table: Optional[MarginRateTable] = None):
        self.table = sample_margin_table() if table is None else table
        self.calls = 0

    def fetch_rates(self) -> MarginRateTable:
        self.calls += 1
        if not self.table:
            raise EmptyParseError("IBKR")
        return dict(self.table)


def sample_margin_table() -> MarginRateTable:
    return {
        "USD": CurrencyRates(
            "USD",
            (RateTier(100_000.0, 6.83), RateTier(1_000_000.0, 6.33), RateTier(None, 6.08)),
        ),
        "HKD": CurrencyRates("HKD", (RateTier(None, 5.50),)),
    }


# =============================================================================
# DATA DIRECTORY FIXTURES
# =============================================================================


MAIN_HOLDINGS_CSV = """stock_label,amount,target_weight,letf
AAPL,10,60,
MSFT,2,40,
"""

MAIN_CASH_TXT = """# cash balances
Brokerage.USD=1000
Loan.HKD.M=-2530000
"""


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory with a main portfolio and one sub-portfolio."""
    root = tmp_path / "data"
    write_file(root / "stocks.csv", MAIN_HOLDINGS_CSV)
    write_file(root / "cash.txt", MAIN_CASH_TXT)
    write_file(root / "Retirement" / "stocks.csv", "stock_label,amount\nSPY,4\n")
    return root


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def market_provider() -> DeterministicMarketProvider:
    return DeterministicMarketProvider()


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    return FailingMarketProvider()


@pytest.fixture
def quote_service(market_provider):
    """QuoteService over the deterministic provider; shut down after the test."""
    service = QuoteService(market_provider, max_workers=4)
    yield service
    service.shutdown()


@pytest.fixture
def nav_providers() -> dict[str, FakeNavProvider]:
    return {"CTA": FakeNavProvider("CTA", 25.40)}


@pytest.fixture
def nav_service(nav_providers):
    service = NavService(nav_providers)
    yield service
    service.shutdown()


@pytest.fixture
def registry() -> PortfolioRegistry:
    return PortfolioRegistry()


@pytest.fixture
def broadcaster() -> UpdateBroadcaster:
    return UpdateBroadcaster(buffer_size=8)


# =============================================================================
# APP FIXTURES
# =============================================================================


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    """Settings pointing at ``data_dir`` with short watcher timings."""
    reset_settings()
    test_settings = Settings(
        data_dir=data_dir,
        price_update_interval=3600,
        nav_update_interval=3600,
        margin_rate_update_interval=3600,
        file_watch_debounce_ms=100,
        file_watch_poll_interval_ms=20,
        stream_buffer_size=16,
        stream_keepalive_seconds=0.1,
    )
    set_settings(test_settings)
    yield test_settings
    reset_settings()


@pytest.fixture
def app_context(settings, market_provider, nav_providers):
    """AppContext wired to fakes; not started."""
    context = AppContext(
        settings,
        market_provider=market_provider,
        nav_providers=nav_providers,
        margin_provider=FakeMarginRateProvider(),
    )
    yield context
    context.close()


@pytest.fixture
def client(app_context) -> TestClient:
    """FastAPI test client; the lifespan starts and closes ``app_context``."""
    app = create_app(app_context)
    with TestClient(app) as c:
        wait_until(lambda: app_context.quotes.get("AAPL") is not None)
        yield c
