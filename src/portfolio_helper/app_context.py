"""Application context: the composition root for all runtime services.

Every cache, registry and poller is an instance owned here; nothing is a
module-level singleton, so tests can build isolated contexts side by side.
"""

import logging
import threading
from typing import Mapping, Optional

from portfolio_helper.config.settings import Settings, get_settings
from portfolio_helper.domain.events import NavUpdate, PriceUpdate
from portfolio_helper.domain.models import MarketQuote, NavRecord
from portfolio_helper.providers import (
    IbkrMarginRateProvider,
    MarketDataProvider,
    StubMarketDataProvider,
    YahooMarketDataProvider,
    create_session,
)
from portfolio_helper.providers.nav import NavProvider, default_nav_providers
from portfolio_helper.services import (
    MarginRateProvider,
    MarginRateService,
    NavService,
    PortfolioRegistry,
    PortfolioReloader,
    QuoteService,
    SnapshotService,
    UpdateBroadcaster,
    discover_portfolios,
    next_nav_fetch_delay_seconds,
)

logger = logging.getLogger(__name__)


class AppContext:
    """
    Owns the registry, the three pollers, the broadcaster and the watchers.

    Construction wires everything but performs no I/O; ``start()`` discovers
    and loads portfolios, starts polling and arms the file watchers.
    Providers can be injected (tests use fakes); by default they follow
    the settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        market_provider: Optional[MarketDataProvider] = None,
        nav_providers: Optional[Mapping[str, NavProvider]] = None,
        margin_provider: Optional[MarginRateProvider] = None,
    ):
        self.settings = settings or get_settings()
        self._session = None
        self._lock = threading.Lock()
        self._started = False
        self._closed = False

        if market_provider is None:
            market_provider = self._default_market_provider()
        if nav_providers is None:
            nav_providers = default_nav_providers(self._http_session(), self.settings.http_timeout_seconds)
        if margin_provider is None:
            margin_provider = IbkrMarginRateProvider(
                self._http_session(), timeout=self.settings.http_timeout_seconds
            )

        self.registry = PortfolioRegistry()
        self.broadcaster = UpdateBroadcaster(self.settings.stream_buffer_size)
        self.quotes = QuoteService(market_provider, max_workers=self.settings.fetch_workers)
        self.navs = NavService(nav_providers)
        self.margin_rates = MarginRateService(
            margin_provider,
            reload_cooldown_seconds=self.settings.margin_reload_cooldown,
        )
        self.snapshots = SnapshotService(self.registry, self.quotes, self.navs)
        self.reloader = PortfolioReloader(
            self.registry,
            self.quotes,
            self.navs,
            self.broadcaster,
            price_update_interval=self.settings.price_update_interval,
            nav_update_interval=self.settings.nav_update_interval,
            nav_schedule=next_nav_fetch_delay_seconds if self.settings.nav_schedule == "trading_day" else None,
            debounce_ms=self.settings.file_watch_debounce_ms,
            poll_interval_ms=self.settings.file_watch_poll_interval_ms,
        )

        self.quotes.on_update(self._publish_quote)
        self.navs.on_update(self._publish_nav)

    def _default_market_provider(self) -> MarketDataProvider:
        if self.settings.market_data_provider == "stub":
            return StubMarketDataProvider()
        return YahooMarketDataProvider()

    def _http_session(self):
        if self._session is None:
            self._session = create_session()
        return self._session

    def _publish_quote(self, symbol: str, quote: MarketQuote) -> None:
        self.broadcaster.publish(PriceUpdate.from_quote(quote))

    def _publish_nav(self, symbol: str, record: NavRecord) -> None:
        self.broadcaster.publish(NavUpdate.from_record(record))

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Discover, load and start everything. Calling it again is a no-op."""
        with self._lock:
            if self._started or self._closed:
                return
            self._started = True

        data_dir = self.settings.get_data_dir()
        logger.info(f"Starting with data directory {data_dir}")
        for portfolio in discover_portfolios(data_dir):
            self.registry.register(portfolio)
        self.registry.main()

        self.reloader.load_all()
        self.reloader.refresh_market_data()
        self.reloader.refresh_nav_data()
        self.margin_rates.start(self.settings.margin_rate_update_interval)
        self.reloader.arm_watchers()
        logger.info(f"Application ready with {len(self.registry)} portfolio(s)")

    def close(self) -> None:
        """Stop watchers and pollers and release stream subscribers; idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        logger.info("Shutting down application...")
        self.reloader.stop_watchers()
        self.margin_rates.shutdown()
        self.navs.shutdown()
        self.quotes.shutdown()
        self.broadcaster.close()
        if self._session is not None:
            self._session.close()
            self._session = None
        logger.info("Cleanup completed")
