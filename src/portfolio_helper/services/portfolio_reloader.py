"""
Portfolio reload coordinator.

Loads holdings and cash into the registry's portfolios, keeps the pollers'
key sets in step with them, and arms one file watcher per data file so an
edit triggers a full reload followed by a ReloadSignal broadcast.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from portfolio_helper.core.exceptions import AppError, WatcherSetupError
from portfolio_helper.csv import read_cash, read_holdings
from portfolio_helper.domain.events import ReloadSignal
from portfolio_helper.domain.models import ManagedPortfolio
from portfolio_helper.services.broadcaster import UpdateBroadcaster
from portfolio_helper.services.file_watcher import FileWatcher
from portfolio_helper.services.nav_service import DEFAULT_NAV_UPDATE_INTERVAL, NavService
from portfolio_helper.services.polling_service import DelaySchedule
from portfolio_helper.services.portfolio_registry import PortfolioRegistry
from portfolio_helper.services.quote_service import DEFAULT_PRICE_UPDATE_INTERVAL, QuoteService
from portfolio_helper.services.symbol_resolution import (
    resolve_nav_candidates,
    resolve_quote_symbols,
)

logger = logging.getLogger(__name__)


class PortfolioReloader:
    """Keeps portfolios, pollers and watchers consistent with the data files."""

    def __init__(
        self,
        registry: PortfolioRegistry,
        quote_service: QuoteService,
        nav_service: NavService,
        broadcaster: UpdateBroadcaster,
        price_update_interval: int = DEFAULT_PRICE_UPDATE_INTERVAL,
        nav_update_interval: int = DEFAULT_NAV_UPDATE_INTERVAL,
        nav_schedule: Optional[DelaySchedule] = None,
        debounce_ms: int = 500,
        poll_interval_ms: int = 100,
    ):
        self._registry = registry
        self._quotes = quote_service
        self._navs = nav_service
        self._broadcaster = broadcaster
        self._price_interval = price_update_interval
        self._nav_interval = nav_update_interval
        self._nav_schedule = nav_schedule
        self._debounce_ms = debounce_ms
        self._poll_interval_ms = poll_interval_ms
        self._watchers: list[FileWatcher] = []
        # Held from load through poller restart; the pollers always see the
        # union of every portfolio.
        self._reload_lock = threading.RLock()

    @property
    def watchers(self) -> list[FileWatcher]:
        return list(self._watchers)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_holdings(self, portfolio: ManagedPortfolio) -> bool:
        """
        Replace the portfolio's holdings from its CSV.

        On failure the error is logged, the previous holdings stay in
        place and False is returned.
        """
        if portfolio.holdings_path is None:
            return False
        try:
            holdings = read_holdings(portfolio.holdings_path)
        except (AppError, OSError) as e:
            logger.error(f"Failed to load holdings for {portfolio.name!r}: {e}", exc_info=True)
            return False
        portfolio.replace_holdings(holdings)
        return True

    def load_cash(self, portfolio: ManagedPortfolio) -> bool:
        """Replace the portfolio's cash entries; same failure policy as holdings."""
        if portfolio.cash_path is None:
            return False
        try:
            entries = read_cash(portfolio.cash_path)
        except (AppError, OSError) as e:
            logger.error(f"Failed to load cash for {portfolio.name!r}: {e}", exc_info=True)
            return False
        portfolio.replace_cash_entries(entries)
        return True

    def load_all(self) -> None:
        for portfolio in self._registry.all():
            self.load_holdings(portfolio)
            self.load_cash(portfolio)

    # ------------------------------------------------------------------
    # Poller key sets
    # ------------------------------------------------------------------

    def refresh_market_data(self) -> None:
        """Recompute the full quote symbol universe and restart the quote poller."""
        with self._reload_lock:
            symbols = resolve_quote_symbols(self._registry.all())
            self._quotes.request_market_data(symbols, self._price_interval)

    def refresh_nav_data(self) -> None:
        with self._reload_lock:
            candidates = resolve_nav_candidates(self._registry.all())
            self._navs.request_nav(candidates, self._nav_interval, schedule=self._nav_schedule)

    # ------------------------------------------------------------------
    # File change handling
    # ------------------------------------------------------------------

    def on_holdings_changed(self, portfolio: ManagedPortfolio) -> bool:
        logger.info(f"Holdings file changed for {portfolio.name!r}, reloading...")
        with self._reload_lock:
            if not self.load_holdings(portfolio):
                return False
            self.refresh_market_data()
            self.refresh_nav_data()
        self._broadcaster.publish(ReloadSignal(portfolio_id=portfolio.id))
        logger.info(f"Portfolio {portfolio.name!r} reloaded")
        return True

    def on_cash_changed(self, portfolio: ManagedPortfolio) -> bool:
        logger.info(f"Cash file changed for {portfolio.name!r}, reloading...")
        with self._reload_lock:
            if not self.load_cash(portfolio):
                return False
            self.refresh_market_data()
        self._broadcaster.publish(ReloadSignal(portfolio_id=portfolio.id))
        logger.info(f"Cash {portfolio.name!r} reloaded")
        return True

    def arm_watchers(self) -> list[FileWatcher]:
        """
        Start one watcher per existing holdings/cash file.

        Missing files and watcher setup failures disable hot reload for
        that file only.
        """
        for portfolio in self._registry.all():
            self._arm(portfolio.holdings_path, lambda p=portfolio: self.on_holdings_changed(p))
            self._arm(portfolio.cash_path, lambda p=portfolio: self.on_cash_changed(p))
        return self.watchers

    def stop_watchers(self) -> None:
        for watcher in self._watchers:
            watcher.stop()
        self._watchers = []

    def _arm(self, path: Optional[Path], callback: Callable[[], object]) -> None:
        if path is None:
            return
        if not Path(path).exists():
            logger.warning(f"{path} not found, hot reload disabled for it")
            return
        watcher = FileWatcher(path, self._debounce_ms, self._poll_interval_ms)
        watcher.on_change(callback)
        try:
            watcher.start()
        except WatcherSetupError as e:
            logger.warning(f"Could not watch {path}: {e.message}")
            return
        self._watchers.append(watcher)
