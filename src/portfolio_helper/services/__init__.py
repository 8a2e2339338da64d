"""Service layer."""

from portfolio_helper.services.portfolio_registry import PortfolioRegistry, MAIN_PORTFOLIO_ID
from portfolio_helper.services.file_watcher import FileWatcher
from portfolio_helper.services.polling_service import PollingService
from portfolio_helper.services.quote_service import QuoteService
from portfolio_helper.services.nav_service import NavService
from portfolio_helper.services.margin_rate_service import MarginRateService, MarginRateProvider
from portfolio_helper.services.symbol_resolution import (
    fx_symbol,
    resolve_quote_symbols,
    resolve_nav_candidates,
)
from portfolio_helper.services.broadcaster import UpdateBroadcaster, Subscription
from portfolio_helper.services.snapshot_service import SnapshotService
from portfolio_helper.services.trading_day_schedule import next_nav_fetch_delay_seconds
from portfolio_helper.services.portfolio_discovery import discover_portfolios, slugify
from portfolio_helper.services.portfolio_reloader import PortfolioReloader

__all__ = [
    "PortfolioRegistry",
    "MAIN_PORTFOLIO_ID",
    "FileWatcher",
    "PollingService",
    "QuoteService",
    "NavService",
    "MarginRateService",
    "MarginRateProvider",
    "fx_symbol",
    "resolve_quote_symbols",
    "resolve_nav_candidates",
    "UpdateBroadcaster",
    "Subscription",
    "SnapshotService",
    "next_nav_fetch_delay_seconds",
    "discover_portfolios",
    "slugify",
    "PortfolioReloader",
]
