"""External data providers module."""

from portfolio_helper.providers.market_data_provider import MarketDataProvider
from portfolio_helper.providers.stub_provider import StubMarketDataProvider
from portfolio_helper.providers.yahoo_provider import YahooMarketDataProvider
from portfolio_helper.providers.margin_rate_provider import (
    IbkrMarginRateProvider,
    parse_margin_rates,
)
from portfolio_helper.providers.http import create_session

__all__ = [
    "MarketDataProvider",
    "StubMarketDataProvider",
    "YahooMarketDataProvider",
    "IbkrMarginRateProvider",
    "parse_margin_rates",
    "create_session",
]
