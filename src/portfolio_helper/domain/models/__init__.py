"""Domain models package."""

from portfolio_helper.domain.models.holding import Holding, LeveragedComponent
from portfolio_helper.domain.models.cash import CashEntry, USD, PORTFOLIO_REF_CURRENCY
from portfolio_helper.domain.models.portfolio import ManagedPortfolio
from portfolio_helper.domain.models.market import MarketQuote, NavRecord
from portfolio_helper.domain.models.margin import RateTier, CurrencyRates, MarginRateTable

__all__ = [
    "Holding",
    "LeveragedComponent",
    "CashEntry",
    "USD",
    "PORTFOLIO_REF_CURRENCY",
    "ManagedPortfolio",
    "MarketQuote",
    "NavRecord",
    "RateTier",
    "CurrencyRates",
    "MarginRateTable",
]
