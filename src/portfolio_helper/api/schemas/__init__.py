"""Pydantic schemas for API responses."""

from portfolio_helper.api.schemas.portfolio import (
    PortfolioSummaryResponse,
    PortfolioListResponse,
    PositionResponse,
    CashResponse,
    SnapshotResponse,
)
from portfolio_helper.api.schemas.market import (
    QuoteResponse,
    RateTierResponse,
    CurrencyRatesResponse,
    MarginRatesResponse,
    ReloadResponse,
)

__all__ = [
    "PortfolioSummaryResponse",
    "PortfolioListResponse",
    "PositionResponse",
    "CashResponse",
    "SnapshotResponse",
    "QuoteResponse",
    "RateTierResponse",
    "CurrencyRatesResponse",
    "MarginRatesResponse",
    "ReloadResponse",
]
