"""Pydantic schemas for portfolio endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class PortfolioSummaryResponse(BaseModel):
    """Response schema for one registered portfolio."""

    id: str
    name: str


class PortfolioListResponse(BaseModel):
    """Response schema for the portfolio listing (main first)."""

    portfolios: list[PortfolioSummaryResponse]


class PositionResponse(BaseModel):
    """Response schema for a single valued position. Null means no data yet."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    quantity: float
    current_price: Optional[float] = None
    previous_close: Optional[float] = None
    is_market_closed: bool = False
    value: Optional[float] = None
    day_change_dollars: Optional[float] = None
    day_change_percent: Optional[float] = None
    last_nav: Optional[float] = None
    estimated_value: Optional[float] = None
    target_weight: Optional[float] = None
    weight_percent: Optional[float] = None
    target_value: Optional[float] = None
    rebalance_dollars: Optional[float] = None
    rebalance_shares: Optional[float] = None


class CashResponse(BaseModel):
    """Response schema for a cash entry resolved to USD."""

    model_config = ConfigDict(from_attributes=True)

    label: str
    currency: str
    amount: float
    is_margin: bool
    is_equity: bool
    usd_value: Optional[float] = None
    portfolio_ref: Optional[str] = None


class SnapshotResponse(BaseModel):
    """Response schema for a portfolio valuation snapshot."""

    model_config = ConfigDict(from_attributes=True)

    portfolio_id: str
    name: str
    positions: list[PositionResponse]
    cash: list[CashResponse]
    holdings_value: float
    previous_holdings_value: float
    day_change_dollars: float
    day_change_percent: Optional[float] = None
    cash_total_usd: float
    margin_total_usd: Optional[float] = None
    margin_percent: Optional[float] = None
    total_value: float
    loading_progress: float
