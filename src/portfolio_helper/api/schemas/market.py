"""Pydantic schemas for market data endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class QuoteResponse(BaseModel):
    """Response schema for a cached market quote."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    current_price: Optional[float] = None
    previous_close: Optional[float] = None
    is_market_closed: bool = False
    trading_period_end: Optional[int] = None
    last_update_ms: int


class RateTierResponse(BaseModel):
    """One tier; ``up_to`` is null for the open-ended top tier."""

    model_config = ConfigDict(from_attributes=True)

    up_to: Optional[float] = None
    rate: float


class CurrencyRatesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    currency: str
    tiers: list[RateTierResponse]


class MarginRatesResponse(BaseModel):
    """Response schema for the margin rate table."""

    currencies: list[CurrencyRatesResponse]
    last_fetch_ms: Optional[int] = None
    can_reload: bool


class ReloadResponse(BaseModel):
    status: str
