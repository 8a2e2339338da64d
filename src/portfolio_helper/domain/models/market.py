"""Cached market data records."""

from dataclasses import dataclass, field
from typing import Optional

from portfolio_helper.core.timezone import epoch_ms


@dataclass(frozen=True)
class MarketQuote:
    """Latest quote for one symbol (stocks, ETFs and ``<CCY>USD=X`` FX pairs)."""

    symbol: str
    current_price: Optional[float] = None
    previous_close: Optional[float] = None
    is_market_closed: bool = False
    trading_period_end: Optional[int] = None  # epoch seconds
    last_update_ms: int = field(default_factory=epoch_ms)


@dataclass(frozen=True)
class NavRecord:
    """Latest published net asset value for one fund."""

    symbol: str
    nav: float
    as_of_date: Optional[str] = None
    last_fetch_ms: int = field(default_factory=epoch_ms)
