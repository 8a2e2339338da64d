"""View models for valuation snapshots.

Every market-derived field is Optional: None means "no data yet" and is
never replaced by zero.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PositionView:
    """A holding merged with the latest cached quote and NAV."""

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

    @property
    def has_market_data(self) -> bool:
        return self.current_price is not None or self.previous_close is not None


@dataclass
class CashView:
    """A cash entry resolved to USD; ``usd_value`` is None when unresolvable."""

    label: str
    currency: str
    amount: float
    is_margin: bool
    is_equity: bool
    usd_value: Optional[float] = None
    portfolio_ref: Optional[str] = None


@dataclass
class PortfolioSnapshot:
    """Read-only valuation view of one portfolio."""

    portfolio_id: str
    name: str
    positions: list[PositionView] = field(default_factory=list)
    cash: list[CashView] = field(default_factory=list)
    holdings_value: float = 0.0
    previous_holdings_value: float = 0.0
    day_change_dollars: float = 0.0
    day_change_percent: Optional[float] = None
    cash_total_usd: float = 0.0
    margin_total_usd: Optional[float] = None
    margin_percent: Optional[float] = None
    total_value: float = 0.0
    loading_progress: float = 100.0
