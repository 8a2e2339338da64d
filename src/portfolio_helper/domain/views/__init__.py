"""View models for service outputs."""

from portfolio_helper.domain.views.portfolio import (
    PositionView,
    CashView,
    PortfolioSnapshot,
)

__all__ = [
    "PositionView",
    "CashView",
    "PortfolioSnapshot",
]
