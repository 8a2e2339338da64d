"""API routers package."""

from portfolio_helper.api.routers.portfolios import router as portfolios_router
from portfolio_helper.api.routers.quotes import router as quotes_router
from portfolio_helper.api.routers.margin_rates import router as margin_rates_router
from portfolio_helper.api.routers.stream import router as stream_router

__all__ = [
    "portfolios_router",
    "quotes_router",
    "margin_rates_router",
    "stream_router",
]
