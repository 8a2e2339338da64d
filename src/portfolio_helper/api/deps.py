"""Dependency injection for FastAPI."""

from fastapi import Depends, Request

from portfolio_helper.app_context import AppContext
from portfolio_helper.services import (
    MarginRateService,
    PortfolioRegistry,
    QuoteService,
    SnapshotService,
)


def get_app_context(request: Request) -> AppContext:
    """Provide the AppContext created by the application lifespan."""
    return request.app.state.context


def get_registry(context: AppContext = Depends(get_app_context)) -> PortfolioRegistry:
    return context.registry


def get_snapshot_service(context: AppContext = Depends(get_app_context)) -> SnapshotService:
    return context.snapshots


def get_quote_service(context: AppContext = Depends(get_app_context)) -> QuoteService:
    return context.quotes


def get_margin_rate_service(context: AppContext = Depends(get_app_context)) -> MarginRateService:
    return context.margin_rates
