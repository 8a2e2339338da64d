"""Margin interest rate endpoints."""

from fastapi import APIRouter, Depends, status

from portfolio_helper.api.deps import get_margin_rate_service
from portfolio_helper.api.schemas import (
    CurrencyRatesResponse,
    MarginRatesResponse,
    ReloadResponse,
)
from portfolio_helper.services import MarginRateService

router = APIRouter(prefix="/api/margin-rates", tags=["margin-rates"])


@router.get("", response_model=MarginRatesResponse)
def get_margin_rates(
    margin_rates: MarginRateService = Depends(get_margin_rate_service),
) -> MarginRatesResponse:
    table = margin_rates.rates()
    return MarginRatesResponse(
        currencies=[CurrencyRatesResponse.model_validate(table[ccy]) for ccy in sorted(table)],
        last_fetch_ms=margin_rates.last_fetch_ms,
        can_reload=margin_rates.can_reload(),
    )


@router.post("/reload", response_model=ReloadResponse, status_code=status.HTTP_202_ACCEPTED)
def reload_margin_rates(
    margin_rates: MarginRateService = Depends(get_margin_rate_service),
) -> ReloadResponse:
    """Queue an immediate refresh; 429 while inside the cooldown."""
    margin_rates.reload_now()
    return ReloadResponse(status="reloading")
