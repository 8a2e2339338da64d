"""Cached quote endpoint."""

from fastapi import APIRouter, Depends, Query

from portfolio_helper.api.deps import get_quote_service
from portfolio_helper.api.schemas import QuoteResponse
from portfolio_helper.services import QuoteService

router = APIRouter(prefix="/api", tags=["quotes"])


@router.get("/quotes", response_model=list[QuoteResponse])
def get_quotes(
    symbols: str = Query(..., description="Comma-separated symbols"),
    quotes: QuoteService = Depends(get_quote_service),
) -> list[QuoteResponse]:
    """Return cached quotes; symbols not fetched yet are omitted."""
    symbol_list = [s.strip().upper() for s in symbols.split(",") if s.strip()]
    result = []
    for symbol in dict.fromkeys(symbol_list):
        quote = quotes.get_quote(symbol)
        if quote is not None:
            result.append(QuoteResponse.model_validate(quote))
    return result
