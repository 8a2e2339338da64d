"""Market quote poller (stocks, ETFs and FX pairs)."""

import logging
from typing import Iterable, Optional

from portfolio_helper.domain.models import MarketQuote, USD
from portfolio_helper.providers.market_data_provider import MarketDataProvider
from portfolio_helper.services.polling_service import PollingService
from portfolio_helper.services.symbol_resolution import fx_symbol

logger = logging.getLogger(__name__)

DEFAULT_PRICE_UPDATE_INTERVAL = 60


class QuoteService(PollingService[MarketQuote]):
    """
    Polls the market data provider for every symbol in the current universe.

    FX rates are ordinary quotes on ``<CCY>USD=X`` pseudo-symbols.
    """

    def __init__(self, provider: MarketDataProvider, max_workers: int = 8):
        super().__init__("Market quotes", max_workers=max_workers)
        self._provider = provider

    def request_market_data(
        self,
        symbols: Iterable[str],
        interval_seconds: int = DEFAULT_PRICE_UPDATE_INTERVAL,
    ) -> None:
        symbols = list(symbols)
        logger.info(
            f"Requesting market data for {len(symbols)} symbols "
            f"(update interval: {interval_seconds}s)"
        )
        self.start_polling(symbols, interval_seconds)

    def fetch_item(self, key: str) -> Optional[MarketQuote]:
        return self._provider.fetch_quote(key)

    def get_quote(self, symbol: str) -> Optional[MarketQuote]:
        return self.get(symbol)

    def fx_rate(self, currency: str) -> Optional[float]:
        """USD per one unit of ``currency``; None until the pair has been fetched."""
        if currency.upper() == USD:
            return 1.0
        quote = self.get(fx_symbol(currency))
        if quote is None:
            return None
        return quote.current_price if quote.current_price is not None else quote.previous_close
