"""Market data provider protocol."""

from typing import Protocol

from portfolio_helper.domain.models import MarketQuote


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations fetch one quote per call; FX pairs are requested with
    the ``<CCY>USD=X`` pseudo-symbol and answered like any other quote.
    """

    def fetch_quote(self, symbol: str) -> MarketQuote:
        """
        Fetch the latest quote for ``symbol``.

        Raises:
            FetchError: If the provider has no usable data for the symbol.
        """
        ...
