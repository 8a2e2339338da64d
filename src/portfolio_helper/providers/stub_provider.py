"""Stub market data provider for offline/testing use."""

import random

from portfolio_helper.domain.models import MarketQuote


# Deterministic fake (price, previous close) pairs for common symbols
_STUB_PRICES: dict[str, tuple[float, float]] = {
    "AAPL": (185.50, 184.25),
    "GOOGL": (142.75, 141.50),
    "MSFT": (378.25, 376.80),
    "SPY": (485.25, 484.10),
    "QQQ": (418.75, 417.50),
    "VTI": (252.30, 251.80),
    "HKDUSD=X": (0.1282, 0.1281),
    "EURUSD=X": (1.0850, 1.0842),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined prices for common symbols; generates seeded random
    prices for unknown symbols.
    """

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)

    def fetch_quote(self, symbol: str) -> MarketQuote:
        upper_symbol = symbol.upper()
        if upper_symbol in _STUB_PRICES:
            price, prev_close = _STUB_PRICES[upper_symbol]
        else:
            price = round(50 + self._rng.random() * 200, 2)
            change_pct = (self._rng.random() - 0.5) * 0.04
            prev_close = round(price / (1 + change_pct), 2)

        return MarketQuote(
            symbol=symbol,
            current_price=price,
            previous_close=prev_close,
        )
