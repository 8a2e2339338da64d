"""
Yahoo Finance quote provider via yfinance.

Reads ``Ticker.info`` per symbol; FX pairs such as ``HKDUSD=X`` go through
the same path.
"""

from typing import Any, Optional

from portfolio_helper.core.exceptions import FetchError
from portfolio_helper.domain.models import MarketQuote


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


OPEN_MARKET_STATE = "REGULAR"


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def quote_from_info(symbol: str, info: Any) -> MarketQuote:
    """
    Build a MarketQuote from a yfinance ``info`` dict.

    Price: currentPrice preferred, then regularMarketPrice.
    Previous close: previousClose, then regularMarketPreviousClose.
    """
    if not isinstance(info, dict):
        raise FetchError(symbol, "no quote info returned")

    price = _as_float(info.get("currentPrice"))
    if price is None:
        price = _as_float(info.get("regularMarketPrice"))
    prev_close = _as_float(info.get("previousClose"))
    if prev_close is None:
        prev_close = _as_float(info.get("regularMarketPreviousClose"))

    if price is None and prev_close is None:
        raise FetchError(symbol, "quote has neither price nor previous close")

    market_state = info.get("marketState")
    period_end = info.get("regularMarketTime")
    return MarketQuote(
        symbol=symbol,
        current_price=price,
        previous_close=prev_close,
        is_market_closed=market_state is not None and market_state != OPEN_MARKET_STATE,
        trading_period_end=int(period_end) if isinstance(period_end, (int, float)) else None,
    )


class YahooMarketDataProvider:
    """Fetches quotes from Yahoo Finance, one symbol per call."""

    def fetch_quote(self, symbol: str) -> MarketQuote:
        yf = _get_yf()
        try:
            info = yf.Ticker(symbol).info
        except Exception as e:
            raise FetchError(symbol, str(e)) from e
        return quote_from_info(symbol, info)
