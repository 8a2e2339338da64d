"""Events fanned out to live-stream subscribers."""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union

from portfolio_helper.core.timezone import epoch_ms
from portfolio_helper.domain.models import MarketQuote, NavRecord


@dataclass(frozen=True)
class PriceUpdate:
    symbol: str
    price: Optional[float]
    previous_close: Optional[float]
    is_market_closed: bool
    trading_period_end: Optional[int]
    timestamp: int

    type = "price"

    @classmethod
    def from_quote(cls, quote: MarketQuote) -> "PriceUpdate":
        return cls(
            symbol=quote.symbol,
            price=quote.current_price,
            previous_close=quote.previous_close,
            is_market_closed=quote.is_market_closed,
            trading_period_end=quote.trading_period_end,
            timestamp=quote.last_update_ms,
        )


@dataclass(frozen=True)
class NavUpdate:
    symbol: str
    nav: float
    timestamp: int

    type = "nav"

    @classmethod
    def from_record(cls, record: NavRecord) -> "NavUpdate":
        return cls(symbol=record.symbol, nav=record.nav, timestamp=record.last_fetch_ms)


@dataclass(frozen=True)
class ReloadSignal:
    """Holdings or cash were replaced; consumers must re-fetch from scratch."""

    portfolio_id: Optional[str] = None
    timestamp: int = field(default_factory=epoch_ms)

    type = "reload"


UpdateEvent = Union[PriceUpdate, NavUpdate, ReloadSignal]


def event_payload(event: UpdateEvent) -> dict[str, Any]:
    """Wire payload for an event: its fields plus a ``type`` discriminator."""
    return {"type": event.type, **asdict(event)}
