"""Snapshot service: read-only valuation views assembled from the caches."""

import time
from typing import Callable, Iterable, Optional

from portfolio_helper.core.exceptions import NotFoundError
from portfolio_helper.domain.models import (
    USD,
    CashEntry,
    Holding,
    ManagedPortfolio,
    MarketQuote,
)
from portfolio_helper.domain.views import CashView, PortfolioSnapshot, PositionView
from portfolio_helper.services.nav_service import NavService
from portfolio_helper.services.portfolio_registry import PortfolioRegistry
from portfolio_helper.services.quote_service import QuoteService

QuoteLookup = Callable[[str], Optional[MarketQuote]]
NavLookup = Callable[[str], Optional[float]]

# Leveraged estimates are withheld once the market has been closed this long
ESTIMATE_STALE_AFTER_SECONDS = 12 * 60 * 60


def resolve_price(quote: Optional[MarketQuote]) -> Optional[float]:
    """Live price, falling back to previous close; None when neither is known."""
    if quote is None:
        return None
    if quote.current_price is not None:
        return quote.current_price
    return quote.previous_close


def day_change_percent(quote: Optional[MarketQuote]) -> Optional[float]:
    if quote is None or quote.current_price is None or not quote.previous_close:
        return None
    return (quote.current_price - quote.previous_close) / quote.previous_close * 100.0


def _is_stale(quote: MarketQuote, now_s: float) -> bool:
    return (
        quote.is_market_closed
        and quote.trading_period_end is not None
        and now_s - quote.trading_period_end > ESTIMATE_STALE_AFTER_SECONDS
    )


def estimate_leveraged_value(
    holding: Holding,
    base_price: Optional[float],
    quote_lookup: QuoteLookup,
    now_s: Optional[float] = None,
) -> Optional[float]:
    """
    Estimated intraday price of a leveraged holding.

    ``(1 + sum(multiplier * component_day_pct / 100)) * base_price``.
    None when the holding has no components, the base price is unknown,
    any component's day change is unknown, or a component's market has
    been closed for more than 12 hours.
    """
    if not holding.is_leveraged or base_price is None:
        return None
    now_s = time.time() if now_s is None else now_s

    weighted = 0.0
    for component in holding.leveraged_components:
        quote = quote_lookup(component.symbol)
        if quote is None:
            return None
        if _is_stale(quote, now_s):
            return None
        pct = day_change_percent(quote)
        if pct is None:
            return None
        weighted += component.multiplier * pct / 100.0
    return (1.0 + weighted) * base_price


def assemble_position(
    holding: Holding,
    quote_lookup: QuoteLookup,
    nav_lookup: NavLookup,
    now_s: Optional[float] = None,
) -> PositionView:
    quote = quote_lookup(holding.symbol)
    current = quote.current_price if quote is not None else None
    previous = quote.previous_close if quote is not None else None
    price = resolve_price(quote)

    change = None
    if current is not None and previous is not None:
        change = (current - previous) * holding.quantity

    nav = nav_lookup(holding.symbol)
    base_price = nav if nav is not None else previous

    return PositionView(
        symbol=holding.symbol,
        quantity=holding.quantity,
        current_price=current,
        previous_close=previous,
        is_market_closed=quote.is_market_closed if quote is not None else False,
        value=price * holding.quantity if price is not None else None,
        day_change_dollars=change,
        day_change_percent=day_change_percent(quote),
        last_nav=nav,
        estimated_value=estimate_leveraged_value(holding, base_price, quote_lookup, now_s),
        target_weight=holding.target_weight,
    )


def assemble_positions(
    holdings: Iterable[Holding],
    quote_lookup: QuoteLookup,
    nav_lookup: NavLookup,
    now_s: Optional[float] = None,
) -> list[PositionView]:
    return [assemble_position(h, quote_lookup, nav_lookup, now_s) for h in holdings]


def apply_weights(positions: list[PositionView], holdings_value: float) -> None:
    """Fill current weight, target value and rebalance figures in place."""
    for position in positions:
        if position.value is None or holdings_value <= 0:
            continue
        position.weight_percent = position.value / holdings_value * 100.0
        if position.target_weight is None:
            continue
        position.target_value = position.target_weight / 100.0 * holdings_value
        position.rebalance_dollars = position.target_value - position.value
        if position.current_price:
            position.rebalance_shares = position.rebalance_dollars / position.current_price


class SnapshotService:
    """
    Builds PortfolioSnapshot views on request.

    Holds no state of its own: every call reads the portfolio's current
    holdings/cash references and the pollers' caches.
    """

    def __init__(
        self,
        registry: PortfolioRegistry,
        quote_service: QuoteService,
        nav_service: NavService,
    ):
        self._registry = registry
        self._quotes = quote_service
        self._navs = nav_service

    def portfolio_snapshot(self, portfolio_id: str, now_s: Optional[float] = None) -> PortfolioSnapshot:
        """
        Assemble the valuation view of one portfolio.

        Raises:
            NotFoundError: If no portfolio has this id.
        """
        portfolio = self._registry.get(portfolio_id)
        if portfolio is None:
            raise NotFoundError("Portfolio", portfolio_id)

        holdings = portfolio.get_holdings()
        cash_entries = portfolio.get_cash_entries()

        positions = assemble_positions(holdings, self._quotes.get_quote, self._navs.get_nav, now_s)
        holdings_value = sum(p.value for p in positions if p.value is not None)
        previous_value = sum(
            p.previous_close * p.quantity for p in positions if p.previous_close is not None
        )
        day_change = sum(p.day_change_dollars for p in positions if p.day_change_dollars is not None)
        apply_weights(positions, holdings_value)

        cash = [self._cash_view(entry) for entry in cash_entries]
        cash_total = sum(c.usd_value for c in cash if c.usd_value is not None)
        margin_total, margin_percent = _margin_figures(cash, holdings_value)

        with_data = sum(1 for p in positions if p.has_market_data)
        progress = with_data / len(positions) * 100.0 if positions else 100.0

        return PortfolioSnapshot(
            portfolio_id=portfolio.id,
            name=portfolio.name,
            positions=positions,
            cash=cash,
            holdings_value=holdings_value,
            previous_holdings_value=previous_value,
            day_change_dollars=day_change,
            day_change_percent=day_change / previous_value * 100.0 if previous_value > 0 else None,
            cash_total_usd=cash_total,
            margin_total_usd=margin_total,
            margin_percent=margin_percent,
            total_value=holdings_value + cash_total,
            loading_progress=progress,
        )

    def holdings_value(self, portfolio: ManagedPortfolio) -> float:
        """Sum of position values that have a price; unpriced positions count as 0."""
        total = 0.0
        for holding in portfolio.get_holdings():
            price = resolve_price(self._quotes.get_quote(holding.symbol))
            if price is not None:
                total += price * holding.quantity
        return total

    def resolve_cash_usd(self, entry: CashEntry) -> Optional[float]:
        """
        USD value of one cash entry; None when it cannot be resolved yet.

        A "P" entry is its multiplier times the referenced portfolio's
        holdings value (never its cash), so references cannot cycle.
        """
        if entry.currency == USD:
            return entry.amount
        if entry.is_portfolio_ref:
            referenced = self._registry.get(entry.portfolio_ref) if entry.portfolio_ref else None
            if referenced is None:
                return None
            return entry.amount * self.holdings_value(referenced)
        rate = self._quotes.fx_rate(entry.currency)
        if rate is None:
            return None
        return entry.amount * rate

    def _cash_view(self, entry: CashEntry) -> CashView:
        return CashView(
            label=entry.label,
            currency=entry.currency,
            amount=entry.amount,
            is_margin=entry.is_margin,
            is_equity=entry.is_equity,
            usd_value=self.resolve_cash_usd(entry),
            portfolio_ref=entry.portfolio_ref,
        )


def _margin_figures(cash: list[CashView], holdings_value: float) -> tuple[Optional[float], Optional[float]]:
    """(margin total, margin percent); both None when no entry is margin-flagged."""
    if not any(c.is_margin for c in cash):
        return None, None
    margin = sum(c.usd_value or 0.0 for c in cash if c.is_margin)
    equity = sum(c.usd_value or 0.0 for c in cash if c.is_equity)
    denominator = holdings_value + equity + margin
    if denominator != 0 and margin < 0:
        return margin, margin / denominator * 100.0
    return margin, 0.0
