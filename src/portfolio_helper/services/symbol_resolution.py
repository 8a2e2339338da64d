"""Computes the external identifiers that need active polling."""

from typing import Iterable

from portfolio_helper.domain.models import ManagedPortfolio


def fx_symbol(currency: str) -> str:
    """Quote symbol for the USD rate of ``currency``, e.g. ``HKDUSD=X``."""
    return f"{currency.upper()}USD=X"


def resolve_quote_symbols(portfolios: Iterable[ManagedPortfolio]) -> list[str]:
    """
    Deduplicated, ordered union of holding symbols, leveraged-component
    symbols and one FX pair per non-USD, non-"P" cash currency.

    Reads each portfolio's current snapshots once and mutates nothing.
    """
    symbols: list[str] = []
    for portfolio in portfolios:
        holdings = portfolio.get_holdings()
        cash_entries = portfolio.get_cash_entries()

        symbols.extend(h.symbol for h in holdings)
        for holding in holdings:
            for component in holding.leveraged_components or ():
                symbols.append(component.symbol)
        currencies = dict.fromkeys(e.currency for e in cash_entries if e.is_foreign)
        symbols.extend(fx_symbol(ccy) for ccy in currencies)

    return list(dict.fromkeys(symbols))


def resolve_nav_candidates(portfolios: Iterable[ManagedPortfolio]) -> list[str]:
    """Every holding symbol across all portfolios (NAV support is filtered later)."""
    return list(dict.fromkeys(h.symbol for p in portfolios for h in p.get_holdings()))
