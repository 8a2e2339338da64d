"""
Unit tests for symbol resolution.

Tests cover:
- Union of holdings, leveraged components and FX pairs
- Ordering and deduplication
- Idempotence (no hidden mutation)
"""

from portfolio_helper.domain.models import CashEntry, Holding, LeveragedComponent, ManagedPortfolio
from portfolio_helper.services import fx_symbol, resolve_nav_candidates, resolve_quote_symbols


def make_portfolio(pid, holdings=(), cash=()) -> ManagedPortfolio:
    portfolio = ManagedPortfolio(pid, pid.title())
    portfolio.replace_holdings(holdings)
    portfolio.replace_cash_entries(cash)
    return portfolio


class TestResolveQuoteSymbols:
    """Tests for resolve_quote_symbols."""

    def test_fx_symbol_format(self):
        assert fx_symbol("hkd") == "HKDUSD=X"

    def test_union_of_holdings_components_and_fx(self):
        """
        GIVEN a leveraged holding, a plain holding and HKD/USD/P cash
        WHEN symbols are resolved
        THEN holdings come first, then components, then one HKD pair
        """
        main = make_portfolio(
            "main",
            holdings=[
                Holding("CTAP", 5, leveraged_components=[LeveragedComponent(1, "CTA"), LeveragedComponent(1, "IVV")]),
                Holding("AAPL", 10),
            ],
            cash=[
                CashEntry("Cash", "USD", 100.0),
                CashEntry("Loan", "HKD", -2_530_000.0, is_margin=True),
                CashEntry("Fund", "HKD", 10.0),
                CashEntry("Ret", "P", 1.0, portfolio_ref="retirement"),
            ],
        )

        assert resolve_quote_symbols([main]) == ["CTAP", "AAPL", "CTA", "IVV", "HKDUSD=X"]

    def test_deduplicates_across_portfolios(self):
        main = make_portfolio("main", holdings=[Holding("AAPL", 1)], cash=[CashEntry("C", "EUR", 1.0)])
        other = make_portfolio("other", holdings=[Holding("AAPL", 2), Holding("SPY", 1)], cash=[CashEntry("C", "EUR", 2.0)])

        assert resolve_quote_symbols([main, other]) == ["AAPL", "EURUSD=X", "SPY"]

    def test_empty_registry_yields_empty_list(self):
        assert resolve_quote_symbols([]) == []

    def test_resolution_is_idempotent(self):
        """
        GIVEN the same registry state
        WHEN symbols are resolved twice
        THEN results are equal and the portfolios are unchanged
        """
        main = make_portfolio("main", holdings=[Holding("MSFT", 1)], cash=[CashEntry("C", "GBP", 1.0)])
        holdings_before = main.get_holdings()
        cash_before = main.get_cash_entries()

        first = resolve_quote_symbols([main])
        second = resolve_quote_symbols([main])

        assert first == second
        assert main.get_holdings() is holdings_before
        assert main.get_cash_entries() is cash_before


class TestResolveNavCandidates:
    def test_all_holding_symbols_deduplicated(self):
        main = make_portfolio("main", holdings=[Holding("CTA", 1), Holding("AAPL", 1)])
        other = make_portfolio("other", holdings=[Holding("CTA", 3)])

        assert resolve_nav_candidates([main, other]) == ["CTA", "AAPL"]
