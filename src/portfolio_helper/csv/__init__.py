"""Holdings and cash source readers."""

from portfolio_helper.csv.holdings_reader import read_holdings, parse_leveraged_components
from portfolio_helper.csv.cash_reader import read_cash, parse_cash_line

__all__ = [
    "read_holdings",
    "parse_leveraged_components",
    "read_cash",
    "parse_cash_line",
]
