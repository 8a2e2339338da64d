"""Cash entry domain model."""

from dataclasses import dataclass
from typing import Optional

USD = "USD"
PORTFOLIO_REF_CURRENCY = "P"


@dataclass(frozen=True)
class CashEntry:
    """
    One line of a portfolio's cash source.

    For ``currency == "P"`` the amount is a multiplier applied to the
    holdings value of the portfolio named by ``portfolio_ref``.
    """

    label: str
    currency: str
    amount: float
    is_margin: bool = False
    is_equity: bool = False
    portfolio_ref: Optional[str] = None

    @property
    def key(self) -> tuple[str, str, bool, bool]:
        """Identity key: (label, currency, is_margin, is_equity)."""
        return (self.label, self.currency, self.is_margin, self.is_equity)

    @property
    def is_portfolio_ref(self) -> bool:
        return self.currency == PORTFOLIO_REF_CURRENCY

    @property
    def is_foreign(self) -> bool:
        """Return True for literal non-USD currency amounts."""
        return self.currency not in (USD, PORTFOLIO_REF_CURRENCY)
