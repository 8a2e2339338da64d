"""In-memory directory of managed portfolios."""

import threading
from typing import Optional

from portfolio_helper.core.exceptions import MissingMainPortfolioError
from portfolio_helper.domain.models import ManagedPortfolio

MAIN_PORTFOLIO_ID = "main"


class PortfolioRegistry:
    """
    Insertion-ordered registry of portfolios ("main" first by convention).

    Registration happens at startup; lookups are safe from any thread.
    """

    def __init__(self):
        self._entries: dict[str, ManagedPortfolio] = {}
        self._lock = threading.Lock()

    def register(self, portfolio: ManagedPortfolio) -> None:
        with self._lock:
            entries = dict(self._entries)
            entries[portfolio.id] = portfolio
            self._entries = entries

    def get(self, portfolio_id: str) -> Optional[ManagedPortfolio]:
        return self._entries.get(portfolio_id)

    def all(self) -> list[ManagedPortfolio]:
        return list(self._entries.values())

    def main(self) -> ManagedPortfolio:
        """
        Return the main portfolio.

        Raises:
            MissingMainPortfolioError: If no portfolio with id "main" exists.
        """
        portfolio = self._entries.get(MAIN_PORTFOLIO_ID)
        if portfolio is None:
            raise MissingMainPortfolioError()
        return portfolio

    def has_multiple(self) -> bool:
        return len(self._entries) > 1

    def __len__(self) -> int:
        return len(self._entries)
