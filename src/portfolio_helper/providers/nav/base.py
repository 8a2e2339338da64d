"""NAV provider protocol."""

from typing import Protocol

from portfolio_helper.domain.models import NavRecord


class NavProvider(Protocol):
    """A source of the official NAV for exactly one fund symbol."""

    symbol: str

    def fetch_nav(self) -> NavRecord:
        """
        Fetch the latest NAV.

        Raises:
            FetchError: If the page cannot be fetched or parsed.
        """
        ...
