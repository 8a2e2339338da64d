"""Managed portfolio domain model."""

import threading
from pathlib import Path
from typing import Iterable, Optional

from portfolio_helper.domain.models.cash import CashEntry
from portfolio_helper.domain.models.holding import Holding


class ManagedPortfolio:
    """
    A named portfolio backed by a holdings file and a cash file.

    Holdings and cash entries are each held as an immutable tuple and
    replaced wholesale. Readers take the current reference without locking
    and therefore always see either the old or the new collection.
    """

    def __init__(
        self,
        portfolio_id: str,
        name: str,
        holdings_path: Optional[Path] = None,
        cash_path: Optional[Path] = None,
    ):
        self.id = portfolio_id
        self.name = name
        self.holdings_path = holdings_path
        self.cash_path = cash_path
        self._holdings: tuple[Holding, ...] = ()
        self._cash_entries: tuple[CashEntry, ...] = ()
        self._write_lock = threading.Lock()

    def get_holdings(self) -> tuple[Holding, ...]:
        return self._holdings

    def replace_holdings(self, holdings: Iterable[Holding]) -> None:
        """Swap in a new holdings collection (duplicates: last symbol wins)."""
        snapshot = _dedupe_holdings(holdings)
        with self._write_lock:
            self._holdings = snapshot

    def get_cash_entries(self) -> tuple[CashEntry, ...]:
        return self._cash_entries

    def replace_cash_entries(self, entries: Iterable[CashEntry]) -> None:
        """Swap in a new cash collection (duplicate identity keys: last wins)."""
        snapshot = _dedupe_cash(entries)
        with self._write_lock:
            self._cash_entries = snapshot

    def __repr__(self) -> str:
        return f"ManagedPortfolio(id={self.id!r}, name={self.name!r})"


def _dedupe_holdings(holdings: Iterable[Holding]) -> tuple[Holding, ...]:
    by_symbol: dict[str, Holding] = {}
    for holding in holdings:
        by_symbol[holding.symbol] = holding
    return tuple(by_symbol.values())


def _dedupe_cash(entries: Iterable[CashEntry]) -> tuple[CashEntry, ...]:
    by_key: dict[tuple, CashEntry] = {}
    for entry in entries:
        by_key[entry.key] = entry
    return tuple(by_key.values())
