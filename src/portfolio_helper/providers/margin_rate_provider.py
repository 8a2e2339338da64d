"""IBKR margin-rate page fetch and parse."""

import re
from html.parser import HTMLParser
from typing import Optional

import requests

from portfolio_helper.core.exceptions import EmptyParseError
from portfolio_helper.domain.models import CurrencyRates, MarginRateTable, RateTier
from portfolio_helper.providers.http import fetch_text

IBKR_MARGIN_RATES_URL = "https://www.interactivebrokers.com/en/trading/margin-rates.php"
MARGIN_RATES_KEY = "IBKR"

_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
_RATE_RE = re.compile(r"(\d+\.\d+)%")


class _Table:
    def __init__(self):
        self.first_header: Optional[str] = None
        self.rows: list[list[str]] = []


class _TableParser(HTMLParser):
    """Collects every table as (first ``<th>`` text, rows of ``<td>`` texts)."""

    def __init__(self):
        super().__init__()
        self.tables: list[_Table] = []
        self._stack: list[_Table] = []
        self._row: Optional[list[str]] = None
        self._cell: Optional[list[str]] = None
        self._in_header = False
        self._header_text: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "table":
            table = _Table()
            self.tables.append(table)
            self._stack.append(table)
        elif not self._stack:
            return
        elif tag == "tr":
            self._row = []
        elif tag == "td" and self._row is not None:
            self._cell = []
        elif tag == "th" and self._stack[-1].first_header is None:
            self._in_header = True
            self._header_text = []

    def handle_endtag(self, tag):
        if not self._stack:
            return
        if tag == "table":
            self._stack.pop()
        elif tag == "td" and self._cell is not None and self._row is not None:
            self._row.append(" ".join("".join(self._cell).split()))
            self._cell = None
        elif tag == "th" and self._in_header:
            self._in_header = False
            self._stack[-1].first_header = "".join(self._header_text).strip()
        elif tag == "tr" and self._row is not None:
            if self._row:
                self._stack[-1].rows.append(self._row)
            self._row = None

    def handle_data(self, data):
        if self._cell is not None:
            self._cell.append(data)
        elif self._in_header:
            self._header_text.append(data)


def _tier_upper_bound(tier_text: str) -> Optional[float]:
    """'0 - 100,000' -> 100000; '> 100,000' or blank -> None (unbounded)."""
    numbers = []
    for match in _NUMBER_RE.findall(tier_text):
        digits = match.replace(",", "")
        if digits:
            numbers.append(float(digits))
    if len(numbers) >= 2:
        return numbers[1]
    return None


def parse_margin_rates(html: str) -> MarginRateTable:
    """
    Parse the margin-rates page into per-currency tier tables.

    Raises:
        EmptyParseError: If no rates table is found or it yields no currency.
    """
    parser = _TableParser()
    parser.feed(html)
    parser.close()

    table = next((t for t in parser.tables if t.first_header == "Currency"), None)
    if table is None:
        raise EmptyParseError(MARGIN_RATES_KEY, "could not find margin rates table")

    tiers_by_currency: dict[str, list[RateTier]] = {}
    current_currency: Optional[str] = None
    for cells in table.rows:
        if len(cells) < 3:
            continue
        if cells[0]:
            current_currency = cells[0].upper()
        if current_currency is None:
            continue

        rate_match = _RATE_RE.search(cells[2])
        if rate_match is None:
            continue
        tier = RateTier(up_to=_tier_upper_bound(cells[1]), rate=float(rate_match.group(1)))
        tiers_by_currency.setdefault(current_currency, []).append(tier)

    if not tiers_by_currency:
        raise EmptyParseError(MARGIN_RATES_KEY, "margin rates table parsed but no valid rates found")

    return {
        currency: CurrencyRates(currency=currency, tiers=tuple(tiers))
        for currency, tiers in tiers_by_currency.items()
    }


class IbkrMarginRateProvider:
    """Fetches and parses the public IBKR margin-rates page."""

    def __init__(
        self,
        session: requests.Session,
        url: str = IBKR_MARGIN_RATES_URL,
        timeout: float = 30.0,
    ):
        self._session = session
        self._url = url
        self._timeout = timeout

    def fetch_page(self) -> str:
        return fetch_text(self._session, self._url, MARGIN_RATES_KEY, self._timeout)

    def fetch_rates(self) -> MarginRateTable:
        return parse_margin_rates(self.fetch_page())
