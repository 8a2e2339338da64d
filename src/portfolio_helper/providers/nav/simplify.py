"""NAV providers scraping Simplify ETF fund pages."""

import logging
from html.parser import HTMLParser
from typing import Optional

import requests

from portfolio_helper.core.exceptions import FetchError
from portfolio_helper.domain.models import NavRecord
from portfolio_helper.providers.http import fetch_text

logger = logging.getLogger(__name__)

SIMPLIFY_FUND_URL = "https://www.simplify.us/etfs/{slug}"

_VOID_TAGS = {"br", "hr", "img", "input", "link", "meta", "source", "wbr"}


class _NavHeadingParser(HTMLParser):
    """Captures the text of the first element following an ``<h3>`` containing "NAV"."""

    def __init__(self):
        super().__init__()
        self._in_heading = False
        self._heading_text: list[str] = []
        self._awaiting_value = False
        self._capture_depth = 0
        self._value_text: list[str] = []
        self.value: Optional[str] = None

    def handle_starttag(self, tag, attrs):
        if self.value is not None:
            return
        if self._capture_depth:
            if tag not in _VOID_TAGS:
                self._capture_depth += 1
        elif self._awaiting_value:
            self._awaiting_value = False
            self._capture_depth = 1
        elif tag == "h3":
            self._in_heading = True
            self._heading_text = []

    def handle_endtag(self, tag):
        if self.value is not None:
            return
        if self._capture_depth:
            self._capture_depth -= 1
            if self._capture_depth == 0:
                self.value = "".join(self._value_text).strip()
        elif self._in_heading and tag == "h3":
            self._in_heading = False
            if "NAV" in "".join(self._heading_text):
                self._awaiting_value = True

    def handle_data(self, data):
        if self._capture_depth:
            self._value_text.append(data)
        elif self._in_heading:
            self._heading_text.append(data)


def parse_nav_page(symbol: str, html: str) -> float:
    """Extract the NAV figure (e.g. ``$ 25.43``) from a fund page."""
    parser = _NavHeadingParser()
    parser.feed(html)
    parser.close()

    if parser.value is None:
        raise FetchError(symbol, "could not find NAV heading")

    cleaned = parser.value.replace("$", "").replace(",", "").strip()
    try:
        return float(cleaned)
    except ValueError as e:
        raise FetchError(symbol, f"could not parse NAV value {parser.value!r}") from e


class SimplifyEtfNavProvider:
    """NAV provider for one Simplify ETF, identified by its site slug."""

    def __init__(
        self,
        symbol: str,
        slug: str,
        session: requests.Session,
        timeout: float = 15.0,
    ):
        self.symbol = symbol
        self.slug = slug
        self._session = session
        self._timeout = timeout

    @property
    def url(self) -> str:
        return SIMPLIFY_FUND_URL.format(slug=self.slug)

    def fetch_nav(self) -> NavRecord:
        html = fetch_text(self._session, self.url, self.symbol, self._timeout)
        nav = parse_nav_page(self.symbol, html)
        logger.info(f"Fetched NAV for {self.symbol}: {nav}")
        return NavRecord(symbol=self.symbol, nav=nav)
