"""Static registry of fund symbols that have a NAV source."""

import requests

from portfolio_helper.providers.nav.base import NavProvider
from portfolio_helper.providers.nav.simplify import SimplifyEtfNavProvider

# symbol -> Simplify site slug
SIMPLIFY_FUNDS: dict[str, str] = {
    "CTA": "cta",
    "CTAP": "ctap",
}


def default_nav_providers(session: requests.Session, timeout: float = 15.0) -> dict[str, NavProvider]:
    """Build the symbol -> provider mapping used by the NAV poller."""
    return {
        symbol: SimplifyEtfNavProvider(symbol, slug, session, timeout)
        for symbol, slug in SIMPLIFY_FUNDS.items()
    }
