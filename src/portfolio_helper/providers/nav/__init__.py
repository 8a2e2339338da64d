"""NAV providers."""

from portfolio_helper.providers.nav.base import NavProvider
from portfolio_helper.providers.nav.simplify import SimplifyEtfNavProvider, parse_nav_page
from portfolio_helper.providers.nav.registry import default_nav_providers, SIMPLIFY_FUNDS

__all__ = [
    "NavProvider",
    "SimplifyEtfNavProvider",
    "parse_nav_page",
    "default_nav_providers",
    "SIMPLIFY_FUNDS",
]
