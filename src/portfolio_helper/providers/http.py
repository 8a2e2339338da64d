"""Shared HTTP session factory for page-scraping providers."""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from portfolio_helper.core.exceptions import FetchError

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def create_session(
    max_retries: int = 2,
    backoff_factor: float = 1.0,
    retry_statuses: tuple = (429, 500, 502, 503, 504),
) -> requests.Session:
    """Create a requests session with retry configuration."""
    session = requests.Session()
    session.headers["User-Agent"] = BROWSER_USER_AGENT

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=list(retry_statuses),
        allowed_methods=["GET"],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


def fetch_text(session: requests.Session, url: str, key: str, timeout: float) -> str:
    """
    GET ``url`` and return the body text.

    Raises:
        FetchError: On transport failure or any non-200 status.
    """
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(key, f"request to {url} failed: {e}") from e

    if response.status_code != 200:
        raise FetchError(key, f"HTTP {response.status_code} from {url}")
    return response.text
