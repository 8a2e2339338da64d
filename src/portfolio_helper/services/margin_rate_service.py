"""Margin interest rate poller with cooldown-gated manual refresh."""

import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional, Protocol

from portfolio_helper.core.exceptions import RateLimitedError
from portfolio_helper.domain.models import CurrencyRates, MarginRateTable
from portfolio_helper.providers.margin_rate_provider import MARGIN_RATES_KEY
from portfolio_helper.services.polling_service import PollingService

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_RATE_INTERVAL = 24 * 60 * 60
DEFAULT_RELOAD_COOLDOWN = 10 * 60


class MarginRateProvider(Protocol):
    def fetch_rates(self) -> MarginRateTable:
        """Raises FetchError (EmptyParseError when nothing parsed)."""
        ...


class MarginRateService(PollingService[MarginRateTable]):
    """
    Keeps one process-wide margin rate table.

    The whole table is a single cache entry, so a refresh replaces every
    currency at once; a failed or empty parse leaves the old table.
    """

    def __init__(
        self,
        provider: MarginRateProvider,
        reload_cooldown_seconds: float = DEFAULT_RELOAD_COOLDOWN,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__("IBKR margin rates", max_workers=1)
        self._provider = provider
        self._cooldown = reload_cooldown_seconds
        self._clock = clock
        self._last_fetch_at: Optional[float] = None
        self._reload_lock = threading.Lock()
        self._reload_future: Optional[Future] = None
        self.on_update(self._record_fetch)

    def start(self, interval_seconds: int = DEFAULT_MARGIN_RATE_INTERVAL) -> None:
        self.start_polling([MARGIN_RATES_KEY], interval_seconds)

    def fetch_item(self, key: str) -> Optional[MarginRateTable]:
        return dict(self._provider.fetch_rates())

    def _record_fetch(self, key: str, table: MarginRateTable) -> None:
        self._last_fetch_at = self._clock()
        logger.info(f"Fetched IBKR margin rates for {len(table)} currencies: {sorted(table)}")

    def rates(self) -> MarginRateTable:
        return dict(self.get(MARGIN_RATES_KEY) or {})

    def get_rates(self, currency: str) -> Optional[CurrencyRates]:
        return self.rates().get(currency.upper())

    @property
    def last_fetch_ms(self) -> Optional[int]:
        if self._last_fetch_at is None:
            return None
        return int(self._last_fetch_at * 1000)

    def seconds_until_reload_allowed(self) -> float:
        if self._last_fetch_at is None:
            return 0.0
        return max(self._cooldown - (self._clock() - self._last_fetch_at), 0.0)

    def can_reload(self) -> bool:
        return self.seconds_until_reload_allowed() <= 0

    def reload_now(self) -> Future:
        """
        Queue an immediate refresh.

        While a manual refresh is still running its future is returned
        instead of queueing a second page fetch.

        Raises:
            RateLimitedError: If the last successful fetch is within the cooldown.
        """
        with self._reload_lock:
            if self._reload_future is not None and not self._reload_future.done():
                logger.info("IBKR margin rate reload already in progress")
                return self._reload_future
            wait_seconds = self.seconds_until_reload_allowed()
            if wait_seconds > 0:
                raise RateLimitedError("Margin rate reload", retry_after_seconds=wait_seconds)
            logger.info("Manual IBKR margin rate reload requested")
            self._reload_future = self.submit_fetch(MARGIN_RATES_KEY)
            return self._reload_future
