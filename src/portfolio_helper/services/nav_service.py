"""Fund NAV poller."""

import logging
from typing import Iterable, Mapping, Optional

from portfolio_helper.domain.models import NavRecord
from portfolio_helper.providers.nav.base import NavProvider
from portfolio_helper.services.polling_service import DelaySchedule, PollingService

logger = logging.getLogger(__name__)

DEFAULT_NAV_UPDATE_INTERVAL = 300


class NavService(PollingService[NavRecord]):
    """Polls NAV for the subset of symbols that have a registered provider."""

    def __init__(self, providers: Mapping[str, NavProvider], max_workers: int = 4):
        super().__init__("NAV", max_workers=max_workers)
        self._providers = dict(providers)

    def supported_symbols(self, symbols: Iterable[str]) -> list[str]:
        return [s for s in dict.fromkeys(symbols) if s in self._providers]

    def request_nav(
        self,
        symbols: Iterable[str],
        interval_seconds: int = DEFAULT_NAV_UPDATE_INTERVAL,
        schedule: Optional[DelaySchedule] = None,
    ) -> None:
        """
        Start polling the supported subset of ``symbols``.

        With no supported symbol the current schedule is stopped and
        nothing is polled.
        """
        supported = self.supported_symbols(symbols)
        if not supported:
            logger.info("No symbols with NAV providers found in portfolio")
            self.stop_polling()
            return

        cadence = "trading-day schedule" if schedule is not None else f"interval: {interval_seconds}s"
        logger.info(f"Starting NAV polling for {len(supported)} symbols: {supported} ({cadence})")
        self.start_polling(supported, interval_seconds, schedule=schedule)

    def fetch_item(self, key: str) -> Optional[NavRecord]:
        provider = self._providers.get(key)
        if provider is None:
            return None
        record = provider.fetch_nav()
        logger.debug(f"Updated NAV for {key}: {record.nav}")
        return record

    def get_nav(self, symbol: str) -> Optional[float]:
        record = self.get(symbol)
        return record.nav if record is not None else None
