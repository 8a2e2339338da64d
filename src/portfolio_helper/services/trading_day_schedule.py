"""
NAV fetch timing based on US trading day boundaries.

NAV for a trading day is expected to be published by that day's
market open (9:30 AM ET) + 24 hours. The next fetch is:

1. the most recent trading-day open that has already passed, + 24h,
   if that moment is still in the future;
2. otherwise the next trading day's open + 24h.

Trading days are Mon-Fri; holidays are not modelled.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from portfolio_helper.core.timezone import EASTERN_TZ, now_eastern, to_eastern

logger = logging.getLogger(__name__)

MARKET_OPEN = time(9, 30)
PUBLICATION_LAG = timedelta(hours=24)
_SATURDAY = 5


def _is_weekend(day: date) -> bool:
    return day.weekday() >= _SATURDAY


def _open_at(day: date) -> datetime:
    return EASTERN_TZ.localize(datetime.combine(day, MARKET_OPEN))


def _plus_lag(dt: datetime) -> datetime:
    return EASTERN_TZ.normalize(dt + PUBLICATION_LAG)


def most_recent_trading_day_start(now: datetime) -> datetime:
    """The latest weekday 9:30 AM ET that is <= ``now``."""
    day = now.date()
    while _is_weekend(day):
        day -= timedelta(days=1)

    start = _open_at(day)
    if start > now:
        day -= timedelta(days=1)
        while _is_weekend(day):
            day -= timedelta(days=1)
        start = _open_at(day)
    return start


def next_trading_day_start(start_date: date) -> datetime:
    """The first weekday on or after ``start_date`` at 9:30 AM ET."""
    day = start_date
    while _is_weekend(day):
        day += timedelta(days=1)
    return _open_at(day)


def compute_next_fetch_time(now: Optional[datetime] = None) -> datetime:
    now = to_eastern(now) if now is not None else now_eastern()
    last_start = most_recent_trading_day_start(now)
    candidate = _plus_lag(last_start)
    if candidate > now:
        return candidate
    return _plus_lag(next_trading_day_start(last_start.date() + timedelta(days=1)))


def next_nav_fetch_delay_seconds(now: Optional[datetime] = None) -> float:
    """Seconds until the next scheduled NAV fetch; never negative."""
    now = to_eastern(now) if now is not None else now_eastern()
    next_fetch = compute_next_fetch_time(now)
    logger.info(f"Next NAV fetch at {next_fetch.strftime('%a %Y-%m-%d %H:%M:%S %Z')}")
    return max((next_fetch - now).total_seconds(), 0.0)
