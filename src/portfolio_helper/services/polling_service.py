"""
Generic periodic-fetch engine.

A PollingService owns one cache keyed by symbol. ``start_polling`` fetches
every key at once on a worker pool, then repeats after a fixed delay
measured from the end of each round. Restarting replaces the schedule;
results still in flight from the old schedule are discarded.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Generic, Iterable, Optional, TypeVar

from portfolio_helper.core.exceptions import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

UpdateCallback = Callable[[str, T], None]
# Returns the number of seconds to wait before the next round
DelaySchedule = Callable[[], float]

_ROUND_WAIT_SLICE_SECONDS = 0.25


class _PollingRun:
    """One schedule: a fixed key list plus its cancellation flag."""

    def __init__(self, keys: list[str], next_delay: DelaySchedule):
        self.keys = keys
        self.next_delay = next_delay
        self.cancelled = threading.Event()
        self.thread: Optional[threading.Thread] = None


class PollingService(ABC, Generic[T]):
    """
    Base class for the quote, NAV and margin-rate pollers.

    Subclasses implement ``fetch_item``. Per-key writes are guarded by a
    ticket taken when the fetch starts, so a slow fetch that finishes after
    a newer one never overwrites the newer result. The cache write and the
    subscriber notification for a key happen under one lock.
    """

    def __init__(self, service_name: str, max_workers: int = 8):
        self.service_name = service_name
        self._max_workers = max_workers
        self._cache: dict[str, T] = {}
        self._cache_tickets: dict[str, int] = {}
        self._tickets = itertools.count(1)
        self._ticket_lock = threading.Lock()
        self._commit_lock = threading.Lock()
        self._callbacks: tuple[UpdateCallback, ...] = ()
        self._callbacks_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._run: Optional[_PollingRun] = None

    @abstractmethod
    def fetch_item(self, key: str) -> Optional[T]:
        """
        Fetch one key. Return None to leave the cache untouched.

        Raises:
            FetchError: (or any exception) on failure; logged by the engine.
        """

    # ------------------------------------------------------------------
    # Schedule control
    # ------------------------------------------------------------------

    def start_polling(
        self,
        keys: Iterable[str],
        interval_seconds: Optional[float] = None,
        schedule: Optional[DelaySchedule] = None,
    ) -> None:
        """
        Fetch all ``keys`` now, then again every ``interval_seconds``.

        ``schedule`` may replace the fixed interval with a callable that
        returns the delay before each next round. Any previous schedule is
        cancelled first.
        """
        if schedule is None:
            if interval_seconds is None:
                raise ValueError("interval_seconds or schedule is required")
            interval = float(interval_seconds)
            schedule = lambda: interval  # noqa: E731

        run = _PollingRun(list(dict.fromkeys(keys)), schedule)
        with self._state_lock:
            self._cancel_run_locked()
            self._ensure_executor_locked()
            self._run = run
            run.thread = threading.Thread(
                target=self._poll_loop,
                args=(run,),
                name=f"poller:{self.service_name}",
                daemon=True,
            )
            run.thread.start()

        logger.info(f"{self.service_name}: polling {len(run.keys)} keys")

    def stop_polling(self) -> None:
        """Cancel the current schedule without waiting for in-flight fetches."""
        with self._state_lock:
            self._cancel_run_locked()

    def shutdown(self) -> None:
        """Cancel timers and abandon in-flight work; safe to call repeatedly."""
        with self._state_lock:
            was_active = self._run is not None or self._executor is not None
            self._cancel_run_locked()
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
        if was_active:
            logger.info(f"Shutting down {self.service_name}...")

    @property
    def is_polling(self) -> bool:
        run = self._run
        return run is not None and not run.cancelled.is_set()

    @property
    def polled_keys(self) -> list[str]:
        run = self._run
        return list(run.keys) if run is not None else []

    # ------------------------------------------------------------------
    # Cache access and subscriptions
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[T]:
        """Last successful result for ``key``; never triggers a fetch."""
        return self._cache.get(key)

    def snapshot(self) -> dict[str, T]:
        """Copy of the whole cache."""
        with self._commit_lock:
            return dict(self._cache)

    def on_update(self, callback: UpdateCallback) -> Callable[[], None]:
        """
        Register ``callback(key, result)``, invoked after each successful
        cache write. Returns a function that removes the callback.
        """
        with self._callbacks_lock:
            self._callbacks = self._callbacks + (callback,)

        def remove() -> None:
            with self._callbacks_lock:
                self._callbacks = tuple(cb for cb in self._callbacks if cb is not callback)

        return remove

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch_all(self, keys: Iterable[str]) -> None:
        """Run one synchronous round over ``keys`` outside any schedule."""
        self._fetch_round(list(dict.fromkeys(keys)), None)

    def submit_fetch(self, key: str) -> Future:
        """Queue a single out-of-schedule fetch of ``key`` on the worker pool."""
        with self._state_lock:
            executor = self._ensure_executor_locked()
        return executor.submit(self._fetch_and_commit, key, None)

    def _poll_loop(self, run: _PollingRun) -> None:
        while not run.cancelled.is_set():
            self._fetch_round(run.keys, run)
            if run.cancelled.is_set():
                break
            try:
                delay = max(run.next_delay(), 0.0)
            except Exception:
                logger.exception(f"{self.service_name}: schedule failed, stopping")
                break
            if run.cancelled.wait(delay):
                break

    def _fetch_round(self, keys: list[str], run: Optional[_PollingRun]) -> None:
        if not keys:
            return
        with self._state_lock:
            executor = self._ensure_executor_locked()
        try:
            pending = {executor.submit(self._fetch_and_commit, key, run) for key in keys}
        except RuntimeError:
            # Executor shut down underneath us
            return

        while pending:
            if run is not None and run.cancelled.is_set():
                for future in pending:
                    future.cancel()
                return
            _, pending = wait(pending, timeout=_ROUND_WAIT_SLICE_SECONDS)

        logger.info(f"{self.service_name}: completed fetching for {len(keys)} keys")

    def _fetch_and_commit(self, key: str, run: Optional[_PollingRun]) -> bool:
        if run is not None and run.cancelled.is_set():
            return False

        with self._ticket_lock:
            ticket = next(self._tickets)
        try:
            data = self.fetch_item(key)
        except FetchError as e:
            logger.warning(f"{self.service_name}: {e.message}")
            return False
        except Exception as e:
            logger.warning(f"{self.service_name}: failed to fetch {key}: {e}", exc_info=True)
            return False

        if data is None:
            return False
        if run is not None and run.cancelled.is_set():
            logger.debug(f"{self.service_name}: discarding {key} from cancelled schedule")
            return False
        return self._commit(key, data, ticket)

    def _commit(self, key: str, data: T, ticket: int) -> bool:
        with self._commit_lock:
            if ticket < self._cache_tickets.get(key, 0):
                logger.debug(f"{self.service_name}: dropping stale result for {key}")
                return False
            self._cache[key] = data
            self._cache_tickets[key] = ticket
            for callback in self._callbacks:
                try:
                    callback(key, data)
                except Exception:
                    logger.exception(f"{self.service_name}: update callback failed for {key}")
        logger.debug(f"{self.service_name}: updated {key}")
        return True

    def _cancel_run_locked(self) -> None:
        if self._run is not None:
            self._run.cancelled.set()
            self._run = None

    def _ensure_executor_locked(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix=f"fetch:{self.service_name}",
            )
        return self._executor
