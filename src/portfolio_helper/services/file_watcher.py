"""Debounced change detection for a single data file."""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from portfolio_helper.core.exceptions import WatcherSetupError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]

# (mtime_ns, size, inode); None while the file does not exist
_Signature = Optional[tuple[int, int, int]]


def _file_signature(path: Path) -> _Signature:
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    return (st.st_mtime_ns, st.st_size, st.st_ino)


class FileWatcher:
    """
    Watches one file and invokes callbacks once per settled change.

    A background thread samples the file's stat signature every
    ``poll_interval_ms``. A create or modify records an event; callbacks
    run only after ``debounce_ms`` pass with no further event, so a burst
    of writes (or delete + recreate) produces a single trigger. Deletion
    alone is not an event.
    """

    def __init__(
        self,
        path: Path,
        debounce_ms: int = 500,
        poll_interval_ms: int = 100,
    ):
        self.path = Path(path).resolve()
        self._debounce = debounce_ms / 1000.0
        self._poll_interval = poll_interval_ms / 1000.0
        self._callbacks: tuple[ChangeCallback, ...] = ()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_signature: _Signature = None
        self._last_event_at: Optional[float] = None
        self._pending = False

    def on_change(self, callback: ChangeCallback) -> None:
        """Register a callback; callbacks run in registration order."""
        with self._lock:
            self._callbacks = self._callbacks + (callback,)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Begin watching. Calling start() on a running watcher is a no-op.

        Raises:
            WatcherSetupError: If the file's parent directory does not exist.
        """
        if self.is_running:
            return
        if not self.path.parent.is_dir():
            raise WatcherSetupError(str(self.path), "parent directory does not exist")

        self._last_signature = _file_signature(self.path)
        # Each loop owns its stop event; a loop still inside a callback after
        # stop() keeps its event set and exits once the callback returns.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name=f"file-watcher:{self.path.name}",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Started watching file: {self.path}")

    def stop(self) -> None:
        """Stop the watch thread; safe to call more than once."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self._poll_interval * 5, 1.0))
            if thread.is_alive():
                logger.warning(f"Watch thread for {self.path} still busy in a callback, it will exit afterwards")
        if thread is not None:
            logger.info(f"Stopped watching file: {self.path}")
        self._thread = None

    def notify_event(self, path: Path) -> None:
        """Record a create/modify event; events for other paths are ignored."""
        if Path(path).resolve() != self.path:
            return
        with self._lock:
            self._last_event_at = time.monotonic()
            self._pending = True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._poll_interval):
            signature = _file_signature(self.path)
            if signature != self._last_signature:
                self._last_signature = signature
                if signature is not None:
                    self.notify_event(self.path)
            self._fire_if_settled()

    def _fire_if_settled(self) -> None:
        with self._lock:
            if not self._pending or self._last_event_at is None:
                return
            if time.monotonic() - self._last_event_at < self._debounce:
                return
            self._pending = False
            callbacks = self._callbacks

        logger.info(f"File changed, triggering callbacks: {self.path}")
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(f"Error in file change callback for {self.path}")
