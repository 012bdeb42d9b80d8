"""
Debouncer that coalesces bursts of notifications into one deferred call.
"""
import threading
from typing import Callable, Optional
from loguru import logger


class Debouncer:
    """
    Runs a callback once a quiet period has elapsed since the last trigger.

    Every trigger() restarts the timer, so N triggers inside one window
    produce exactly one callback.
    """

    def __init__(self, delay: float, callback: Callable[[], object]):
        self.delay = delay
        self.callback = callback
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        """(Re)start the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop a pending call without running it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Run a pending call immediately."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
        self._run()

    def _fire(self) -> None:
        with self._lock:
            # A newer trigger replaced this timer between expiry and here
            if self._timer is None or threading.current_thread() is not self._timer:
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}")
