"""Background sweeper that keeps the limiter's maps from growing without bound."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class Reaper:
    """Calls ``sweep`` every ``interval_s`` seconds on a daemon thread until stopped."""

    def __init__(self, sweep: Callable[[], object], interval_s: float, *, name: str = "loginguard-reaper") -> None:
        self._sweep = sweep
        self._interval_s = max(0.001, float(interval_s))
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()

    @property
    def running(self) -> bool:
        with self._state_lock:
            return bool(self._thread and self._thread.is_alive())

    def start(self) -> bool:
        with self._state_lock:
            if self._thread and self._thread.is_alive():
                return False
            self._stop_event.clear()
            thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
            thread.start()
            self._thread = thread
        logger.info("reaper started (every %.3fs)", self._interval_s)
        return True

    def stop(self, *, join_timeout_s: float = 3.0) -> bool:
        with self._state_lock:
            thread = self._thread
            if not thread:
                return False
            self._stop_event.set()
        thread.join(timeout=max(0.1, float(join_timeout_s)))
        with self._state_lock:
            if self._thread is thread:
                self._thread = None
        logger.info("reaper stopped")
        return True

    def _run_loop(self) -> None:
        # wait() returns True once stop() sets the event
        while not self._stop_event.wait(self._interval_s):
            try:
                self._sweep()
            except Exception:
                logger.exception("reaper sweep failed")
