from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)


class TickScheduler:
    """
    Cancellable periodic task.

    Runs `callback` once per interval on a worker thread, one tick at a time:
    the next tick is scheduled only after the previous one returned. stop()
    cancels any pending tick; a tick already running is allowed to finish.

    `clock` (seconds) and `wait` (blocking wait with timeout, returns True if
    cancelled) are injectable. run_once() steps a single tick on the caller's
    thread for deterministic tests.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval_sec: float = 1.0 / 30.0,
        clock: Callable[[], float] = time.perf_counter,
        wait: Optional[Callable[[float], bool]] = None,
        name: str = "pose-tick",
    ):
        self.callback = callback
        self.interval_sec = max(0.0, float(interval_sec))
        self._clock = clock
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._thread: Optional[threading.Thread] = None
        self._name = name

        self.ticks = 0
        self.errors = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def run_once(self) -> Optional[object]:
        """Execute one tick. Exceptions are logged and counted, never re-raised."""
        if self._stop_event.is_set():
            return None
        self.ticks += 1
        try:
            return self.callback()
        except Exception as e:
            self.errors += 1
            log.error("Tick %d failed: %s", self.ticks, e, exc_info=True)
            return None

    def _loop(self) -> None:
        log.info("Tick loop started (interval=%.3fs)", self.interval_sec)
        while not self._stop_event.is_set():
            t0 = self._clock()
            self.run_once()
            remaining = self.interval_sec - (self._clock() - t0)
            if self._wait(max(0.0, remaining)) or self._stop_event.is_set():
                break
        log.info("Tick loop stopped after %d tick(s), %d error(s)", self.ticks, self.errors)

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
