import time
from typing import Callable, Optional


class FpsTracker:
    """
    Measures ticks per second over a sampling window, optionally with EMA smoothing.

    Call update() exactly once per processed tick. The clock is injectable
    (seconds, monotonic) so tests can drive it.
    """
    def __init__(
        self,
        sample_period_sec: float = 1.0,
        ema_alpha: Optional[float] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.sample_period_sec = float(sample_period_sec)
        self.ema_alpha = ema_alpha  # e.g. 0.2 for smoothing, or None to disable
        self._clock = clock

        self._t0 = self._clock()
        self._frames = 0

        self.current_fps = 0.0          # last reported windowed fps
        self.smoothed_fps = 0.0         # EMA of windowed fps (if enabled)

    def update(self) -> float:
        now = self._clock()
        self._frames += 1

        elapsed = now - self._t0
        if elapsed >= self.sample_period_sec:
            fps = self._frames / elapsed
            self.current_fps = fps

            if self.ema_alpha is not None:
                a = float(self.ema_alpha)
                if self.smoothed_fps == 0.0:
                    self.smoothed_fps = fps
                else:
                    self.smoothed_fps = a * fps + (1.0 - a) * self.smoothed_fps

            # reset window
            self._t0 = now
            self._frames = 0

        return self.fps

    @property
    def fps(self) -> float:
        return self.smoothed_fps if self.ema_alpha is not None else self.current_fps

