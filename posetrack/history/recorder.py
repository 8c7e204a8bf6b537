from __future__ import annotations

import logging
from threading import Lock
from typing import List, Optional, Tuple

from posetrack.infrastructure.data.models import Pose

log = logging.getLogger(__name__)


class PoseHistoryRecorder:
    """
    Deadband recorder for the orientation trajectory.

    Each candidate is compared against the last *kept* sample, not the previous
    frame: it is kept only if at least one axis moved more than `threshold`
    degrees from it. Jitter around a kept pose is suppressed; slow drift is
    recorded once its accumulated change crosses the threshold.

    Written from the tick loop only; export/display read through snapshot().
    """

    DEFAULT_THRESHOLD_DEG = 2.0

    def __init__(self, threshold_deg: float = DEFAULT_THRESHOLD_DEG, start_recording: bool = True):
        self.threshold_deg = float(threshold_deg)
        self._lock = Lock()
        self._history: List[Pose] = []
        self._last: Optional[Pose] = None
        self._recording = bool(start_recording)

    # --- session ---
    @property
    def is_recording(self) -> bool:
        return self._recording

    def start_recording(self) -> None:
        self._recording = True
        log.info("Pose recording started")

    def stop_recording(self) -> None:
        self._recording = False
        log.info("Pose recording stopped (%d samples)", len(self))

    # --- filter ---
    def has_changed(self, candidate: Pose, threshold: Optional[float] = None) -> bool:
        thr = self.threshold_deg if threshold is None else float(threshold)
        last = self._last
        if last is None:
            return True
        return (
            abs(candidate.roll - last.roll) > thr
            or abs(candidate.pitch - last.pitch) > thr
            or abs(candidate.yaw - last.yaw) > thr
        )

    def consider_sample(self, candidate: Pose, threshold: Optional[float] = None) -> bool:
        if not self._recording:
            return False
        if not candidate.is_finite():
            log.warning("Dropping non-finite pose %r", candidate)
            return False

        with self._lock:
            if not self.has_changed(candidate, threshold):
                return False
            self._history.append(candidate)
            self._last = candidate
        return True

    def clear(self) -> None:
        with self._lock:
            n = len(self._history)
            self._history = []
            self._last = None
        log.info("Pose history cleared (%d samples dropped)", n)

    # --- readers ---
    @property
    def last_recorded(self) -> Optional[Pose]:
        return self._last

    def snapshot(self) -> Tuple[Pose, ...]:
        with self._lock:
            return tuple(self._history)

    def latest(self, n: int = 10) -> List[Pose]:
        """Most recent samples first."""
        with self._lock:
            tail = self._history[-int(n):] if n > 0 else []
        return list(reversed(tail))

    def __len__(self) -> int:
        return len(self._history)
