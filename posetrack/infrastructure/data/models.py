from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Pose:
    """Head orientation in degrees plus capture time (epoch milliseconds)."""
    roll: float
    pitch: float
    yaw: float
    timestamp: int

    def angles(self) -> Tuple[float, float, float]:
        return (self.roll, self.pitch, self.yaw)

    def is_finite(self) -> bool:
        return all(math.isfinite(a) for a in self.angles())

    def iso_time(self) -> str:
        dt = _EPOCH + timedelta(milliseconds=int(self.timestamp))
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def __repr__(self) -> str:
        return f"Pose(roll={self.roll:.2f}, pitch={self.pitch:.2f}, yaw={self.yaw:.2f}, t={self.timestamp})"


@dataclass(frozen=True)
class BoundingBox:
    top_left: Point
    bottom_right: Point

    @property
    def width(self) -> float:
        return float(self.bottom_right[0]) - float(self.top_left[0])

    @property
    def height(self) -> float:
        return float(self.bottom_right[1]) - float(self.top_left[1])

    @property
    def center(self) -> Point:
        return (
            (float(self.top_left[0]) + float(self.bottom_right[0])) / 2.0,
            (float(self.top_left[1]) + float(self.bottom_right[1])) / 2.0,
        )

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0)


def _as_points(points: Sequence[Sequence[float]]) -> np.ndarray:
    arr = np.array(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected a sequence of (x, y) points, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class FaceKeypoints:
    """
    Coarse 6-point detection:
      0 right eye, 1 left eye, 2 nose tip, 3 mouth, 4 right ear, 5 left ear
    """
    points: np.ndarray
    box: BoundingBox
    score: float = 1.0

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], box: BoundingBox, score: float = 1.0) -> "FaceKeypoints":
        return cls(points=_as_points(points), box=box, score=float(score))


@dataclass(frozen=True, eq=False)
class FaceLandmarks:
    """Fine-grained landmark set (68 points for the iBUG layout)."""
    points: np.ndarray
    box: Optional[BoundingBox] = None

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], box: Optional[BoundingBox] = None) -> "FaceLandmarks":
        return cls(points=_as_points(points), box=box)


@dataclass(frozen=True)
class PoseEstimate:
    pose: Optional[Pose]
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.pose is not None


@dataclass(frozen=True)
class TickResult:
    pose: Optional[Pose]
    reason: Optional[str] = None
    recorded: bool = False
    cheating_score: float = 0.0
    history_length: int = 0
    fps: float = 0.0
