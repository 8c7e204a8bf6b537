from __future__ import annotations

from typing import Protocol, Union

from posetrack.infrastructure.data.models import FaceKeypoints, FaceLandmarks, PoseEstimate

Detection = Union[FaceKeypoints, FaceLandmarks]

NOT_READY = "not_ready"
INVALID_INPUT = "invalid_input"
DEGENERATE_GEOMETRY = "degenerate_geometry"


class PoseEstimator(Protocol):
    """
    Head pose capability shared by the learned and geometric variants.

    estimate() never raises for bad detections; it returns a PoseEstimate
    whose reason says why no pose came out.
    """

    name: str

    @property
    def is_ready(self) -> bool:
        ...

    def estimate(self, detection: Detection, frame_w: int, frame_h: int, timestamp_ms: int) -> PoseEstimate:
        ...
