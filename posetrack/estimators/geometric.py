"""
Closed-form head pose from the 6 coarse face keypoints.

A calibrated heuristic rather than an exact inverse projection:
- roll  : eye-line tilt
- yaw   : box centre offset in the frame + nose offset from the eye midpoint
- pitch : box centre offset in the frame + nose-to-mouth distance vs. box height
"""
from __future__ import annotations

import logging
import math

import numpy as np

from posetrack.estimators.base import DEGENERATE_GEOMETRY, INVALID_INPUT
from posetrack.infrastructure.data.models import FaceKeypoints, Pose, PoseEstimate

log = logging.getLogger(__name__)

RIGHT_EYE, LEFT_EYE, NOSE, MOUTH, RIGHT_EAR, LEFT_EAR = range(6)
NUM_KEYPOINTS = 6

# Empirical coefficients; changing them changes recorded trajectories.
YAW_POSITION_GAIN = 45.0
YAW_NOSE_GAIN = 30.0
PITCH_POSITION_GAIN = 30.0
PITCH_DIST_GAIN = 20.0
EXPECTED_NOSE_MOUTH_RATIO = 0.2

ANGLE_LIMIT = 90.0


def clamp_angle(value: float, limit: float = ANGLE_LIMIT) -> float:
    return max(-limit, min(limit, float(value)))


class GeometricPoseEstimator:
    name = "geometric"

    def __init__(self, angle_limit: float = ANGLE_LIMIT):
        self.angle_limit = float(angle_limit)
        log.info("GeometricPoseEstimator initialized (clamp=±%.0f)", self.angle_limit)

    @property
    def is_ready(self) -> bool:
        return True

    def estimate(self, detection, frame_w: int, frame_h: int, timestamp_ms: int) -> PoseEstimate:
        if not isinstance(detection, FaceKeypoints):
            return PoseEstimate(None, INVALID_INPUT)

        kp = detection.points
        if kp.shape != (NUM_KEYPOINTS, 2) or not np.all(np.isfinite(kp)):
            log.debug("Rejecting keypoints with shape %s", kp.shape)
            return PoseEstimate(None, INVALID_INPUT)
        if frame_w <= 0 or frame_h <= 0:
            return PoseEstimate(None, INVALID_INPUT)

        box = detection.box
        if box.is_degenerate:
            log.debug("Degenerate bounding box %s", box)
            return PoseEstimate(None, DEGENERATE_GEOMETRY)

        angles = self.compute_angles(kp, box.center, box.width, box.height, frame_w, frame_h)
        if not all(math.isfinite(a) for a in angles):
            return PoseEstimate(None, DEGENERATE_GEOMETRY)

        roll, pitch, yaw = (clamp_angle(a, self.angle_limit) for a in angles)
        return PoseEstimate(Pose(roll=roll, pitch=pitch, yaw=yaw, timestamp=int(timestamp_ms)))

    @staticmethod
    def compute_angles(kp: np.ndarray, center, box_w: float, box_h: float, frame_w: int, frame_h: int):
        """Unclamped (roll, pitch, yaw) in degrees. Caller guarantees box_w, box_h > 0."""
        right_eye, left_eye, nose, mouth = kp[RIGHT_EYE], kp[LEFT_EYE], kp[NOSE], kp[MOUTH]
        center_x, center_y = center

        normalized_x = (center_x / frame_w - 0.5) * 2.0
        eye_center_x = (right_eye[0] + left_eye[0]) / 2.0
        nose_offset_x = nose[0] - eye_center_x
        yaw = normalized_x * YAW_POSITION_GAIN + (nose_offset_x / box_w) * YAW_NOSE_GAIN

        normalized_y = (center_y / frame_h - 0.5) * 2.0
        nose_to_mouth = mouth[1] - nose[1]
        expected = box_h * EXPECTED_NOSE_MOUTH_RATIO
        pitch = normalized_y * PITCH_POSITION_GAIN + ((nose_to_mouth - expected) / expected) * PITCH_DIST_GAIN

        roll = math.degrees(math.atan2(left_eye[1] - right_eye[1], left_eye[0] - right_eye[0]))

        return float(roll), float(pitch), float(yaw)
