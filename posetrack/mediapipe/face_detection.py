import logging
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from posetrack.infrastructure.data.models import BoundingBox, FaceKeypoints

log = logging.getLogger(__name__)

NUM_KEYPOINTS = 6


def keypoints_from_detection(detection, frame_w: int, frame_h: int) -> Optional[FaceKeypoints]:
    """
    Convert one MediaPipe detection (relative coordinates) to pixel-space FaceKeypoints.
    MediaPipe reports: right eye, left eye, nose tip, mouth center, right ear, left ear.
    """
    location = getattr(detection, "location_data", None)
    if location is None:
        return None

    kps = list(location.relative_keypoints)
    if len(kps) != NUM_KEYPOINTS:
        log.debug(f"Unexpected keypoint count: {len(kps)}")
        return None
    points = [(kp.x * frame_w, kp.y * frame_h) for kp in kps]

    rb = location.relative_bounding_box
    x0 = rb.xmin * frame_w
    y0 = rb.ymin * frame_h
    box = BoundingBox(
        top_left=(x0, y0),
        bottom_right=(x0 + rb.width * frame_w, y0 + rb.height * frame_h),
    )

    score = detection.score[0] if len(detection.score) else 0.0
    return FaceKeypoints.from_points(points, box, score=score)


class FaceDetectionModel:
    """
    Wrapper for the MediaPipe Face Detection solution (BlazeFace short-range).
    detect() takes a BGR frame and returns the top face or None.
    """

    def __init__(self, model_selection: int = 0, min_detection_confidence: float = 0.5):
        self._mp_face_detection = mp.solutions.face_detection
        self._model = self._mp_face_detection.FaceDetection(
            model_selection=model_selection,
            min_detection_confidence=min_detection_confidence,
        )

    def preprocess(self, image_bgr: np.ndarray) -> np.ndarray:
        # MediaPipe expects RGB input
        return cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)

    def detect(self, image_bgr: np.ndarray) -> Optional[FaceKeypoints]:
        h, w = image_bgr.shape[:2]
        results = self._model.process(self.preprocess(image_bgr))
        detections = getattr(results, "detections", None) or []
        if not detections:
            return None
        best = max(detections, key=lambda d: d.score[0] if len(d.score) else 0.0)
        return keypoints_from_detection(best, w, h)

    def close(self) -> None:
        self._model.close()
