"""
68-point landmark detector backed by dlib.

Uses the frontal face detector plus the iBUG 68-point shape predictor
(shape_predictor_68_face_landmarks.dat). dlib is an optional dependency
(`pip install posetrack[landmarks68]`) and is only imported when the
detector is constructed.
"""
import logging
import os
from typing import Optional

import cv2
import numpy as np

from posetrack.infrastructure.data.models import BoundingBox, FaceLandmarks

log = logging.getLogger(__name__)

NUM_LANDMARKS = 68
DEFAULT_PREDICTOR_PATH = "models/dlib/shape_predictor_68_face_landmarks.dat"


def landmarks_from_shape(shape, rect=None) -> FaceLandmarks:
    """Convert a dlib full_object_detection (and optional rectangle) to FaceLandmarks."""
    points = [(shape.part(i).x, shape.part(i).y) for i in range(shape.num_parts)]
    box = None
    if rect is not None:
        box = BoundingBox(top_left=(rect.left(), rect.top()), bottom_right=(rect.right(), rect.bottom()))
    return FaceLandmarks.from_points(points, box)


class Landmark68Detector:
    def __init__(self, predictor_path: str = DEFAULT_PREDICTOR_PATH, upsample: int = 0):
        import dlib

        if not os.path.isfile(predictor_path):
            raise FileNotFoundError(
                f"shape predictor not found at {predictor_path}. "
                f"Download from http://dlib.net/files/shape_predictor_68_face_landmarks.dat.bz2"
            )

        log.info(f"Loading dlib predictor from: {predictor_path}")
        self._detector = dlib.get_frontal_face_detector()
        self._predictor = dlib.shape_predictor(predictor_path)
        self.upsample = int(upsample)

    def detect(self, image_bgr: np.ndarray) -> Optional[FaceLandmarks]:
        gray = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2GRAY)
        rects = self._detector(gray, self.upsample)
        if len(rects) == 0:
            return None

        # largest face wins
        rect = max(rects, key=lambda r: r.width() * r.height())
        shape = self._predictor(gray, rect)
        if shape.num_parts != NUM_LANDMARKS:
            log.warning("Predictor returned %d landmarks, expected %d", shape.num_parts, NUM_LANDMARKS)
            return None
        return landmarks_from_shape(shape, rect)

    def close(self) -> None:
        pass
