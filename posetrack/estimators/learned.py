from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import torch

from posetrack.estimators.base import INVALID_INPUT, NOT_READY
from posetrack.features.extraction import FeatureExtractor
from posetrack.features.standardizer import FeatureStandardizer
from posetrack.infrastructure.data.models import FaceLandmarks, Pose, PoseEstimate

log = logging.getLogger(__name__)


class LearnedPoseEstimator:
    """
    Regression-model pose estimator:
      68 landmarks -> pairwise distances -> standardized -> model -> (roll, pitch, yaw)

    The model is any torch module mapping (1, L) float32 to 3 values, normally
    a TorchScript export. Outputs are degrees and are not clamped.
    """

    name = "learned"

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        standardizer: Optional[FeatureStandardizer] = None,
        model: Optional[torch.nn.Module] = None,
        device: str = "cpu",
    ):
        self.extractor = extractor or FeatureExtractor(68)
        self.standardizer = standardizer or FeatureStandardizer()
        self.device = torch.device(device)
        self._model: Optional[torch.nn.Module] = None
        if model is not None:
            self.set_model(model)

    def set_model(self, model: Optional[torch.nn.Module]) -> None:
        if model is None:
            self._model = None
            return
        self._model = model.eval().to(self.device)
        log.info("Pose regression model attached (device=%s)", self.device)

    @property
    def model_ready(self) -> bool:
        return self._model is not None

    @property
    def is_ready(self) -> bool:
        return self._model is not None and self.standardizer.is_ready

    def estimate(self, detection, frame_w: int, frame_h: int, timestamp_ms: int) -> PoseEstimate:
        if not self.is_ready:
            return PoseEstimate(None, NOT_READY)
        if not isinstance(detection, FaceLandmarks):
            return PoseEstimate(None, INVALID_INPUT)

        try:
            features = self.extractor.extract(detection.points)
            standardized = self.standardizer.transform(features)
        except ValueError as e:
            log.debug("Invalid landmark input: %s", e)
            return PoseEstimate(None, INVALID_INPUT)

        output = self.predict(standardized)
        if output is None:
            return PoseEstimate(None, INVALID_INPUT)

        roll, pitch, yaw = output
        return PoseEstimate(Pose(roll=roll, pitch=pitch, yaw=yaw, timestamp=int(timestamp_ms)))

    def _forward(self, standardized: np.ndarray) -> np.ndarray:
        with torch.inference_mode():
            input_tensor = torch.from_numpy(np.ascontiguousarray(standardized, dtype=np.float32)).unsqueeze(0).to(self.device)
            prediction = self._model(input_tensor)
            values = prediction.detach().reshape(-1).cpu().numpy().astype(np.float64)
        # release per-frame tensors
        del input_tensor, prediction
        return values

    def predict(self, standardized: np.ndarray):
        """Run the model once. Returns (roll, pitch, yaw) or None on a failed call or malformed output."""
        if self._model is None:
            return None

        try:
            values = self._forward(standardized)
        except (RuntimeError, ValueError, TypeError) as e:
            log.warning("Pose model call failed: %s", e)
            return None

        if values.size != 3:
            log.warning("Pose model returned %d values, expected 3", values.size)
            return None
        if not np.all(np.isfinite(values)):
            log.warning("Pose model returned non-finite values: %s", values)
            return None
        return float(values[0]), float(values[1]), float(values[2])

    def check_model(self) -> Optional[str]:
        """
        Push one zero feature vector through the model.
        Returns None when it accepts the configured feature width and yields 3 values,
        otherwise a description of the problem.
        """
        if self._model is None:
            return "no model attached"
        try:
            values = self._forward(np.zeros(self.extractor.feature_length))
        except (RuntimeError, ValueError, TypeError) as e:
            return f"pose model rejects {self.extractor.feature_length} features: {e}"
        if values.size != 3:
            return f"pose model returned {values.size} values, expected 3"
        return None
