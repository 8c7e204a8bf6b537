"""
Cheating-probability classifiers.

Both variants take a pose's three angles (plus its capture time, which only
the remote service uses) and return a probability in [0, 1].
They raise on failure; the pipeline decides to keep the previous score.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Protocol

import torch

from posetrack.api_client.api_service import ApiService
from posetrack.api_client.score_request import ScoreRequest

log = logging.getLogger(__name__)


class CheatingClassifierError(RuntimeError):
    pass


class CheatingClassifier(Protocol):
    def predict(self, roll: float, pitch: float, yaw: float, timestamp: Optional[int] = None) -> float:
        ...


def _clip_probability(p: float) -> float:
    if not math.isfinite(p):
        raise CheatingClassifierError(f"classifier produced non-finite score {p}")
    return max(0.0, min(1.0, float(p)))


class TorchCheatingClassifier:
    """Local model: (1, 3) [roll, pitch, yaw] -> (1, 1) logit or probability."""

    def __init__(self, model: torch.nn.Module, apply_sigmoid: bool = True, device: str = "cpu"):
        self.device = torch.device(device)
        self.model = model.eval().to(self.device)
        self.apply_sigmoid = bool(apply_sigmoid)

    def predict(self, roll: float, pitch: float, yaw: float, timestamp: Optional[int] = None) -> float:
        with torch.inference_mode():
            x = torch.tensor([[float(roll), float(pitch), float(yaw)]], dtype=torch.float32, device=self.device)
            out = self.model(x).reshape(-1)
            if out.numel() != 1:
                raise CheatingClassifierError(f"classifier returned {out.numel()} values, expected 1")
            if self.apply_sigmoid:
                out = torch.sigmoid(out)
            p = float(out.item())
        return _clip_probability(p)


class RemoteCheatingClassifier:
    """Scores poses through the HTTP scoring service."""

    def __init__(self, api_service: Optional[ApiService] = None):
        self.api_service = api_service or ApiService()

    def predict(self, roll: float, pitch: float, yaw: float, timestamp: Optional[int] = None) -> float:
        res = self.api_service.request_score(ScoreRequest(roll=roll, pitch=pitch, yaw=yaw, timestamp=timestamp))
        if not res.success or res.probability is None:
            raise CheatingClassifierError(f"remote scoring failed: {res.error} (CID: {res.correlation_id})")
        return _clip_probability(res.probability)
