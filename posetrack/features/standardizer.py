from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np

log = logging.getLogger(__name__)


def _readonly(values: Sequence[float], name: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if arr.size == 0:
        raise ValueError(f"Scaler '{name}' is empty")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Scaler '{name}' contains non-finite values")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class ScalerParameters:
    """
    Per-feature affine parameters (sklearn StandardScaler layout).
    Arrays are read-only; one instance is shared by every tick.
    """
    mean: np.ndarray
    scale: np.ndarray

    def __post_init__(self):
        mean = _readonly(self.mean, "mean")
        scale = _readonly(self.scale, "scale")
        if mean.shape != scale.shape:
            raise ValueError(f"Scaler length mismatch: mean={mean.size} scale={scale.size}")
        zeros = np.flatnonzero(scale == 0.0)
        if zeros.size:
            raise ValueError(f"Scaler has zero scale at {zeros.size} feature(s), first index {int(zeros[0])}")
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "scale", scale)

    def __len__(self) -> int:
        return int(self.mean.size)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ScalerParameters":
        if not isinstance(raw, dict) or "mean" not in raw or "scale" not in raw:
            raise ValueError("Scaler params must be a mapping with 'mean' and 'scale'")
        return cls(mean=raw["mean"], scale=raw["scale"])

    @classmethod
    def from_json_file(cls, path: str) -> "ScalerParameters":
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        return cls.from_dict(raw)


class FeatureStandardizer:
    """
    (x - mean) / scale per feature.

    Without parameters transform() passes features through untouched; use
    is_ready to tell the two cases apart.
    """

    def __init__(self, params: Optional[ScalerParameters] = None):
        self._params = params

    @property
    def is_ready(self) -> bool:
        return self._params is not None

    @property
    def params(self) -> Optional[ScalerParameters]:
        return self._params

    def set_params(self, params: Optional[ScalerParameters]) -> None:
        self._params = params
        if params is not None:
            log.info("Scaler parameters set (%d features)", len(params))

    def _check(self, features: np.ndarray) -> np.ndarray:
        arr = np.asarray(features, dtype=np.float64).reshape(-1)
        if arr.size != len(self._params):
            raise ValueError(f"Feature length {arr.size} does not match scaler length {len(self._params)}")
        return arr

    def transform(self, features: Sequence[float]) -> np.ndarray:
        if self._params is None:
            return np.array(features, dtype=np.float64).reshape(-1)
        arr = self._check(features)
        return (arr - self._params.mean) / self._params.scale

    def inverse_transform(self, standardized: Sequence[float]) -> np.ndarray:
        if self._params is None:
            return np.array(standardized, dtype=np.float64).reshape(-1)
        arr = self._check(standardized)
        return arr * self._params.scale + self._params.mean
