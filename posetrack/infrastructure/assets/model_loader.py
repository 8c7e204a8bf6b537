"""
Model Loader - loads the pretrained assets the pose pipeline depends on.

Assets:
  - pose regression model (TorchScript, 2278 -> 3)
  - scaler parameters     (JSON {"mean": [...], "scale": [...]})
  - cheating classifier   (TorchScript, 3 -> 1), optional

Every loader raises AssetLoadError with the path and cause; callers decide
whether the failure is fatal.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Optional

import torch

from posetrack.features.standardizer import ScalerParameters

logger = logging.getLogger(__name__)


class AssetLoadError(RuntimeError):
    def __init__(self, asset: str, path: Optional[str], cause: str):
        self.asset = asset
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to load {asset} from '{path}': {cause}")


class AssetLoader:
    def __init__(self, device: str = "cpu"):
        self.device = torch.device(device)

    def _require_file(self, asset: str, path: Optional[str]) -> str:
        if not path:
            raise AssetLoadError(asset, path, "no path configured")
        if not os.path.isfile(path):
            raise AssetLoadError(asset, path, "file not found")
        return path

    def load_torchscript(self, asset: str, path: Optional[str]) -> torch.nn.Module:
        path = self._require_file(asset, path)
        try:
            model = torch.jit.load(path, map_location=self.device)
        except (RuntimeError, ValueError) as e:
            raise AssetLoadError(asset, path, str(e)) from e
        model.eval()
        logger.info(f"Loaded {asset} from: {path}")
        return model

    def load_pose_model(self, path: Optional[str]) -> torch.nn.Module:
        return self.load_torchscript("pose model", path)

    def load_cheating_model(self, path: Optional[str]) -> torch.nn.Module:
        return self.load_torchscript("cheating model", path)

    def load_scaler(self, path: Optional[str]) -> ScalerParameters:
        path = self._require_file("scaler", path)
        try:
            params = ScalerParameters.from_json_file(path)
        except (OSError, json.JSONDecodeError, ValueError, TypeError) as e:
            raise AssetLoadError("scaler", path, str(e)) from e
        logger.info(f"Loaded scaler from: {path} ({len(params)} features)")
        return params
