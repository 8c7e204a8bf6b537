from __future__ import annotations

from typing import Any, Dict, Optional

from posetrack.utils.config_utils import as_bool, as_choice, as_float, as_int, as_str, get_section
from posetrack.utils.load_config import load_yaml_section, resolve_config_path

DEFAULT_CONFIG_PATH = "config/pipeline_config.yaml"

ESTIMATORS = ("learned", "geometric")
CHEATING_BACKENDS = ("torch", "remote", "none")
EXPORT_SCHEMAS = ("full", "simple")


def load_pipeline_config(path: Optional[str] = None) -> Dict[str, Any]:
    root = load_yaml_section(resolve_config_path(path, DEFAULT_CONFIG_PATH))

    pipeline = get_section(root, "pipeline")
    features = get_section(root, "features")
    recorder = get_section(root, "recorder")
    scheduler = get_section(root, "scheduler")
    export = get_section(root, "export")
    assets = get_section(root, "assets")
    cheating = get_section(root, "cheating")

    return {
        "pipeline": {
            "estimator": as_choice(pipeline.get("estimator"), ESTIMATORS, "learned"),
        },
        "features": {
            "num_landmarks": max(2, as_int(features.get("num_landmarks"), 68)),
        },
        "recorder": {
            "threshold_deg": max(0.0, as_float(recorder.get("threshold_deg"), 2.0)),
            "start_recording": as_bool(recorder.get("start_recording"), True),
            "recent_count": max(1, as_int(recorder.get("recent_count"), 10)),
        },
        "scheduler": {
            "target_fps": as_float(scheduler.get("target_fps"), 30.0),
        },
        "export": {
            "directory": as_str(export.get("directory"), "exports"),
            "prefix": as_str(export.get("prefix"), "head-pose"),
            "schema": as_choice(export.get("schema"), EXPORT_SCHEMAS, "full"),
        },
        "assets": {
            "pose_model": as_str(assets.get("pose_model"), "models/headpose/model.pt"),
            "scaler": as_str(assets.get("scaler"), "models/headpose/scaler_params.json"),
            "cheating_model": as_str(assets.get("cheating_model"), None),
            "landmark_predictor": as_str(
                assets.get("landmark_predictor"), "models/dlib/shape_predictor_68_face_landmarks.dat"
            ),
            "device": as_str(assets.get("device"), "cpu"),
        },
        "cheating": {
            "backend": as_choice(cheating.get("backend"), CHEATING_BACKENDS, "none"),
            "apply_sigmoid": as_bool(cheating.get("apply_sigmoid"), True),
        },
    }
