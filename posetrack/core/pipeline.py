from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from posetrack.estimators.base import PoseEstimator
from posetrack.estimators.geometric import GeometricPoseEstimator
from posetrack.estimators.learned import LearnedPoseEstimator
from posetrack.features.extraction import FeatureExtractor
from posetrack.features.standardizer import FeatureStandardizer
from posetrack.history import exporter
from posetrack.history.recorder import PoseHistoryRecorder
from posetrack.infrastructure.assets.model_loader import AssetLoadError, AssetLoader
from posetrack.infrastructure.data.models import Pose, TickResult
from posetrack.core.scheduler import TickScheduler
from posetrack.status.cheating.classifier import CheatingClassifier, RemoteCheatingClassifier, TorchCheatingClassifier
from posetrack.utils.config_utils import fps_to_interval
from posetrack.utils.metrics_tracker import FpsTracker

log = logging.getLogger(__name__)

NO_FACE = "no_face"
DISPOSED = "disposed"
DETECTOR_ERROR = "detector_error"


def now_ms() -> int:
    return int(time.time() * 1000)


class PosePipeline:
    """
    Per-session pipeline context.

    Lifecycle: create -> load_assets() -> tick()* -> dispose()

    Owns the estimator (and through it the model/scaler), the history
    recorder and the latest cheating score. All writes happen from the tick
    loop; readers use the snapshot-based accessors.
    """

    def __init__(
        self,
        estimator: PoseEstimator,
        detector=None,
        recorder: Optional[PoseHistoryRecorder] = None,
        classifier: Optional[CheatingClassifier] = None,
        asset_loader: Optional[AssetLoader] = None,
        asset_paths: Optional[Dict[str, Optional[str]]] = None,
        export_cfg: Optional[Dict[str, Any]] = None,
        clock_ms: Callable[[], int] = now_ms,
        fps_tracker: Optional[FpsTracker] = None,
        apply_sigmoid: bool = True,
        recent_count: int = 10,
    ):
        self.estimator = estimator
        self.detector = detector
        self.recorder = recorder or PoseHistoryRecorder()
        self.classifier = classifier
        self.asset_loader = asset_loader
        self.asset_paths = dict(asset_paths or {})
        self.export_cfg = {"directory": "exports", "prefix": "head-pose", "schema": exporter.SCHEMA_FULL}
        self.export_cfg.update(export_cfg or {})
        self._clock_ms = clock_ms
        self.fps_tracker = fps_tracker or FpsTracker()
        self._apply_sigmoid = apply_sigmoid
        self.recent_count = int(recent_count)

        self.model_ready = False
        self.scaler_ready = False
        self.last_error: Optional[str] = None

        self.latest_pose: Optional[Pose] = None
        self.cheating_score = 0.0

        self._disposed = False
        self._load_thread: Optional[threading.Thread] = None
        self.scheduler: Optional[TickScheduler] = None

        log.info("PosePipeline created (estimator=%s)", getattr(estimator, "name", type(estimator).__name__))

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], detector=None, **kwargs) -> "PosePipeline":
        assets = cfg["assets"]
        if cfg["pipeline"]["estimator"] == "geometric":
            estimator = GeometricPoseEstimator()
        else:
            estimator = LearnedPoseEstimator(
                extractor=FeatureExtractor(cfg["features"]["num_landmarks"]),
                standardizer=FeatureStandardizer(),
                device=assets["device"],
            )

        classifier = None
        if cfg["cheating"]["backend"] == "remote":
            classifier = RemoteCheatingClassifier()

        recorder = PoseHistoryRecorder(
            threshold_deg=cfg["recorder"]["threshold_deg"],
            start_recording=cfg["recorder"]["start_recording"],
        )

        asset_paths = {
            "pose_model": assets["pose_model"],
            "scaler": assets["scaler"],
            "cheating_model": assets["cheating_model"] if cfg["cheating"]["backend"] == "torch" else None,
        }

        return cls(
            estimator=estimator,
            detector=detector,
            recorder=recorder,
            classifier=classifier,
            asset_loader=AssetLoader(device=assets["device"]),
            asset_paths=asset_paths,
            export_cfg=cfg["export"],
            apply_sigmoid=cfg["cheating"]["apply_sigmoid"],
            recent_count=cfg["recorder"]["recent_count"],
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------
    @property
    def is_ready(self) -> bool:
        return not self._disposed and self.estimator.is_ready

    def load_assets(self) -> bool:
        """
        Load the model and scaler (learned estimator) and the optional local
        cheating model. Each asset sets its own readiness flag; a failure on
        either pose asset leaves the pipeline not ready.
        """
        if self._disposed:
            return False

        if isinstance(self.estimator, LearnedPoseEstimator):
            if self.asset_loader is None:
                self.last_error = "no asset loader configured"
                log.error("Pipeline not ready: %s", self.last_error)
                return False

            try:
                params = self.asset_loader.load_scaler(self.asset_paths.get("scaler"))
                self.estimator.standardizer.set_params(params)
                self.scaler_ready = True
            except AssetLoadError as e:
                self.last_error = str(e)
                log.error("Scaler unavailable: %s", e)

            try:
                model = self.asset_loader.load_pose_model(self.asset_paths.get("pose_model"))
                self.estimator.set_model(model)
                self.model_ready = True
            except AssetLoadError as e:
                self.last_error = str(e)
                log.error("Pose model unavailable: %s", e)

            if self.scaler_ready and self.model_ready:
                n_features = self.estimator.extractor.feature_length
                scaler_len = len(self.estimator.standardizer.params)
                if scaler_len != n_features:
                    self.last_error = f"scaler has {scaler_len} features, extractor produces {n_features}"
                    log.error("Pipeline not ready: %s", self.last_error)
                    self.estimator.standardizer.set_params(None)
                    self.scaler_ready = False

            if self.scaler_ready and self.model_ready:
                problem = self.estimator.check_model()
                if problem:
                    self.last_error = problem
                    log.error("Pipeline not ready: %s", self.last_error)
                    self.estimator.set_model(None)
                    self.model_ready = False

        cheating_path = self.asset_paths.get("cheating_model")
        if cheating_path and self.classifier is None and self.asset_loader is not None:
            try:
                model = self.asset_loader.load_cheating_model(cheating_path)
                self.classifier = TorchCheatingClassifier(
                    model, apply_sigmoid=self._apply_sigmoid, device=str(self.asset_loader.device)
                )
            except AssetLoadError as e:
                log.warning("Cheating classifier disabled: %s", e)

        if self.is_ready:
            log.info("Pipeline ready")
        return self.is_ready

    def load_assets_async(self) -> threading.Thread:
        self._load_thread = threading.Thread(target=self.load_assets, name="pose-assets", daemon=True)
        self._load_thread.start()
        return self._load_thread

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self, frame: Optional[np.ndarray]) -> TickResult:
        """Run one processing cycle on a video frame."""
        fps = self.fps_tracker.update()
        if self._disposed:
            return self._result(None, DISPOSED, fps=fps)
        if frame is None or self.detector is None:
            return self._no_pose(NO_FACE, fps)

        h, w = frame.shape[:2]
        try:
            detection = self.detector.detect(frame)
        except Exception as e:
            log.warning("Detector error: %s", e)
            return self._no_pose(DETECTOR_ERROR, fps)

        return self.process_detection(detection, w, h, fps=fps)

    def process_detection(self, detection, frame_w: int, frame_h: int, fps: Optional[float] = None) -> TickResult:
        """Estimate, score and record the pose for an already-detected face."""
        fps = self.fps_tracker.fps if fps is None else fps
        if self._disposed:
            return self._result(None, DISPOSED, fps=fps)
        if detection is None:
            return self._no_pose(NO_FACE, fps)

        estimate = self.estimator.estimate(detection, frame_w, frame_h, self._clock_ms())
        if not estimate.ok:
            return self._no_pose(estimate.reason, fps)

        pose = estimate.pose
        score = self._score(pose)

        # torn down while this tick was in flight: drop the result
        if self._disposed:
            return self._result(None, DISPOSED, fps=fps)

        if score is not None:
            self.cheating_score = score
        self.latest_pose = pose
        recorded = self.recorder.consider_sample(pose)
        return self._result(pose, None, recorded=recorded, fps=fps)

    def _score(self, pose: Pose) -> Optional[float]:
        """New cheating probability, or None to keep the previous one."""
        if self.classifier is None:
            return None
        try:
            return float(self.classifier.predict(pose.roll, pose.pitch, pose.yaw, timestamp=pose.timestamp))
        except Exception as e:
            log.warning("Cheating classifier failed, keeping previous score %.3f: %s", self.cheating_score, e)
            return None

    def _no_pose(self, reason: Optional[str], fps: float) -> TickResult:
        self.latest_pose = None
        return self._result(None, reason, fps=fps)

    def _result(self, pose: Optional[Pose], reason: Optional[str], recorded: bool = False, fps: float = 0.0) -> TickResult:
        return TickResult(
            pose=pose,
            reason=reason,
            recorded=recorded,
            cheating_score=self.cheating_score,
            history_length=len(self.recorder),
            fps=fps,
        )

    # ------------------------------------------------------------------
    # Presentation-facing helpers
    # ------------------------------------------------------------------
    @property
    def history_length(self) -> int:
        return len(self.recorder)

    @property
    def fps(self) -> float:
        return self.fps_tracker.fps

    def recent_poses(self, n: Optional[int] = None) -> List[Pose]:
        return self.recorder.latest(self.recent_count if n is None else n)

    def clear_history(self) -> None:
        self.recorder.clear()

    def start_recording(self) -> None:
        self.recorder.start_recording()

    def stop_recording(self) -> None:
        self.recorder.stop_recording()

    def export_csv(self, schema: Optional[str] = None) -> str:
        return exporter.to_csv(self.recorder.snapshot(), schema or self.export_cfg["schema"])

    def export_to_file(self, directory: Optional[str] = None, schema: Optional[str] = None) -> str:
        return exporter.export_to_file(
            self.recorder.snapshot(),
            directory=directory or self.export_cfg["directory"],
            prefix=self.export_cfg["prefix"],
            schema=schema or self.export_cfg["schema"],
            now_ms=self._clock_ms(),
        )

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self.scheduler is not None:
            self.scheduler.stop()
        close = getattr(self.detector, "close", None)
        if callable(close):
            try:
                close()
            except Exception as e:
                log.debug("Detector close failed: %s", e)
        log.info("Pipeline disposed (%d samples in history)", len(self.recorder))

    def make_scheduler(self, frame_source: Callable[[], Optional[np.ndarray]], target_fps: float = 30.0) -> TickScheduler:
        """
        Build the tick loop: each tick pulls one frame from `frame_source` and
        runs it through tick(). dispose() stops the returned scheduler.
        """
        self.scheduler = TickScheduler(lambda: self.tick(frame_source()), interval_sec=fps_to_interval(target_fps, 30.0))
        return self.scheduler
