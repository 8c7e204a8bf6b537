import os
import sys
import time
import logging
import argparse

# 1. CONFIGURATION (Before imports to ensure they take effect)
# -----------------------------------------------------------
os.environ.setdefault("GLOG_minloglevel", "2")        # Silence MediaPipe/glog
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")    # Silence TFLite delegates

# 2. GLOBAL LOGGING SETUP
# -----------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Silence specific noisy loggers
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("matplotlib").setLevel(logging.ERROR)

log = logging.getLogger("posetrack")

import cv2

from posetrack.core.config import DEFAULT_CONFIG_PATH, load_pipeline_config
from posetrack.core.pipeline import PosePipeline
from posetrack.history.exporter import EmptyHistoryError


def build_detector(cfg):
    if cfg["pipeline"]["estimator"] == "geometric":
        from posetrack.mediapipe.face_detection import FaceDetectionModel
        return FaceDetectionModel()

    from posetrack.detectors.landmarks68 import Landmark68Detector
    return Landmark68Detector(cfg["assets"]["landmark_predictor"])


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live head pose estimation and recording.")
    parser.add_argument("--config", help=f"Pipeline YAML config (default: $PT_CONFIG or {DEFAULT_CONFIG_PATH}).")
    parser.add_argument("--estimator", choices=("learned", "geometric"), help="Override pipeline.estimator.")
    parser.add_argument("--camera", type=int, default=0, help="OpenCV camera index.")
    parser.add_argument("--max-ticks", type=int, default=0, help="Stop after N ticks (0 = run until Ctrl+C).")
    parser.add_argument("--export-dir", help="Override export.directory.")
    parser.add_argument("--log-every", type=float, default=1.0, help="Seconds between pose log lines.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    cfg = load_pipeline_config(args.config)
    if args.estimator:
        cfg["pipeline"]["estimator"] = args.estimator
    if args.export_dir:
        cfg["export"]["directory"] = args.export_dir

    cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        log.error(f"Camera {args.camera} failed to open")
        return 1

    def read_frame():
        ok, frame = cap.read()
        return frame if ok else None

    pipeline = PosePipeline.from_config(cfg, detector=build_detector(cfg))
    if not pipeline.load_assets():
        log.error(f"Pipeline not ready: {pipeline.last_error}")

    scheduler = pipeline.make_scheduler(read_frame, target_fps=cfg["scheduler"]["target_fps"])
    scheduler.start()
    log.info("Running - press Ctrl+C to stop and export")

    try:
        last_log = 0.0
        while scheduler.is_running:
            if args.max_ticks and scheduler.ticks >= args.max_ticks:
                break
            now = time.monotonic()
            if now - last_log >= args.log_every:
                last_log = now
                pose = pipeline.latest_pose
                if pose is not None:
                    log.info(
                        f"{pose} | cheating={pipeline.cheating_score:.2f} | "
                        f"history={pipeline.history_length} | fps={pipeline.fps:.1f}"
                    )
            time.sleep(0.05)
    except KeyboardInterrupt:
        log.info("Interrupted")
    finally:
        pipeline.dispose()
        cap.release()

    try:
        path = pipeline.export_to_file()
        log.info(f"Exported {pipeline.history_length} samples to {path}")
    except EmptyHistoryError as e:
        log.warning(str(e))
    return 0


if __name__ == "__main__":
    sys.exit(main())
