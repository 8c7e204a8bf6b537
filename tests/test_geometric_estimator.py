import pytest

from posetrack.estimators.base import DEGENERATE_GEOMETRY, INVALID_INPUT
from posetrack.estimators.geometric import GeometricPoseEstimator, clamp_angle
from posetrack.infrastructure.data.models import BoundingBox, FaceKeypoints, FaceLandmarks

BOX = BoundingBox(top_left=(0.0, 0.0), bottom_right=(100.0, 100.0))


def _keypoints(nose_x=50.0, right_eye=(40.0, 40.0), left_eye=(60.0, 40.0), box=BOX):
    return FaceKeypoints.from_points(
        [right_eye, left_eye, (nose_x, 50.0), (50.0, 70.0), (20.0, 50.0), (80.0, 50.0)],
        box,
    )


def test_frontal_face_is_neutral():
    est = GeometricPoseEstimator().estimate(_keypoints(), 100, 100, 1000)
    assert est.ok
    assert est.pose.roll == pytest.approx(0.0)
    assert est.pose.pitch == pytest.approx(0.0)
    assert est.pose.yaw == pytest.approx(0.0)
    assert est.pose.timestamp == 1000


@pytest.mark.parametrize("nose_x, expected_yaw", [(550.0, 90.0), (-450.0, -90.0)])
def test_extreme_yaw_is_clamped(nose_x, expected_yaw):
    # raw yaw is +/-150 degrees
    est = GeometricPoseEstimator().estimate(_keypoints(nose_x=nose_x), 100, 100, 0)
    assert est.pose.yaw == expected_yaw


def test_roll_from_eye_line():
    est = GeometricPoseEstimator().estimate(_keypoints(left_eye=(60.0, 60.0)), 100, 100, 0)
    assert est.pose.roll == pytest.approx(45.0)


def test_degenerate_box():
    flat = BoundingBox(top_left=(10.0, 10.0), bottom_right=(10.0, 90.0))
    est = GeometricPoseEstimator().estimate(_keypoints(box=flat), 100, 100, 0)
    assert est.pose is None
    assert est.reason == DEGENERATE_GEOMETRY


def test_invalid_inputs():
    g = GeometricPoseEstimator()
    assert g.estimate(_keypoints(), 0, 100, 0).reason == INVALID_INPUT
    assert g.estimate(_keypoints(), 100, -1, 0).reason == INVALID_INPUT
    assert g.estimate(_keypoints(nose_x=float("nan")), 100, 100, 0).reason == INVALID_INPUT

    five = FaceKeypoints.from_points([(0.0, 0.0)] * 5, BOX)
    assert g.estimate(five, 100, 100, 0).reason == INVALID_INPUT

    landmarks = FaceLandmarks.from_points([(0.0, 0.0)] * 6, BOX)
    assert g.estimate(landmarks, 100, 100, 0).reason == INVALID_INPUT


def test_clamp_angle():
    assert clamp_angle(120.0) == 90.0
    assert clamp_angle(-91.0) == -90.0
    assert clamp_angle(12.5) == 12.5
