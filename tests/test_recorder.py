from posetrack.history.recorder import PoseHistoryRecorder
from posetrack.infrastructure.data.models import Pose


def _pose(roll=0.0, pitch=0.0, yaw=0.0, t=0):
    return Pose(roll=roll, pitch=pitch, yaw=yaw, timestamp=t)


def test_first_sample_always_recorded():
    rec = PoseHistoryRecorder()
    assert rec.consider_sample(_pose(yaw=0.5))
    assert len(rec) == 1


def test_small_jitter_is_never_recorded():
    rec = PoseHistoryRecorder(threshold_deg=2.0)
    for i in range(20):
        rec.consider_sample(_pose(pitch=1.0 if i % 2 else -1.0, t=i))
    assert len(rec) == 1


def test_drift_compares_against_last_recorded_sample():
    rec = PoseHistoryRecorder(threshold_deg=2.0)
    for i in range(7):
        rec.consider_sample(_pose(pitch=float(i), t=i))
    # 1 degree per step: kept at 0, 3 and 6
    assert [p.pitch for p in rec.snapshot()] == [0.0, 3.0, 6.0]


def test_single_jump_recorded_once():
    rec = PoseHistoryRecorder(threshold_deg=2.0)
    rec.consider_sample(_pose(t=0))
    assert rec.consider_sample(_pose(pitch=3.0, t=1))
    assert not rec.consider_sample(_pose(pitch=3.0, t=2))
    assert not rec.consider_sample(_pose(pitch=4.5, t=3))
    assert len(rec) == 2
    assert rec.last_recorded.timestamp == 1


def test_threshold_is_exclusive():
    rec = PoseHistoryRecorder(threshold_deg=2.0)
    rec.consider_sample(_pose())
    assert not rec.consider_sample(_pose(roll=2.0))
    assert rec.consider_sample(_pose(roll=2.01))


def test_any_axis_triggers():
    rec = PoseHistoryRecorder(threshold_deg=2.0)
    rec.consider_sample(_pose())
    assert rec.consider_sample(_pose(roll=1.0, pitch=1.0, yaw=-2.5))


def test_clear_reaccepts_next_sample():
    rec = PoseHistoryRecorder()
    rec.consider_sample(_pose(yaw=10.0))
    rec.clear()
    assert len(rec) == 0
    assert rec.last_recorded is None
    assert rec.consider_sample(_pose(yaw=10.0))


def test_non_finite_pose_rejected():
    rec = PoseHistoryRecorder()
    assert not rec.consider_sample(_pose(yaw=float("nan")))
    assert len(rec) == 0


def test_stop_recording_leaves_state_untouched():
    rec = PoseHistoryRecorder()
    rec.consider_sample(_pose(t=1))
    rec.stop_recording()
    assert not rec.is_recording
    assert not rec.consider_sample(_pose(yaw=30.0, t=2))
    assert len(rec) == 1
    assert rec.last_recorded.timestamp == 1

    rec.start_recording()
    assert rec.consider_sample(_pose(yaw=30.0, t=3))


def test_snapshot_and_latest():
    rec = PoseHistoryRecorder(start_recording=True)
    for i in range(5):
        rec.consider_sample(_pose(yaw=10.0 * i, t=i))

    snap = rec.snapshot()
    assert isinstance(snap, tuple)
    assert [p.timestamp for p in snap] == [0, 1, 2, 3, 4]
    assert [p.timestamp for p in rec.latest(3)] == [4, 3, 2]

    rec.consider_sample(_pose(yaw=100.0, t=5))
    assert len(snap) == 5
