import os

import pytest

from posetrack.history.exporter import EmptyHistoryError, export_to_file, format_angle, to_csv
from posetrack.infrastructure.data.models import Pose


def test_full_schema_rows():
    history = [
        Pose(roll=1.005, pitch=-2.0, yaw=90.004, timestamp=1000),
        Pose(roll=-0.125, pitch=45.5, yaw=-90.0, timestamp=2500),
    ]
    assert to_csv(history).splitlines() == [
        "Timestamp,Date,Roll,Pitch,Yaw",
        "1000,1970-01-01T00:00:01.000Z,1.01,-2.00,90.00",
        "2500,1970-01-01T00:00:02.500Z,-0.13,45.50,-90.00",
    ]
    assert to_csv(history).endswith("\n")


def test_simple_schema_row():
    csv_text = to_csv([Pose(roll=0.0, pitch=12.345, yaw=-0.5, timestamp=1500)], schema="simple")
    assert csv_text.splitlines() == [
        "Timestamp,Roll,Pitch,Yaw",
        "1970-01-01T00:00:01.500Z,0.00,12.35,-0.50",
    ]


def test_rows_follow_insertion_order():
    history = [Pose(0.0, 0.0, float(i), timestamp=t) for i, t in enumerate([3000, 1000, 2000])]
    rows = to_csv(history).splitlines()[1:]
    assert [r.split(",")[0] for r in rows] == ["3000", "1000", "2000"]


def test_empty_history_raises():
    with pytest.raises(EmptyHistoryError):
        to_csv([])


def test_unknown_schema_raises():
    with pytest.raises(ValueError):
        to_csv([Pose(0.0, 0.0, 0.0, 0)], schema="wide")


@pytest.mark.parametrize("value, expected", [(1.005, "1.01"), (2.675, "2.68"), (-2.0, "-2.00"), (0.004, "0.00")])
def test_format_angle_rounds_half_up(value, expected):
    assert format_angle(value) == expected


def test_export_to_file(tmp_path):
    out_dir = tmp_path / "exports"
    history = [Pose(1.0, 2.0, 3.0, timestamp=1000)]

    path = export_to_file(history, directory=str(out_dir), now_ms=42)
    assert os.path.basename(path) == "head-pose-42.csv"
    with open(path, encoding="utf-8") as f:
        assert f.read() == to_csv(history)

    # same timestamp again gets a counter suffix
    second = export_to_file(history, directory=str(out_dir), now_ms=42)
    assert os.path.basename(second) == "head-pose-42-1.csv"


def test_export_to_file_empty_writes_nothing(tmp_path):
    with pytest.raises(EmptyHistoryError):
        export_to_file([], directory=str(tmp_path / "none"))
    assert not (tmp_path / "none").exists()
