"""
CSV export of the recorded pose history.

Two layouts are supported:
  full   -> Timestamp,Date,Roll,Pitch,Yaw   (epoch ms + ISO-8601 date)
  simple -> Timestamp,Roll,Pitch,Yaw        (ISO-8601 timestamp only)

Angles are written with 2 decimals, rounded half-up on the decimal value
(1.005 -> 1.01, -2.0 -> -2.00).
"""
from __future__ import annotations

import csv
import io
import logging
import os
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from posetrack.infrastructure.data.models import Pose

log = logging.getLogger(__name__)

SCHEMA_FULL = "full"
SCHEMA_SIMPLE = "simple"

HEADERS = {
    SCHEMA_FULL: ["Timestamp", "Date", "Roll", "Pitch", "Yaw"],
    SCHEMA_SIMPLE: ["Timestamp", "Roll", "Pitch", "Yaw"],
}

_TWO_PLACES = Decimal("0.01")


class EmptyHistoryError(ValueError):
    """Raised when there is nothing to export."""

    def __init__(self, message: str = "No orientation data to export"):
        super().__init__(message)


def format_angle(value: float) -> str:
    return str(Decimal(repr(float(value))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _row(pose: Pose, schema: str) -> List[str]:
    angles = [format_angle(pose.roll), format_angle(pose.pitch), format_angle(pose.yaw)]
    if schema == SCHEMA_FULL:
        return [str(int(pose.timestamp)), pose.iso_time(), *angles]
    return [pose.iso_time(), *angles]


def to_csv(history: Iterable[Pose], schema: str = SCHEMA_FULL) -> str:
    if schema not in HEADERS:
        raise ValueError(f"Unknown export schema '{schema}' (expected one of {sorted(HEADERS)})")

    samples = list(history)
    if not samples:
        raise EmptyHistoryError()

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADERS[schema])
    for pose in samples:
        writer.writerow(_row(pose, schema))
    return buf.getvalue()


def export_to_file(
    history: Iterable[Pose],
    directory: str = "exports",
    prefix: str = "head-pose",
    schema: str = SCHEMA_FULL,
    now_ms: Optional[int] = None,
) -> str:
    """Write the CSV to <directory>/<prefix>-<epoch_ms>.csv and return the path."""
    content = to_csv(history, schema)

    os.makedirs(directory or ".", exist_ok=True)
    stamp = int(now_ms) if now_ms is not None else int(time.time() * 1000)
    path = os.path.join(directory, f"{prefix}-{stamp}.csv")
    n = 1
    while os.path.exists(path):
        path = os.path.join(directory, f"{prefix}-{stamp}-{n}.csv")
        n += 1

    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    log.info("Exported %d pose sample(s) to %s", content.count("\n") - 1, path)
    return path
