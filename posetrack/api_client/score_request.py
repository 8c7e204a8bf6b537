"""
Wire format for the remote cheating-score endpoint.

Request : {"roll": 1.23, "pitch": -4.5, "yaw": 10.0, "timestamp": 1700000000000}
Response: {"probability": 0.42}
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ScoreRequest:
    roll: float
    pitch: float
    yaw: float
    timestamp: Optional[int] = None

    def to_transport_payload(self) -> Dict[str, Any]:
        for name in ("roll", "pitch", "yaw"):
            if not math.isfinite(float(getattr(self, name))):
                raise ValueError(f"{name} must be finite")
        payload = {
            "roll": float(self.roll),
            "pitch": float(self.pitch),
            "yaw": float(self.yaw),
        }
        if self.timestamp is not None:
            payload["timestamp"] = int(self.timestamp)
        return payload


def parse_probability(body: Any) -> float:
    """Pull the probability out of a response body; raises ValueError if missing or out of range."""
    if not isinstance(body, dict) or "probability" not in body:
        raise ValueError("response has no 'probability' field")
    try:
        p = float(body["probability"])
    except (TypeError, ValueError):
        raise ValueError(f"probability is not a number: {body['probability']!r}")
    if not (0.0 <= p <= 1.0):
        raise ValueError(f"probability {p} outside [0, 1]")
    return p
