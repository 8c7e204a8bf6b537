from __future__ import annotations

from typing import Any, Dict, Optional

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def as_float(x: Any, default: float) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float(default)


def as_int(x: Any, default: int) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return int(default)


def as_bool(x: Any, default: bool) -> bool:
    if isinstance(x, bool):
        return x
    s = str(x).strip().lower() if x is not None else ""
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return bool(default)


def as_str(x: Any, default: Optional[str]) -> Optional[str]:
    if x is None:
        return default
    s = str(x).strip()
    return s if s else default


def as_choice(x: Any, choices, default: str) -> str:
    s = (as_str(x, default) or default).lower()
    return s if s in choices else default


def fps_to_interval(fps: Any, default_fps: float) -> float:
    f = as_float(fps, default_fps)
    if f <= 0:
        f = float(default_fps)
    return 1.0 / f


def get_section(root: Dict[str, Any], key: str) -> Dict[str, Any]:
    v = root.get(key, {})
    return v if isinstance(v, dict) else {}
