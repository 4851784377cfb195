# gplanner/config.py
from __future__ import annotations

import json
import os
from typing import Any, Dict, Mapping, Optional

from .model import DEFAULT_MAX_PER_REGION

DEFAULT_CSV_NAME = "planner_tasks"
DEFAULT_FETCH_TIMEOUT_S = 30.0


def gplanner_home() -> str:
    env = (os.getenv("GPLANNER_HOME") or "").strip()
    if env:
        return os.path.expanduser(env)
    return os.path.join(os.path.expanduser("~"), ".gplanner")


def default_state_path() -> str:
    return os.path.join(gplanner_home(), "state.json")


def fetch_timeout_s() -> float:
    raw = (os.getenv("GPLANNER_FETCH_TIMEOUT_S") or "").strip()
    try:
        v = float(raw) if raw else DEFAULT_FETCH_TIMEOUT_S
    except ValueError:
        return DEFAULT_FETCH_TIMEOUT_S
    return v if v > 0 else DEFAULT_FETCH_TIMEOUT_S


def normalize_max_per_region(raw: Any, base: Optional[Mapping[int, int]] = None) -> Dict[int, int]:
    """Merge a stored capacity map over `base` (defaults).

    Keys may be ints or numeric strings (JSON objects only have string keys).
    Unknown regions, non-integers and values < 1 are ignored.
    """
    out = dict(base or DEFAULT_MAX_PER_REGION)
    if not isinstance(raw, dict):
        return out
    for k, v in raw.items():
        try:
            region = int(k)
        except (TypeError, ValueError):
            continue
        if region not in DEFAULT_MAX_PER_REGION:
            continue
        if isinstance(v, bool):
            continue
        if isinstance(v, float) and not v.is_integer():
            continue
        try:
            n = int(v)
        except (TypeError, ValueError):
            continue
        if n >= 1:
            out[region] = n
    return out


def parse_max_assignment(s: str) -> tuple[int, int]:
    """'4=3' -> (4, 3). Raises ValueError on anything else."""
    left, sep, right = (s or "").partition("=")
    if not sep:
        raise ValueError(f"Expected REGION=N, got {s!r}")
    region, n = int(left.strip()), int(right.strip())
    if region not in DEFAULT_MAX_PER_REGION:
        raise ValueError(f"Region must be 1-4, got {region}")
    if n < 1:
        raise ValueError(f"Capacity must be >= 1, got {n}")
    return region, n


def load_capacity_config(path: str) -> Optional[Dict[int, int]]:
    """Load a capacity config JSON file.

    Accepted formats:
      - { "max_per_region": { "4": 5, "3": 8 } }   (also "maxPerRegion")
      - { "4": 5, "3": 8 }

    Missing or unreadable files give None; values are merged over the
    defaults with normalize_max_per_region.
    """
    if not path:
        return None
    try:
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError):
        return None

    if not isinstance(raw, dict):
        return None
    for key in ("max_per_region", "maxPerRegion"):
        if isinstance(raw.get(key), dict):
            raw = raw[key]
            break
    return normalize_max_per_region(raw)


__all__ = [
    "DEFAULT_CSV_NAME",
    "DEFAULT_FETCH_TIMEOUT_S",
    "gplanner_home",
    "default_state_path",
    "fetch_timeout_s",
    "normalize_max_per_region",
    "parse_max_assignment",
    "load_capacity_config",
]
