# gplanner/bucketing.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from .model import Placement

MIN_DAYS = 1
MAX_DAYS = 3650


@dataclass(frozen=True)
class RegionSpec:
    region: int
    lo_days: int       # inclusive
    hi_days: int       # inclusive
    bucket: str
    steps: int
    unit_days: int     # natural unit for the compact label
    suffix: str
    label: str
    range_label: str


REGION_SPECS: Dict[int, RegionSpec] = {
    4: RegionSpec(4, 1, 7, "days", 7, 1, "d", "Important – Urgent", "(1–7 days)"),
    3: RegionSpec(3, 8, 28, "weeks", 4, 7, "w", "Important – Not urgent", "(1–4 weeks)"),
    2: RegionSpec(2, 29, 365, "months", 12, 30, "m", "Not important – Urgent", "(1–12 months)"),
    1: RegionSpec(1, 366, 3650, "years", 10, 365, "y", "Not important – Not urgent", "(1–10 years)"),
}

BUCKET_REGION: Dict[str, int] = {s.bucket: r for r, s in REGION_SPECS.items()}


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def region_spec(region: int) -> RegionSpec:
    try:
        return REGION_SPECS[int(region)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Unknown region: {region!r} (expected 1-4)") from None


def region_for_days(days: int) -> Optional[int]:
    """Strict classification: None outside 1..3650."""
    for spec in REGION_SPECS.values():
        if spec.lo_days <= days <= spec.hi_days:
            return spec.region
    return None


def step_for_days(region: int, days: int) -> int:
    """Step 1..N of `days` within the region (1 = fewest days left).

    Linear interpolation of the day value across the region's day range,
    rounded half-up and clamped.
    """
    spec = region_spec(region)
    if spec.steps <= 1:
        return 1
    d = min(max(int(days), spec.lo_days), spec.hi_days)
    raw = 1 + (d - spec.lo_days) * (spec.steps - 1) / (spec.hi_days - spec.lo_days)
    return min(max(round_half_up(raw), 1), spec.steps)


def days_for_step(region: int, step: int) -> int:
    """Representative day count for a step (centre of its day interval).

    Lossy inverse of step_for_days: step_for_days(region, days_for_step(region, s)) == s.
    """
    spec = region_spec(region)
    s = min(max(int(step), 1), spec.steps)
    if spec.steps <= 1:
        return spec.lo_days
    width = (spec.hi_days - spec.lo_days) / (spec.steps - 1)
    return min(max(round_half_up(spec.lo_days + (s - 1) * width), spec.lo_days), spec.hi_days)


def progress_for_step(region: int, step: int) -> float:
    """0 = calmest edge of the region, 1 = most urgent edge."""
    n = region_spec(region).steps
    if n <= 1:
        return 1.0
    raw = 1 - (int(step) - 1) / (n - 1)
    return min(1.0, max(0.0, raw))


def step_for_progress(region: int, progress: float) -> int:
    n = region_spec(region).steps
    if n <= 1:
        return 1
    p = min(1.0, max(0.0, float(progress)))
    return min(max(round_half_up((1 - p) * (n - 1) + 1), 1), n)


def bucket_from_days(days: int) -> Optional[Placement]:
    """Classify a signed day count into (region, bucket, remaining, step).

    - days <= 0 (today / overdue) pins to 1 day, the most urgent edge of region 4.
    - days > MAX_DAYS -> None (no placement). Callers choose to reject
      (manual add/edit) or clamp first (CSV import, see clamp_days).
    """
    d = max(MIN_DAYS, int(days))
    region = region_for_days(d)
    if region is None:
        return None
    spec = REGION_SPECS[region]
    return Placement(region=region, bucket=spec.bucket, remaining_days=d, step=step_for_days(region, d))


def clamp_days(days: int) -> int:
    return min(max(int(days), MIN_DAYS), MAX_DAYS)


def placement_for_days(days: int) -> Placement:
    """Like bucket_from_days but clamped into 1..3650, so always placed."""
    return bucket_from_days(clamp_days(days)) or fallback_placement()


def in_admissible_range(days: int) -> bool:
    return MIN_DAYS <= int(days) <= MAX_DAYS


def fallback_placement() -> Placement:
    """Placement used when a deadline cannot be interpreted at all."""
    return Placement(region=4, bucket="days", remaining_days=1, step=1)


def compact_label(bucket: str, remaining_days: int) -> str:
    """e.g. 3 days -> "3d", 31 days in the months bucket -> "1m"."""
    region = BUCKET_REGION.get(bucket)
    if region is None:
        return f"{int(remaining_days)}d"
    spec = REGION_SPECS[region]
    return f"{round_half_up(int(remaining_days) / spec.unit_days)}{spec.suffix}"


def stars(region: int) -> str:
    return "★" * region_spec(region).region


def region_label(region: int) -> str:
    return region_spec(region).label


def region_range(region: int) -> str:
    return region_spec(region).range_label


__all__ = [
    "MIN_DAYS",
    "MAX_DAYS",
    "RegionSpec",
    "REGION_SPECS",
    "BUCKET_REGION",
    "round_half_up",
    "region_spec",
    "region_for_days",
    "step_for_days",
    "days_for_step",
    "progress_for_step",
    "step_for_progress",
    "bucket_from_days",
    "clamp_days",
    "placement_for_days",
    "in_admissible_range",
    "fallback_placement",
    "compact_label",
    "stars",
    "region_label",
    "region_range",
]
