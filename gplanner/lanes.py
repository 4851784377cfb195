# gplanner/lanes.py
from __future__ import annotations

from typing import Dict, Iterable, Literal, Mapping, Optional, Tuple

from .model import DEFAULT_MAX_PER_REGION, REGIONS, Task
from .palette import task_color

MAX_LANES = 10

# "spread": lanes filled by insertion order within a region.
# "track": tasks sharing an effective colour share a lane.
LanePolicy = Literal["spread", "track"]
LANE_POLICIES: tuple[str, ...] = ("spread", "track")


def lanes_for_region(max_per_region: Optional[Mapping[int, int]], region: int) -> int:
    cap = (max_per_region or DEFAULT_MAX_PER_REGION).get(region, DEFAULT_MAX_PER_REGION[region])
    try:
        n = int(cap)
    except (TypeError, ValueError):
        n = DEFAULT_MAX_PER_REGION[region]
    return max(1, min(MAX_LANES, n))


def assign_lanes(
    tasks: Iterable[Task],
    max_per_region: Optional[Mapping[int, int]] = None,
    policy: str = "spread",
) -> Dict[str, Tuple[int, int]]:
    """Map task id -> (lane, lanes in region) for every active task.

    Recomputed from the full task list each time; lanes are never stored.
    Finished tasks are not plotted and get no lane.
    """
    if policy not in LANE_POLICIES:
        raise ValueError(f"Unknown lane policy: {policy!r} (expected one of {', '.join(LANE_POLICIES)})")

    lanes = {r: lanes_for_region(max_per_region, r) for r in REGIONS}
    seen: Dict[int, int] = {r: 0 for r in REGIONS}
    color_lane: Dict[int, Dict[str, int]] = {r: {} for r in REGIONS}

    out: Dict[str, Tuple[int, int]] = {}
    for t in tasks:
        if t.finished or t.region not in lanes:
            continue
        n = lanes[t.region]
        if policy == "track":
            by_color = color_lane[t.region]
            color = task_color(t)
            lane = by_color.get(color)
            if lane is None:
                lane = len(by_color) % n
                by_color[color] = lane
        else:
            lane = seen[t.region] % n
        seen[t.region] += 1
        out[t.id] = (lane, n)
    return out


__all__ = [
    "MAX_LANES",
    "LanePolicy",
    "LANE_POLICIES",
    "lanes_for_region",
    "assign_lanes",
]
