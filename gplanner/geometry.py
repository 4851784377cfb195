# gplanner/geometry.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .bucketing import progress_for_step, step_for_days, step_for_progress
from .lanes import assign_lanes
from .model import DotPosition, Task

# Fixed wedge per region, degrees counter-clockwise from +x, [start, end).
REGION_ANGLES: Dict[int, Tuple[float, float]] = {
    4: (90.0, 180.0),   # top-left: important / urgent (days)
    3: (0.0, 90.0),     # top-right: important / not urgent (weeks)
    2: (180.0, 270.0),  # bottom-left: not important / urgent (months)
    1: (270.0, 360.0),  # bottom-right: not important / not urgent (years)
}

REGION_FILLS: Dict[int, str] = {
    4: "#fee2e2",
    3: "#fef3c7",
    2: "#dcfce7",
    1: "#e0f2fe",
}

DEFAULT_SIZE = 900.0
PADDING = 60.0
RING_FRACTIONS: tuple[float, ...] = (0.25, 0.5, 0.75)
MIN_RADIUS_FRACTION = RING_FRACTIONS[0]
MAX_RADIUS_FRACTION = 0.97
DRAG_DEAD_ZONE_PX = 5.0


@dataclass(frozen=True)
class DiscGeometry:
    """Square drawing surface of `size` px with the disc centred in it."""

    size: float = DEFAULT_SIZE
    padding: float = PADDING
    min_frac: float = MIN_RADIUS_FRACTION
    max_frac: float = MAX_RADIUS_FRACTION

    @property
    def cx(self) -> float:
        return self.size / 2

    @property
    def cy(self) -> float:
        return self.size / 2

    @property
    def max_r(self) -> float:
        return self.size / 2 - self.padding

    @property
    def ring_radii(self) -> tuple[float, ...]:
        return tuple(f * self.max_r for f in RING_FRACTIONS)

    @property
    def frac_range(self) -> float:
        return max(0.01, self.max_frac - self.min_frac)

    def radius_for_progress(self, progress: float) -> float:
        p = min(1.0, max(0.0, progress))
        return self.max_r * (self.min_frac + self.frac_range * p)

    def progress_for_radius(self, dist: float) -> float:
        f = min(max(dist / self.max_r, self.min_frac), self.max_frac)
        return min(max((f - self.min_frac) / self.frac_range, 0.0), 1.0)

    def polar_to_xy(self, angle_deg: float, r: float) -> Tuple[float, float]:
        a = math.radians(angle_deg)
        # screen y grows downwards
        return self.cx + r * math.cos(a), self.cy - r * math.sin(a)


def lane_angle(region: int, lane: int, lanes: int) -> float:
    start, end = REGION_ANGLES[region]
    n = max(1, int(lanes))
    return start + (end - start) * (int(lane) + 0.5) / n


def region_for_angle(angle_deg: float) -> int:
    a = angle_deg % 360.0
    for region, (start, end) in REGION_ANGLES.items():
        if start <= a < end:
            return region
    return 1  # a == 360.0 after float rounding


def dot_position(geom: DiscGeometry, region: int, step: int, lane: int, lanes: int) -> DotPosition:
    progress = progress_for_step(region, step)
    x, y = geom.polar_to_xy(lane_angle(region, lane, lanes), geom.radius_for_progress(progress))
    return DotPosition(x=x, y=y, progress=progress, lane=int(lane), lanes=max(1, int(lanes)))


def pointer_to_placement(geom: DiscGeometry, x: float, y: float) -> Optional[Tuple[int, int]]:
    """Pointer (surface px) -> (region, step), or None inside the dead zone.

    The radius is clamped to the plotted band so dropping past the rim or
    near the hub snaps to the region's outermost / innermost step.
    """
    dx = x - geom.cx
    dy = geom.cy - y
    dist = math.hypot(dx, dy)
    if dist < DRAG_DEAD_ZONE_PX:
        return None
    region = region_for_angle(math.degrees(math.atan2(dy, dx)))
    step = step_for_progress(region, geom.progress_for_radius(dist))
    return region, step


def dot_radius(progress: float) -> float:
    return 9.0 + 9.0 * min(1.0, max(0.0, progress))


def layout_dots(
    tasks: Iterable[Task],
    geom: DiscGeometry,
    max_per_region: Optional[Mapping[int, int]] = None,
    policy: str = "spread",
) -> Dict[str, DotPosition]:
    """Positions for every active task (lanes recomputed from the whole list)."""
    items = list(tasks)
    lanes = assign_lanes(items, max_per_region, policy)
    out: Dict[str, DotPosition] = {}
    for t in items:
        lane_info = lanes.get(t.id)
        if lane_info is None:
            continue
        lane, n = lane_info
        step = step_for_days(t.region, t.remaining_days)
        out[t.id] = dot_position(geom, t.region, step, lane, n)
    return out


def wedge_path(geom: DiscGeometry, region: int) -> str:
    start, end = REGION_ANGLES[region]
    x1, y1 = geom.polar_to_xy(start, geom.max_r)
    x2, y2 = geom.polar_to_xy(end, geom.max_r)
    large_arc = 1 if abs(end - start) > 180 else 0
    r = geom.max_r
    return (
        f"M {geom.cx:.2f} {geom.cy:.2f} L {x1:.2f} {y1:.2f} "
        f"A {r:.2f} {r:.2f} 0 {large_arc} 0 {x2:.2f} {y2:.2f} Z"
    )


__all__ = [
    "REGION_ANGLES",
    "REGION_FILLS",
    "DEFAULT_SIZE",
    "PADDING",
    "RING_FRACTIONS",
    "MIN_RADIUS_FRACTION",
    "MAX_RADIUS_FRACTION",
    "DRAG_DEAD_ZONE_PX",
    "DiscGeometry",
    "lane_angle",
    "region_for_angle",
    "dot_position",
    "pointer_to_placement",
    "dot_radius",
    "layout_dots",
    "wedge_path",
]
