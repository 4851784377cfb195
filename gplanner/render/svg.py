# gplanner/render/svg.py
from __future__ import annotations

from html import escape
from typing import List, Mapping, Optional, Sequence

from ..bucketing import compact_label, region_label, region_range, stars
from ..geometry import REGION_ANGLES, REGION_FILLS, DiscGeometry, dot_radius, lane_angle, layout_dots, wedge_path
from ..lanes import lanes_for_region
from ..model import REGIONS, Task
from ..palette import color_for_bucket, task_color, text_color_for_background


def _f(v: float) -> str:
    return f"{v:.2f}"


def _wedges(geom: DiscGeometry) -> List[str]:
    return [
        f'<path class="gp-wedge" data-region="{r}" d="{wedge_path(geom, r)}" fill="{REGION_FILLS[r]}" />'
        for r in REGIONS
    ]


def _rings(geom: DiscGeometry) -> List[str]:
    return [
        f'<circle class="gp-ring" cx="{_f(geom.cx)}" cy="{_f(geom.cy)}" r="{_f(r)}" '
        f'fill="none" stroke="#cbd5e1" stroke-width="1" />'
        for r in geom.ring_radii
    ]


def _lane_guides(geom: DiscGeometry, max_per_region: Optional[Mapping[int, int]]) -> List[str]:
    out: List[str] = []
    r0 = geom.radius_for_progress(0.0)
    r1 = geom.radius_for_progress(1.0)
    for region in REGIONS:
        n = lanes_for_region(max_per_region, region)
        for lane in range(n):
            a = lane_angle(region, lane, n)
            x1, y1 = geom.polar_to_xy(a, r0)
            x2, y2 = geom.polar_to_xy(a, r1)
            out.append(
                f'<line class="gp-lane" x1="{_f(x1)}" y1="{_f(y1)}" x2="{_f(x2)}" y2="{_f(y2)}" '
                f'stroke="#94a3b8" stroke-width="0.6" stroke-dasharray="3 4" />'
            )
    return out


def _region_labels(geom: DiscGeometry) -> List[str]:
    out: List[str] = []
    for region in REGIONS:
        start, end = REGION_ANGLES[region]
        x, y = geom.polar_to_xy((start + end) / 2, geom.max_r + geom.padding / 2)
        out.append(
            f'<text class="gp-region-label" x="{_f(x)}" y="{_f(y)}" text-anchor="middle">'
            f'<tspan x="{_f(x)}">{stars(region)} {escape(region_range(region))}</tspan>'
            f'<tspan x="{_f(x)}" dy="14">{escape(region_label(region))}</tspan></text>'
        )
    return out


def _dots(
    tasks: Sequence[Task],
    geom: DiscGeometry,
    max_per_region: Optional[Mapping[int, int]],
    policy: str,
) -> List[str]:
    pos = layout_dots(tasks, geom, max_per_region, policy)
    out: List[str] = []
    for t in tasks:
        p = pos.get(t.id)
        if p is None:
            continue
        fill = task_color(t)
        ink = text_color_for_background(fill)
        title = escape(f"{t.task} ({t.project})" if t.project else t.task)
        out.append(
            f'<g class="gp-dot" data-id="{escape(t.id, quote=True)}" data-region="{t.region}" data-lane="{p.lane}">'
            f"<title>{title}</title>"
            f'<circle cx="{_f(p.x)}" cy="{_f(p.y)}" r="{_f(dot_radius(p.progress))}" fill="{fill}" '
            f'stroke="{color_for_bucket(t.bucket)}" stroke-width="1.5" />'
            f'<text x="{_f(p.x)}" y="{_f(p.y + 4)}" text-anchor="middle" fill="{ink}" font-size="10">'
            f"{escape(compact_label(t.bucket, t.remaining_days))}</text></g>"
        )
    return out


def build_svg(
    tasks: Sequence[Task],
    geom: Optional[DiscGeometry] = None,
    max_per_region: Optional[Mapping[int, int]] = None,
    policy: str = "spread",
) -> str:
    """SVG markup for the map: wedges, rings, lane guides, labels, then dots."""
    g = geom or DiscGeometry()
    size = _f(g.size)
    parts: List[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" class="gp-map" width="{size}" height="{size}" '
        f'viewBox="0 0 {size} {size}">'
    ]
    parts.extend(_wedges(g))
    parts.extend(_rings(g))
    parts.extend(_lane_guides(g, max_per_region))
    parts.extend(_region_labels(g))
    parts.extend(_dots(tasks, g, max_per_region, policy))
    parts.append("</svg>")
    return "\n".join(parts)


__all__ = ["build_svg"]
