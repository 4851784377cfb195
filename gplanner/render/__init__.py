"""Static rendering of the planner map into a self-contained HTML page."""

from __future__ import annotations

from html import escape
from typing import List, Mapping, Optional, Sequence

from ..geometry import DiscGeometry
from ..model import DEFAULT_MAX_PER_REGION, Task
from ..palette import color_legend
from ..util.dates import now_iso_utc
from .inline import build_html
from .svg import build_svg


def build_legend(tasks: Sequence[Task]) -> str:
    items: List[str] = []
    for e in color_legend(tasks):
        items.append(
            f'<li><span class="gp-swatch" style="background:{e.color}"></span>'
            f"{escape(e.label)} <small>({e.count})</small></li>"
        )
    if not items:
        return '<section class="gp-legend"><p>No active tasks.</p></section>'
    return '<section class="gp-legend"><h2>Projects</h2><ul>' + "".join(items) + "</ul></section>"


def render_map_html(
    tasks: Sequence[Task],
    *,
    today: str,
    geometry: Optional[DiscGeometry] = None,
    max_per_region: Optional[Mapping[int, int]] = None,
    policy: str = "spread",
) -> str:
    caps = dict(max_per_region or DEFAULT_MAX_PER_REGION)
    payload = {
        "today": today,
        "generatedAt": now_iso_utc(),
        "layout": policy,
        "maxPerRegion": {str(k): v for k, v in sorted(caps.items())},
        "tasks": [t.to_dict() for t in tasks],
    }
    svg = build_svg(tasks, geometry, caps, policy)
    return build_html(payload, svg=svg, legend=build_legend(tasks), title=f"gPlanner – {today}")


__all__ = ["build_html", "build_svg", "build_legend", "render_map_html"]
