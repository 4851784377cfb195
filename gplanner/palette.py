# gplanner/palette.py
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from .model import Task

DEFAULT_PROJECT_COLOR = "#475569"
PROJECT_COLOR_PALETTE: tuple[str, ...] = (
    "#0ea5e9",
    "#f97316",
    "#22c55e",
    "#a855f7",
    "#ec4899",
    "#facc15",
    "#06b6d4",
    "#ef4444",
    "#4ade80",
    "#c084fc",
)

BUCKET_COLORS: Dict[str, str] = {
    "days": "#ef4444",
    "weeks": "#ca8a04",
    "months": "#16a34a",
    "years": "#0ea5e9",
}

_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def sanitize_hex_color(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    v = str(value).strip()
    if _HEX_RE.match(v):
        return v.lower()
    return None


def _hash_project_key(key: str) -> int:
    # h*31 + code unit over UTF-16, kept to 32 bits, so colours match exports
    # made by other front ends.
    h = 0
    data = key.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h = (h * 31 + (data[i] | (data[i + 1] << 8))) & 0xFFFFFFFF
    return h


def fallback_project_color(project: str) -> str:
    key = (project or "").strip().lower()
    if not key:
        return DEFAULT_PROJECT_COLOR
    return PROJECT_COLOR_PALETTE[_hash_project_key(key) % len(PROJECT_COLOR_PALETTE)]


def resolve_project_color(project: str, color: Optional[str] = None) -> str:
    """Explicit #rrggbb colour if valid, else the hash-derived project colour."""
    return sanitize_hex_color(color) or fallback_project_color(project)


def task_color(task: Task) -> str:
    return resolve_project_color(task.project, task.project_color)


def ensure_project_color(task: Task) -> Task:
    color = task_color(task)
    if task.project_color == color:
        return task
    return replace(task, project_color=color)


def text_color_for_background(hex_color: str) -> str:
    c = sanitize_hex_color(hex_color)
    if not c:
        return "#f8fafc"
    r, g, b = int(c[1:3], 16), int(c[3:5], 16), int(c[5:7], 16)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#0f172a" if luminance > 0.55 else "#f8fafc"


def color_for_bucket(bucket: str) -> str:
    return BUCKET_COLORS.get(bucket, DEFAULT_PROJECT_COLOR)


@dataclass(frozen=True)
class PaletteEntry:
    color: str
    label: str
    projects: tuple[str, ...]
    count: int


def color_legend(tasks: Iterable[Task]) -> List[PaletteEntry]:
    """One entry per effective colour among active tasks, sorted by label.

    Label is the single project name, "<first> +N more" when several projects
    share a colour, or "No project name".
    """
    projects: Dict[str, List[str]] = {}
    counts: Dict[str, int] = {}
    for t in tasks:
        if t.finished:
            continue
        color = task_color(t)
        names = projects.setdefault(color, [])
        counts[color] = counts.get(color, 0) + 1
        name = t.project.strip()
        if name and name not in names:
            names.append(name)

    out: List[PaletteEntry] = []
    for color, names in projects.items():
        if len(names) == 1:
            label = names[0]
        elif names:
            label = f"{names[0]} +{len(names) - 1} more"
        else:
            label = "No project name"
        out.append(PaletteEntry(color=color, label=label, projects=tuple(names), count=counts[color]))
    out.sort(key=lambda e: e.label.lower())
    return out


__all__ = [
    "DEFAULT_PROJECT_COLOR",
    "PROJECT_COLOR_PALETTE",
    "BUCKET_COLORS",
    "sanitize_hex_color",
    "fallback_project_color",
    "resolve_project_color",
    "task_color",
    "ensure_project_color",
    "text_color_for_background",
    "color_for_bucket",
    "PaletteEntry",
    "color_legend",
]
