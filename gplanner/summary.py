# gplanner/summary.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .bucketing import compact_label, region_range, stars
from .model import REGIONS, Task
from .palette import task_color
from .util.dates import diff_in_days, format_mdy, normalize_date_input

NO_PROJECT = "(no project)"


def _by_deadline(tasks: Iterable[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: t.deadline)


def share_text(tasks: Sequence[Task]) -> str:
    """Plain-text schedule suitable for pasting into mail or chat."""
    if not tasks:
        return "No tasks in gPlanner yet."

    lines: List[str] = ["gPlanner schedule", ""]
    for t in _by_deadline(tasks):
        lines.append(
            f"{stars(t.region)} {region_range(t.region)} – "
            f"{compact_label(t.bucket, t.remaining_days)} ({t.remaining_days} days left)"
        )
        if t.project:
            lines.append(f"  Project: {t.project}")
            lines.append(f"  Project color: {task_color(t)}")
        if t.project_tag:
            lines.append(f"  Tag: {t.project_tag}")
        lines.append(f"  Task: {t.task}")
        lines.append(f"  Date: {t.date}")
        lines.append(f"  Deadline: {format_mdy(t.deadline)}")
        if t.finished_at:
            lines.append(f"  Finished: {format_mdy(normalize_date_input(t.finished_at) or t.finished_at)}")
        lines.append("")
    return "\n".join(lines)


@dataclass(frozen=True)
class ProjectSummary:
    project: str
    tag: Optional[str]
    color: str
    tasks: tuple[Task, ...]

    @property
    def active(self) -> int:
        return sum(1 for t in self.tasks if not t.finished)


def project_summaries(tasks: Iterable[Task]) -> List[ProjectSummary]:
    """Tasks grouped by project name, each group sorted by deadline.

    The group's tag is the first non-empty tag seen; its colour is the
    effective colour of its first task.
    """
    groups: Dict[str, List[Task]] = {}
    tags: Dict[str, Optional[str]] = {}
    for t in tasks:
        k = t.project.strip() or NO_PROJECT
        groups.setdefault(k, []).append(t)
        if not tags.get(k) and t.project_tag:
            tags[k] = t.project_tag
    return [
        ProjectSummary(project=k, tag=tags.get(k), color=task_color(items[0]), tasks=tuple(_by_deadline(items)))
        for k, items in sorted(groups.items())
    ]


def suggest_project_tag(tasks: Iterable[Task], project: str) -> Optional[str]:
    """Tag already used for `project` (case-insensitive), if any."""
    key = (project or "").strip().lower()
    if not key:
        return None
    for t in tasks:
        if t.project.strip().lower() == key and t.project_tag:
            return t.project_tag
    return None


@dataclass(frozen=True)
class TaskStats:
    total: int
    active: int
    completed: int
    per_region: Dict[int, int]

    @property
    def completion_rate(self) -> float:
        return self.completed / self.total if self.total else 0.0


def task_stats(tasks: Iterable[Task]) -> TaskStats:
    items = list(tasks)
    per_region = {r: 0 for r in REGIONS}
    completed = 0
    for t in items:
        if t.finished:
            completed += 1
        else:
            per_region[t.region] = per_region.get(t.region, 0) + 1
    return TaskStats(total=len(items), active=len(items) - completed, completed=completed, per_region=per_region)


def due_soon(tasks: Iterable[Task], today: str, within_days: int = 7) -> List[Task]:
    """Active tasks due within `within_days` of `today` (overdue included), soonest first."""
    out = []
    for t in tasks:
        if t.finished:
            continue
        d = normalize_date_input(t.deadline)
        if d is None:
            continue
        if diff_in_days(today, d) <= within_days:
            out.append(t)
    return _by_deadline(out)


__all__ = [
    "NO_PROJECT",
    "share_text",
    "ProjectSummary",
    "project_summaries",
    "suggest_project_tag",
    "TaskStats",
    "task_stats",
    "due_soon",
]
