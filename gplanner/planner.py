# gplanner/planner.py
from __future__ import annotations

import csv
import random
import string
import time
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .bucketing import (
    MAX_DAYS,
    MIN_DAYS,
    bucket_from_days,
    days_for_step,
    fallback_placement,
    in_admissible_range,
    region_label,
    stars,
    step_for_days,
)
from .csvcodec import parse_csv
from .errors import (
    CapacityExceededError,
    EmptyImportError,
    InvalidDeadlineError,
    InvalidTaskError,
    TaskNotFoundError,
)
from .geometry import DiscGeometry, pointer_to_placement
from .model import DEFAULT_MAX_PER_REGION, REGIONS, Placement, Task
from .palette import ensure_project_color, resolve_project_color
from .summary import suggest_project_tag
from .util.dates import add_days, diff_in_days, normalize_date_input, now_iso_utc

_B36 = string.digits + string.ascii_lowercase


def new_task_id(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    r = rng or random
    suffix = "".join(r.choice(_B36) for _ in range(11))
    return f"task-{ms}-{suffix}"


def _find(tasks: Sequence[Task], task_id: str) -> int:
    for i, t in enumerate(tasks):
        if t.id == task_id:
            return i
    raise TaskNotFoundError(task_id)


def _replace_at(tasks: Sequence[Task], i: int, new: Task) -> List[Task]:
    out = list(tasks)
    out[i] = new
    return out


# --- placement ----------------------------------------------------------------

def placement_for_deadline(today: str, deadline: str) -> Placement:
    """Placement of a deadline for display: never raises.

    Overdue clamps to 1 day; unreadable deadlines and deadlines past ten years
    fall back to region 4 / 1 day.
    """
    d = normalize_date_input(deadline)
    if d is None:
        return fallback_placement()
    try:
        days = diff_in_days(today, d)
    except ValueError:
        return fallback_placement()
    return bucket_from_days(days) or fallback_placement()


def admit_deadline(today: str, deadline: str) -> Tuple[str, Placement]:
    """Strict placement for manual add/edit.

    Returns (normalized deadline, placement); raises InvalidDeadlineError when
    the deadline is unreadable or not 1 day .. 10 years after `today`.
    """
    d = normalize_date_input(deadline)
    if d is None:
        raise InvalidDeadlineError(f"Invalid deadline {deadline!r}; expected a date 1 day to 10 years from today.")
    days = diff_in_days(today, d)
    p = bucket_from_days(days) if in_admissible_range(days) else None
    if p is None:
        raise InvalidDeadlineError(
            f"Deadline must be between {MIN_DAYS} day and 10 years ({MAX_DAYS} days) from today; "
            f"{d} is {days} days from {today}."
        )
    return d, p


def renormalize(tasks: Sequence[Task], today: str) -> List[Task]:
    """Re-place every active task against a (new) reference date.

    Finished tasks keep the placement they had when completed. Active tasks
    whose deadline is past the ten year horizon keep their region/bucket and
    only refresh remaining_days.
    """
    out: List[Task] = []
    for t in tasks:
        if t.finished:
            out.append(t)
            continue
        d = normalize_date_input(t.deadline)
        if d is None:
            p = fallback_placement()
        else:
            days = max(MIN_DAYS, diff_in_days(today, d))
            p = bucket_from_days(days)
            if p is None:
                out.append(replace(t, remaining_days=days))
                continue
        if (t.region, t.bucket, t.remaining_days) == (p.region, p.bucket, p.remaining_days):
            out.append(t)
        else:
            out.append(t.with_placement(p))
    return out


# --- capacity -----------------------------------------------------------------

def region_counts(tasks: Sequence[Task], *, exclude_id: Optional[str] = None) -> Dict[int, int]:
    """Active (non-finished) task count per region."""
    counts = {r: 0 for r in REGIONS}
    for t in tasks:
        if t.finished or t.id == exclude_id:
            continue
        counts[t.region] = counts.get(t.region, 0) + 1
    return counts


def check_capacity(
    tasks: Sequence[Task],
    region: int,
    max_per_region: Optional[Mapping[int, int]] = None,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    caps = max_per_region or DEFAULT_MAX_PER_REGION
    limit = int(caps.get(region, DEFAULT_MAX_PER_REGION[region]))
    count = region_counts(tasks, exclude_id=exclude_id).get(region, 0)
    if count >= limit:
        raise CapacityExceededError(
            f"Region {stars(region)} {region_label(region)} is at capacity ({count}/{limit} tasks).",
            region=region,
            count=count,
            limit=limit,
        )


# --- commands -----------------------------------------------------------------

def add_task(
    tasks: Sequence[Task],
    *,
    today: str,
    deadline: str,
    description: str,
    project: str = "",
    project_tag: Optional[str] = None,
    project_color: Optional[str] = None,
    max_per_region: Optional[Mapping[int, int]] = None,
    task_id: Optional[str] = None,
    created_at: Optional[str] = None,
) -> Tuple[List[Task], Task]:
    """Validate and append a new task; returns (new list, new task).

    Without an explicit project_tag the tag already used by the project is reused.
    """
    text = (description or "").strip()
    if not text:
        raise InvalidTaskError("Task description is required.")
    d, p = admit_deadline(today, deadline)
    check_capacity(tasks, p.region, max_per_region)

    proj = (project or "").strip()
    if project_tag is None:
        project_tag = suggest_project_tag(tasks, proj)
    tag = (project_tag or "").strip()
    t = Task(
        id=task_id or new_task_id(),
        date=today,
        deadline=d,
        task=text,
        region=p.region,
        bucket=p.bucket,
        remaining_days=p.remaining_days,
        project=proj,
        project_tag=tag or None,
        project_color=resolve_project_color(proj, project_color),
        created_at=created_at or now_iso_utc(),
    )
    return list(tasks) + [t], t


def edit_task(
    tasks: Sequence[Task],
    task_id: str,
    *,
    today: str,
    max_per_region: Optional[Mapping[int, int]] = None,
    deadline: Optional[str] = None,
    description: Optional[str] = None,
    project: Optional[str] = None,
    project_tag: Optional[str] = None,
    project_color: Optional[str] = None,
) -> List[Task]:
    """Apply field edits.

    A new deadline must be admissible and moves the task to its placement.
    Without one, an active task keeps its deadline placed against `today`
    and a finished task keeps its frozen placement. Moving an active task
    into another region is subject to that region's capacity (the task
    itself is not counted).
    """
    i = _find(tasks, task_id)
    cur = tasks[i]

    text = cur.task if description is None else description.strip()
    if not text:
        raise InvalidTaskError("Task description is required.")
    if deadline is not None:
        d, p = admit_deadline(today, deadline)
    elif cur.finished:
        step = step_for_days(cur.region, cur.remaining_days)
        d, p = cur.deadline, Placement(cur.region, cur.bucket, cur.remaining_days, step)
    else:
        d, p = cur.deadline, placement_for_deadline(today, cur.deadline)
    if not cur.finished and p.region != cur.region:
        check_capacity(tasks, p.region, max_per_region, exclude_id=cur.id)

    proj = cur.project if project is None else project.strip()
    tag = cur.project_tag if project_tag is None else (project_tag.strip() or None)
    color = cur.project_color if project_color is None else project_color
    new = cur.with_placement(
        p,
        deadline=d,
        task=text,
        project=proj,
        project_tag=tag,
        project_color=resolve_project_color(proj, color),
    )
    return _replace_at(tasks, i, new)


def delete_task(tasks: Sequence[Task], task_id: str) -> List[Task]:
    i = _find(tasks, task_id)
    return list(tasks[:i]) + list(tasks[i + 1:])


def mark_done(tasks: Sequence[Task], task_id: str, *, finished_at: Optional[str] = None) -> List[Task]:
    """Set finished_at; the task's placement is frozen from here on."""
    i = _find(tasks, task_id)
    return _replace_at(tasks, i, replace(tasks[i], finished_at=finished_at or now_iso_utc()))


def reopen_task(
    tasks: Sequence[Task],
    task_id: str,
    *,
    today: str,
    max_per_region: Optional[Mapping[int, int]] = None,
) -> List[Task]:
    i = _find(tasks, task_id)
    cur = tasks[i]
    if not cur.finished:
        return list(tasks)
    p = placement_for_deadline(today, cur.deadline)
    check_capacity(tasks, p.region, max_per_region, exclude_id=cur.id)
    return _replace_at(tasks, i, cur.with_placement(p, finished_at=None))


def drag_task(
    tasks: Sequence[Task],
    task_id: str,
    x: float,
    y: float,
    *,
    today: str,
    geometry: Optional[DiscGeometry] = None,
    max_per_region: Optional[Mapping[int, int]] = None,
) -> List[Task]:
    """Reinterpret a dropped pointer position as a new deadline.

    Angle picks the region, distance picks the step; the deadline becomes
    today + the step's representative day count. Returns an unchanged copy of
    `tasks` for pointer positions inside the dead zone and for finished
    tasks; raises CapacityExceededError when the destination region is full.
    """
    i = _find(tasks, task_id)
    cur = tasks[i]
    if cur.finished:
        return list(tasks)

    hit = pointer_to_placement(geometry or DiscGeometry(), x, y)
    if hit is None:
        return list(tasks)
    region, step = hit
    if region != cur.region:
        check_capacity(tasks, region, max_per_region, exclude_id=cur.id)

    days = days_for_step(region, step)
    p = bucket_from_days(days) or fallback_placement()
    return _replace_at(tasks, i, cur.with_placement(p, deadline=add_days(today, days)))


def import_csv_text(text: str, *, today: str, now_iso: Optional[str] = None) -> List[Task]:
    """Decode CSV into a replacement task list (raises EmptyImportError)."""
    try:
        parsed = parse_csv(text, today, now_iso=now_iso)
    except csv.Error as e:
        raise EmptyImportError(f"Could not read CSV: {e}") from e
    if not parsed:
        raise EmptyImportError("No tasks found in CSV.")
    return [ensure_project_color(t) for t in parsed]


__all__ = [
    "new_task_id",
    "placement_for_deadline",
    "admit_deadline",
    "renormalize",
    "region_counts",
    "check_capacity",
    "add_task",
    "edit_task",
    "delete_task",
    "mark_done",
    "reopen_task",
    "drag_task",
    "import_csv_text",
]
