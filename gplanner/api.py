"""gplanner.api

Stable *library* entrypoint for gPlanner.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from gplanner.bucketing import (
    bucket_from_days,
    compact_label,
    days_for_step,
    placement_for_days,
    progress_for_step,
    region_label,
    region_range,
    stars,
    step_for_days,
    step_for_progress,
)
from gplanner.config import load_capacity_config
from gplanner.csvcodec import export_filename, parse_csv, split_csv_line, tasks_to_csv
from gplanner.errors import (
    CapacityExceededError,
    EmptyImportError,
    ImportFetchError,
    InvalidDeadlineError,
    InvalidTaskError,
    PlannerError,
    TaskNotFoundError,
)
from gplanner.geometry import DiscGeometry, dot_position, layout_dots, pointer_to_placement
from gplanner.lanes import assign_lanes
from gplanner.model import DEFAULT_MAX_PER_REGION, DotPosition, Placement, PlannerState, Task
from gplanner.palette import color_legend, resolve_project_color
from gplanner.planner import (
    add_task,
    delete_task,
    drag_task,
    edit_task,
    import_csv_text,
    mark_done,
    region_counts,
    renormalize,
    reopen_task,
)
from gplanner.remote import fetch_csv_text
from gplanner.render import render_map_html
from gplanner.storage import load_state, save_state
from gplanner.summary import due_soon, project_summaries, share_text, task_stats

PathLike = Union[str, Path]


def load_tasks_from_csv(path: PathLike, *, today: str) -> List[Task]:
    """Read a CSV export from disk; raises EmptyImportError when it holds no tasks."""
    text = Path(path).read_text(encoding="utf-8-sig")
    return import_csv_text(text, today=today)


def load_tasks_from_url(url: str, *, today: str, timeout: Optional[float] = None) -> List[Task]:
    return import_csv_text(fetch_csv_text(url, timeout=timeout), today=today)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "CapacityExceededError",
    "DEFAULT_MAX_PER_REGION",
    "DiscGeometry",
    "DotPosition",
    "EmptyImportError",
    "ImportFetchError",
    "InvalidDeadlineError",
    "InvalidTaskError",
    "Placement",
    "PlannerError",
    "PlannerState",
    "Task",
    "TaskNotFoundError",
    "add_task",
    "assign_lanes",
    "bucket_from_days",
    "color_legend",
    "compact_label",
    "days_for_step",
    "delete_task",
    "dot_position",
    "drag_task",
    "due_soon",
    "edit_task",
    "export_filename",
    "fetch_csv_text",
    "import_csv_text",
    "layout_dots",
    "load_capacity_config",
    "load_state",
    "load_tasks_from_csv",
    "load_tasks_from_url",
    "mark_done",
    "parse_csv",
    "placement_for_days",
    "pointer_to_placement",
    "progress_for_step",
    "project_summaries",
    "region_counts",
    "region_label",
    "region_range",
    "render_map_html",
    "renormalize",
    "reopen_task",
    "resolve_project_color",
    "save_state",
    "share_text",
    "split_csv_line",
    "stars",
    "step_for_days",
    "step_for_progress",
    "task_stats",
    "tasks_to_csv",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
