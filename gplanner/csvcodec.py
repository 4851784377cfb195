# gplanner/csvcodec.py
"""CSV export/import of task lists.

Export writes a fixed, self-describing header. Import is header-driven and
tolerant of the column names older exports used (see HEADER_ALIASES); derived
placement columns in the file are only used when the deadline itself cannot
be read, so stale exports are re-placed against the importing reference date.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
from typing import Dict, Iterable, List, Optional, Sequence

from .bucketing import BUCKET_REGION, REGION_SPECS, clamp_days, fallback_placement, placement_for_days, step_for_days
from .model import Placement, Task
from .palette import resolve_project_color
from .util.console import obs
from .util.dates import diff_in_days, normalize_date_input, now_iso_utc

_OBS = "gplanner.csv"

CSV_COLUMNS: tuple[str, ...] = (
    "id",
    "date",
    "deadline",
    "project",
    "projectTag",
    "projectColor",
    "task",
    "region",
    "bucket",
    "remainingDays",
    "createdAt",
    "finishedAt",
)

# canonical field -> accepted header names (compared lower-cased, BOM/space stripped)
HEADER_ALIASES: Dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "date": ("date", "start", "startdate"),
    "deadline": ("deadline", "due", "duedate"),
    "project": ("project", "projectname"),
    "projectTag": ("projecttag", "tag"),
    "projectColor": ("projectcolor", "color", "colour"),
    "task": ("task", "title", "description", "text"),
    "region": ("region", "starregion", "quadrant", "stars"),
    "bucket": ("bucket", "timebucket", "horizon", "timescale"),
    "remainingDays": ("remainingdays", "remaining", "daysleft", "rday"),
    "createdAt": ("createdat", "created", "created_at"),
    "finishedAt": ("finishedat", "finished", "finished_at", "finishdate"),
}

DEFAULT_EXPORT_NAME = "planner_tasks"

# csv.reader caps fields at 131072 chars by default.
_FIELD_LIMIT = 2**31 - 1

BUCKET_ALIASES: Dict[str, str] = {"day": "days", "week": "weeks", "month": "months", "year": "years"}


# --- encode -------------------------------------------------------------------

def task_to_row(t: Task) -> List[str]:
    return [
        t.id,
        t.date,
        t.deadline,
        t.project,
        t.project_tag or "",
        resolve_project_color(t.project, t.project_color),
        t.task,
        str(t.region),
        t.bucket,
        str(t.remaining_days),
        t.created_at,
        t.finished_at or "",
    ]


def tasks_to_csv(tasks: Iterable[Task]) -> str:
    """Header + one row per task; fields with comma/quote/newline are quoted."""
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    w.writerow(CSV_COLUMNS)
    for t in tasks:
        w.writerow(task_to_row(t))
    return buf.getvalue()


def export_filename(base_name: Optional[str], export_date: Optional[dt.date] = None) -> str:
    base = (base_name or "").strip() or DEFAULT_EXPORT_NAME
    d = export_date or dt.date.today()
    return f"{base}_{d.isoformat()}.csv"


# --- decode -------------------------------------------------------------------

def split_csv_line(line: str) -> List[str]:
    """Split one CSV record honouring quotes, doubled quotes and embedded commas.

    An unterminated quote runs to the end of the input.
    """
    for row in csv.reader(io.StringIO(line), strict=False):
        return row
    return []


def _iter_records(text: str) -> Iterable[List[str]]:
    if csv.field_size_limit() < _FIELD_LIMIT:
        csv.field_size_limit(_FIELD_LIMIT)
    # csv.reader keeps newlines inside quoted fields within one record.
    return csv.reader(io.StringIO(text, newline=""), strict=False)


def _norm_header(name: str) -> str:
    return name.replace("\ufeff", "").strip().lower()


def header_index(header: Sequence[str]) -> Dict[str, int]:
    """Canonical field -> column index for the fields present in `header`."""
    norm = [_norm_header(h) for h in header]
    out: Dict[str, int] = {}
    for field, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            if alias in norm:
                out[field] = norm.index(alias)
                break
    return out


def _parse_int(s: str) -> Optional[int]:
    try:
        return int(str(s).strip())
    except (TypeError, ValueError):
        return None


def _stored_placement(region_raw: str, bucket_raw: str, remaining_raw: str) -> Placement:
    """Placement from the file's own derived columns (fallback 4 / 1 day)."""
    region = _parse_int(region_raw)
    if region not in REGION_SPECS:
        b = bucket_raw.strip().lower()
        region = BUCKET_REGION.get(BUCKET_ALIASES.get(b, b))
    if region is None:
        return fallback_placement()
    remaining = _parse_int(remaining_raw)
    remaining = max(1, remaining) if remaining is not None else 1
    return Placement(
        region=region,
        bucket=REGION_SPECS[region].bucket,
        remaining_days=remaining,
        step=step_for_days(region, remaining),
    )


def parse_csv(text: str, today: str, *, now_iso: Optional[str] = None) -> List[Task]:
    """Parse CSV text into tasks placed against `today` (yyyy-MM-dd).

    - Columns are located by name (HEADER_ALIASES); missing columns get defaults.
    - Blank rows, rows shorter than the header and rows without task text
      are skipped.
    - date: invalid/missing -> today; deadline: invalid/missing -> date.
    - region/bucket/remainingDays are recomputed from (today, deadline) and
      clamped into 1..3650 days; the file's values are used only when the
      deadline is present but unreadable.
    """
    created_default = now_iso or now_iso_utc()
    records = [r for r in _iter_records(text) if any(c.strip() for c in r)]
    if len(records) < 2:
        return []

    header = records[0]
    idx = header_index(header)

    def col(row: List[str], field: str) -> str:
        j = idx.get(field)
        if j is None or j >= len(row):
            return ""
        return row[j]

    tasks: List[Task] = []
    for i, row in enumerate(records[1:], start=1):
        if len(row) < len(header):
            obs(_OBS, f"skipping row {i}: {len(row)} columns, header has {len(header)}")
            continue
        text_cell = col(row, "task")
        if not text_cell.strip():
            obs(_OBS, f"skipping row {i}: no task text")
            continue

        raw_date = col(row, "date")
        date = normalize_date_input(raw_date)
        if date is None:
            if raw_date.strip():
                obs(_OBS, f"row {i}: invalid date {raw_date!r}; using {today}")
            date = today

        raw_deadline = col(row, "deadline")
        deadline = normalize_date_input(raw_deadline)
        if deadline is None and raw_deadline.strip():
            obs(_OBS, f"row {i}: unreadable deadline {raw_deadline!r}; keeping stored placement")
            placement = _stored_placement(col(row, "region"), col(row, "bucket"), col(row, "remainingDays"))
            deadline = date
        else:
            deadline = deadline or date
            days = diff_in_days(today, deadline)
            clamped = clamp_days(days)
            if clamped != days and days > 0:
                obs(_OBS, f"row {i}: deadline {deadline} is {days} days out; clamped to {clamped}")
            placement = placement_for_days(clamped)

        tasks.append(
            Task(
                id=col(row, "id").strip() or f"csv-{i}",
                date=date,
                deadline=deadline,
                task=text_cell,
                region=placement.region,
                bucket=placement.bucket,
                remaining_days=placement.remaining_days,
                project=col(row, "project"),
                project_tag=col(row, "projectTag") or None,
                project_color=col(row, "projectColor") or None,
                created_at=col(row, "createdAt") or created_default,
                finished_at=col(row, "finishedAt") or None,
            )
        )
    return tasks


__all__ = [
    "CSV_COLUMNS",
    "HEADER_ALIASES",
    "DEFAULT_EXPORT_NAME",
    "BUCKET_ALIASES",
    "task_to_row",
    "tasks_to_csv",
    "export_filename",
    "split_csv_line",
    "header_index",
    "parse_csv",
]
