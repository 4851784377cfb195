# gplanner/model.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Optional

Region = Literal[1, 2, 3, 4]
Bucket = Literal["days", "weeks", "months", "years"]

REGIONS: tuple[int, ...] = (4, 3, 2, 1)
BUCKETS: tuple[str, ...] = ("days", "weeks", "months", "years")

# Per-region capacity (active tasks); region number -> max count.
MaxPerRegion = Dict[int, int]
DEFAULT_MAX_PER_REGION: Dict[int, int] = {1: 10, 2: 10, 3: 10, 4: 10}


@dataclass(frozen=True)
class Placement:
    region: int
    bucket: str
    remaining_days: int
    step: int


@dataclass(frozen=True)
class DotPosition:
    x: float
    y: float
    progress: float
    lane: int
    lanes: int


@dataclass(frozen=True)
class Task:
    """One planner task.

    `region`, `bucket` and `remaining_days` are derived from `deadline`
    against a reference date and are only ever set by the planner ops.
    Persisted/exported with camelCase keys (see `to_dict`).
    """

    id: str
    date: str
    deadline: str
    task: str
    region: int = 4
    bucket: str = "days"
    remaining_days: int = 1
    project: str = ""
    project_tag: Optional[str] = None
    project_color: Optional[str] = None
    created_at: str = ""
    finished_at: Optional[str] = None

    @property
    def finished(self) -> bool:
        return bool(self.finished_at)

    def with_placement(self, p: Placement, **changes: Any) -> "Task":
        return replace(
            self,
            region=p.region,
            bucket=p.bucket,
            remaining_days=p.remaining_days,
            **changes,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "deadline": self.deadline,
            "project": self.project,
            "task": self.task,
            "region": self.region,
            "bucket": self.bucket,
            "remainingDays": self.remaining_days,
            "createdAt": self.created_at,
        }
        if self.project_tag:
            out["projectTag"] = self.project_tag
        if self.project_color:
            out["projectColor"] = self.project_color
        if self.finished_at:
            out["finishedAt"] = self.finished_at
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Task":
        def _s(key: str) -> str:
            v = d.get(key)
            return "" if v is None else str(v)

        rd = d.get("remainingDays")
        return cls(
            id=_s("id"),
            date=_s("date"),
            deadline=_s("deadline"),
            task=_s("task"),
            region=int(d.get("region") or 4),
            bucket=_s("bucket") or "days",
            remaining_days=int(rd) if isinstance(rd, (int, float)) else 1,
            project=_s("project"),
            project_tag=_s("projectTag") or None,
            project_color=_s("projectColor") or None,
            created_at=_s("createdAt"),
            finished_at=_s("finishedAt") or None,
        )


@dataclass(frozen=True)
class PlannerState:
    """Everything persisted between sessions (three named slots)."""

    tasks: tuple[Task, ...] = ()
    max_per_region: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_MAX_PER_REGION))
    csv_name: str = "planner_tasks"


__all__ = [
    "Region",
    "Bucket",
    "REGIONS",
    "BUCKETS",
    "MaxPerRegion",
    "DEFAULT_MAX_PER_REGION",
    "Placement",
    "DotPosition",
    "Task",
    "PlannerState",
]
