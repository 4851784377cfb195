"""Structural validation of persisted planner state (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from .bucketing import BUCKET_REGION, REGION_SPECS
from .errors import PlannerError


class StateValidationError(PlannerError):
    """Raised when a persisted state document fails validation."""


_REQUIRED_STR = ("id", "date", "deadline", "task")
_OPTIONAL_STR = ("project", "projectTag", "projectColor", "createdAt", "finishedAt")


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def validate_task_dict(t: Any, *, label: str = "task") -> List[str]:
    if not isinstance(t, dict):
        return [f"{label} must be dict"]
    errs: List[str] = []
    for k in _REQUIRED_STR:
        v = t.get(k)
        _require(isinstance(v, str) and bool(v.strip()), f"{label}.{k} must be non-empty string", errs)
    for k in _OPTIONAL_STR:
        v = t.get(k)
        _require(v is None or isinstance(v, str), f"{label}.{k} must be string when present", errs)

    region = t.get("region")
    bucket = t.get("bucket")
    rd = t.get("remainingDays")
    _require(region in REGION_SPECS, f"{label}.region must be 1-4", errs)
    _require(bucket in BUCKET_REGION, f"{label}.bucket must be one of days/weeks/months/years", errs)
    if region in REGION_SPECS and bucket in BUCKET_REGION:
        _require(BUCKET_REGION[bucket] == region, f"{label}: bucket {bucket!r} does not belong to region {region}", errs)
    _require(
        isinstance(rd, int) and not isinstance(rd, bool) and rd >= 1,
        f"{label}.remainingDays must be int >= 1",
        errs,
    )
    return errs


def validate_max_per_region(m: Any, *, label: str = "maxPerRegion") -> List[str]:
    if not isinstance(m, dict):
        return [f"{label} must be dict"]
    errs: List[str] = []
    for k, v in m.items():
        try:
            r = int(k)
        except (TypeError, ValueError):
            errs.append(f"{label}: key {k!r} is not a region number")
            continue
        _require(r in REGION_SPECS, f"{label}: region {r} out of range (1-4)", errs)
        _require(
            isinstance(v, int) and not isinstance(v, bool) and v >= 1,
            f"{label}[{k!r}] must be positive int",
            errs,
        )
    return errs


def validate_state(doc: Any, *, label: str = "state") -> List[str]:
    if not isinstance(doc, dict):
        return [f"{label}: state must be a JSON object"]
    errs: List[str] = []
    tasks = doc.get("tasks", [])
    if not isinstance(tasks, list):
        errs.append(f"{label}: tasks must be list")
    else:
        seen: Dict[str, int] = {}
        for i, t in enumerate(tasks):
            errs.extend(validate_task_dict(t, label=f"{label}: tasks[{i}]"))
            tid = t.get("id") if isinstance(t, dict) else None
            if isinstance(tid, str) and tid:
                if tid in seen:
                    errs.append(f"{label}: tasks[{i}].id duplicates tasks[{seen[tid]}]")
                else:
                    seen[tid] = i
    if "maxPerRegion" in doc:
        errs.extend(validate_max_per_region(doc["maxPerRegion"], label=f"{label}: maxPerRegion"))
    name = doc.get("csvName")
    _require(name is None or isinstance(name, str), f"{label}: csvName must be string", errs)
    return errs


def assert_valid_state(doc: Any) -> None:
    errs = validate_state(doc)
    if errs:
        head = "\n".join(f"- {e}" for e in errs[:20])
        more = f"\n(+{len(errs) - 20} more)" if len(errs) > 20 else ""
        raise StateValidationError(f"Invalid planner state:\n{head}{more}")


__all__ = [
    "StateValidationError",
    "validate_task_dict",
    "validate_max_per_region",
    "validate_state",
    "assert_valid_state",
]
