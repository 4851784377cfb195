"""Persistence of planner state.

One JSON document with three slots:

    {"tasks": [...], "maxPerRegion": {"4": 10, ...}, "csvName": "planner_tasks"}

Reads never fail: a missing file gives the defaults and a corrupt slot is
replaced by its default (reported under GPLANNER_OBS_LOG). Writes never
raise either; a failed write is warned about and reported as False, and the
caller's in-memory list stays authoritative.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CSV_NAME, default_state_path, normalize_max_per_region
from .model import PlannerState, Task
from .util.console import obs, warn
from .validate import validate_max_per_region, validate_task_dict

_OBS = "gplanner.storage"


def _read_json(path: str) -> Optional[Any]:
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        obs(_OBS, f"cannot read {path}: {e}; using defaults")
        return None


def _load_tasks(raw: Any) -> List[Task]:
    if not isinstance(raw, list):
        if raw is not None:
            obs(_OBS, "tasks slot is not a list; ignoring")
        return []
    out: List[Task] = []
    for i, d in enumerate(raw):
        errs = validate_task_dict(d, label=f"tasks[{i}]")
        if errs:
            obs(_OBS, f"dropping {errs[0]}")
            continue
        out.append(Task.from_dict(d))
    return out


def state_from_dict(doc: Any) -> PlannerState:
    if not isinstance(doc, dict):
        return PlannerState()
    caps = doc.get("maxPerRegion")
    if caps is not None:
        for e in validate_max_per_region(caps):
            obs(_OBS, f"ignoring {e}")
    name = doc.get("csvName")
    return PlannerState(
        tasks=tuple(_load_tasks(doc.get("tasks"))),
        max_per_region=normalize_max_per_region(caps),
        csv_name=name.strip() if isinstance(name, str) and name.strip() else DEFAULT_CSV_NAME,
    )


def state_to_dict(state: PlannerState) -> Dict[str, Any]:
    return {
        "tasks": [t.to_dict() for t in state.tasks],
        "maxPerRegion": {str(k): int(v) for k, v in sorted(state.max_per_region.items())},
        "csvName": state.csv_name,
    }


def load_state(path: Optional[str] = None) -> PlannerState:
    return state_from_dict(_read_json(path or default_state_path()))


def save_state(state: PlannerState, path: Optional[str] = None) -> bool:
    """Write `state` atomically (tmp file + rename). False if it was not saved."""
    target = Path(path or default_state_path())
    tmp = target.with_name(target.name + ".tmp")
    try:
        data = json.dumps(state_to_dict(state), ensure_ascii=False, indent=2)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(data)
            f.write("\n")
        os.replace(tmp, target)
    except (OSError, TypeError, ValueError) as e:
        warn(_OBS, f"could not save planner state to {target}: {e}")
        try:
            if tmp.exists():
                tmp.unlink()
        except OSError:
            pass
        return False
    return True


__all__ = [
    "state_from_dict",
    "state_to_dict",
    "load_state",
    "save_state",
]
