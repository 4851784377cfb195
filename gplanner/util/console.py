# gplanner/util/console.py
from __future__ import annotations

import os
import sys
from typing import Any


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def obs_enabled() -> bool:
    v = (os.getenv("GPLANNER_OBS_LOG", "") or "").strip().lower()
    return v in {"1", "true", "yes", "on"}


def obs(component: str, msg: str) -> None:
    """Routine diagnostics; silent unless GPLANNER_OBS_LOG is set."""
    if obs_enabled():
        eprint(f"[{component}] INFO: {msg}")


def warn(component: str, msg: str) -> None:
    eprint(f"[{component}] WARN: {msg}")
