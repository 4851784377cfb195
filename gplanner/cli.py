from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
import webbrowser
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import planner
from .bucketing import compact_label, stars
from .config import load_capacity_config, normalize_max_per_region, parse_max_assignment
from .csvcodec import export_filename, tasks_to_csv
from .errors import PlannerError
from .geometry import DEFAULT_SIZE, DiscGeometry
from .lanes import LANE_POLICIES
from .model import Task
from .remote import fetch_csv_text
from .render import render_map_html
from .storage import load_state, save_state
from .summary import due_soon, project_summaries, share_text, task_stats
from .util.console import eprint
from .util.dates import parse_iso_date, today_iso

DEFAULT_OUT = os.path.join("build", "gplanner_map.html")


class _Ctx:
    def __init__(self, args: argparse.Namespace) -> None:
        self.args = args
        self.state_path: Optional[str] = args.state
        if args.today:
            try:
                self.today = parse_iso_date(args.today).isoformat()
            except ValueError:
                raise SystemExit(f"Invalid --today value: {args.today!r} (expected YYYY-MM-DD)")
        else:
            try:
                self.today = today_iso(args.tz)
            except ValueError as e:
                raise SystemExit(f"Invalid --tz value: {e}")
        st = load_state(self.state_path)
        self.state = replace(st, tasks=tuple(planner.renormalize(st.tasks, self.today)))

    @property
    def tasks(self) -> List[Task]:
        return list(self.state.tasks)

    def commit(self, tasks: Optional[List[Task]] = None, **changes) -> None:
        if tasks is not None:
            changes["tasks"] = tuple(tasks)
        self.state = replace(self.state, **changes)
        # save_state warns and returns False on failure; memory stays authoritative
        save_state(self.state, self.state_path)


def _task_line(t: Task) -> str:
    done = " [done]" if t.finished else ""
    proj = f" <{t.project}>" if t.project else ""
    return (
        f"{t.id}  {stars(t.region):<4} {compact_label(t.bucket, t.remaining_days):>4}  "
        f"{t.deadline}{proj} {t.task}{done}"
    )


# --- commands -----------------------------------------------------------------

def cmd_add(ctx: _Ctx) -> None:
    a = ctx.args
    tasks, t = planner.add_task(
        ctx.tasks,
        today=ctx.today,
        deadline=a.deadline,
        description=" ".join(a.text),
        project=a.project or "",
        project_tag=a.tag,
        project_color=a.color,
        max_per_region=ctx.state.max_per_region,
    )
    ctx.commit(tasks)
    print(_task_line(t))


def cmd_edit(ctx: _Ctx) -> None:
    a = ctx.args
    tasks = planner.edit_task(
        ctx.tasks,
        a.id,
        today=ctx.today,
        max_per_region=ctx.state.max_per_region,
        deadline=a.deadline,
        description=a.text,
        project=a.project,
        project_tag=a.tag,
        project_color=a.color,
    )
    ctx.commit(tasks)
    print(_task_line(next(t for t in tasks if t.id == a.id)))


def cmd_done(ctx: _Ctx) -> None:
    ctx.commit(planner.mark_done(ctx.tasks, ctx.args.id, finished_at=ctx.args.at))
    print(f"done {ctx.args.id}")


def cmd_reopen(ctx: _Ctx) -> None:
    ctx.commit(planner.reopen_task(ctx.tasks, ctx.args.id, today=ctx.today, max_per_region=ctx.state.max_per_region))
    print(f"reopened {ctx.args.id}")


def cmd_rm(ctx: _Ctx) -> None:
    ctx.commit(planner.delete_task(ctx.tasks, ctx.args.id))
    print(f"deleted {ctx.args.id}")


def cmd_list(ctx: _Ctx) -> None:
    a = ctx.args
    tasks = ctx.tasks if a.all else [t for t in ctx.tasks if not t.finished]
    for t in sorted(tasks, key=lambda t: t.deadline):
        print(_task_line(t))
    if not a.summary:
        return

    st = task_stats(ctx.tasks)
    print("")
    print(f"total={st.total} active={st.active} completed={st.completed} completion={st.completion_rate:.0%}")
    caps = ctx.state.max_per_region
    print("  ".join(f"{stars(r)} {st.per_region.get(r, 0)}/{caps.get(r)}" for r in sorted(caps, reverse=True)))
    soon = due_soon(ctx.tasks, ctx.today)
    if soon:
        print("due soon:")
        for t in soon:
            print("  " + _task_line(t))
    for ps in project_summaries(ctx.tasks):
        tag = f" #{ps.tag}" if ps.tag else ""
        print(f"{ps.project}{tag} {ps.color}: {ps.active}/{len(ps.tasks)} active")


def cmd_drag(ctx: _Ctx) -> None:
    a = ctx.args
    geom = DiscGeometry(size=float(a.size))
    tasks = planner.drag_task(
        ctx.tasks,
        a.id,
        float(a.x),
        float(a.y),
        today=ctx.today,
        geometry=geom,
        max_per_region=ctx.state.max_per_region,
    )
    if tasks == ctx.tasks:
        print(f"unchanged {a.id}")
        return
    ctx.commit(tasks)
    print(_task_line(next(t for t in tasks if t.id == a.id)))


def cmd_export(ctx: _Ctx) -> None:
    a = ctx.args
    text = tasks_to_csv(ctx.tasks)
    if a.out == "-":
        sys.stdout.write(text)
        return
    name = (a.name or "").strip()
    if name and name != ctx.state.csv_name:
        ctx.commit(csv_name=name)
    out = a.out or export_filename(ctx.state.csv_name, parse_iso_date(ctx.today) if a.today_date else dt.date.today())
    out_path = os.path.abspath(out)
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    print(out_path)


def cmd_import(ctx: _Ctx) -> None:
    a = ctx.args
    if bool(a.file) == bool(a.url):
        raise SystemExit("import: give exactly one of FILE or --url")
    if a.url:
        text = fetch_csv_text(a.url)
    else:
        try:
            with open(a.file, "r", encoding="utf-8-sig", newline="") as f:
                text = f.read()
        except OSError as e:
            raise SystemExit(f"Failed to read {a.file}: {e}")
    tasks = planner.import_csv_text(text, today=ctx.today)
    ctx.commit(tasks)
    print(f"imported {len(tasks)} tasks")


def cmd_render(ctx: _Ctx) -> None:
    a = ctx.args
    html = render_map_html(
        ctx.tasks,
        today=ctx.today,
        geometry=DiscGeometry(size=float(a.size)),
        max_per_region=ctx.state.max_per_region,
        policy=a.layout,
    )

    out_path = os.path.abspath(a.out)
    try:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        # Default relative path from an unwritable CWD: fall back to the user's home.
        if a.out == DEFAULT_OUT:
            fallback = Path.home() / ".gplanner" / "build" / "gplanner_map.html"
            fallback.parent.mkdir(parents=True, exist_ok=True)
            out_path = str(fallback)
            eprint(f"[gplanner] WARN: default output directory is not writable; using {out_path}")
        else:
            raise SystemExit(f"Cannot create output directory '{Path(out_path).parent}': {e}")
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(html)

    print(out_path)

    if a.open:
        try:
            webbrowser.open("file://" + out_path)
        except webbrowser.Error as e:
            eprint(f"[gplanner] WARN: could not open browser: {e}")


def cmd_share(ctx: _Ctx) -> None:
    print(share_text(ctx.tasks))


def cmd_config(ctx: _Ctx) -> None:
    a = ctx.args
    caps = dict(ctx.state.max_per_region)
    changed: Dict[str, object] = {}
    if a.config_file:
        loaded = load_capacity_config(a.config_file)
        if loaded is None:
            raise SystemExit(f"Failed to load capacity config: {a.config_file}")
        caps = loaded
        changed["max_per_region"] = caps
    for item in a.max or []:
        try:
            region, n = parse_max_assignment(item)
        except ValueError as e:
            raise SystemExit(f"Invalid --max value: {e}")
        caps[region] = n
        changed["max_per_region"] = normalize_max_per_region(caps)
    if a.csv_name is not None:
        name = a.csv_name.strip()
        if not name:
            raise SystemExit("--csv-name must not be empty")
        changed["csv_name"] = name
    if changed:
        ctx.commit(**changed)

    for r in sorted(ctx.state.max_per_region, reverse=True):
        print(f"max[{r}]={ctx.state.max_per_region[r]}")
    print(f"csv_name={ctx.state.csv_name}")


# --- parser -------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gplanner",
        description="Circular urgency/importance task planner.",
    )
    ap.add_argument("--state", default=None, help="State JSON path (default: $GPLANNER_HOME/state.json)")
    ap.add_argument("--today", default=None, help="Reference date YYYY-MM-DD (default: today in --tz)")
    ap.add_argument(
        "--tz",
        default=os.getenv("GPLANNER_TZ", "local"),
        help="Timezone for 'today' (default: env GPLANNER_TZ or 'local')",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add a task")
    p.add_argument("deadline", help="Deadline (YYYY-MM-DD or M/D/YYYY)")
    p.add_argument("text", nargs="+", help="Task description")
    p.add_argument("--project", default="")
    p.add_argument("--tag", default=None)
    p.add_argument("--color", default=None, help="Project colour #rrggbb")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("edit", help="Edit a task")
    p.add_argument("id")
    p.add_argument("--deadline", default=None)
    p.add_argument("--text", default=None)
    p.add_argument("--project", default=None)
    p.add_argument("--tag", default=None)
    p.add_argument("--color", default=None)
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("done", help="Mark a task finished")
    p.add_argument("id")
    p.add_argument("--at", default=None, help="Finished timestamp (default: now, UTC)")
    p.set_defaults(func=cmd_done)

    p = sub.add_parser("reopen", help="Clear a task's finished mark")
    p.add_argument("id")
    p.set_defaults(func=cmd_reopen)

    p = sub.add_parser("rm", help="Delete a task")
    p.add_argument("id")
    p.set_defaults(func=cmd_rm)

    p = sub.add_parser("list", help="List tasks by deadline")
    p.add_argument("--all", action="store_true", help="Include finished tasks")
    p.add_argument("--summary", action="store_true", help="Also print counts, due-soon tasks and projects")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("drag", help="Move a task to the map position (x, y)")
    p.add_argument("id")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)
    p.add_argument("--size", type=float, default=DEFAULT_SIZE, help="Map size in px (default: 900)")
    p.set_defaults(func=cmd_drag)

    p = sub.add_parser("export", help="Export tasks as CSV")
    p.add_argument("--name", default=None, help="Export base name (remembered)")
    p.add_argument("--out", default=None, help="Output path, or '-' for stdout (default: {name}_{date}.csv)")
    p.add_argument("--today-date", action="store_true", help="Stamp the file name with --today instead of the clock")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace tasks with a CSV file or URL")
    p.add_argument("file", nargs="?", default=None)
    p.add_argument("--url", default=None)
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("render", help="Render the map to a self-contained HTML file")
    p.add_argument("--out", default=DEFAULT_OUT, help="Output HTML path (default: ./build/gplanner_map.html)")
    p.add_argument("--layout", choices=LANE_POLICIES, default="spread")
    p.add_argument("--size", type=float, default=DEFAULT_SIZE)
    p.add_argument("--open", action="store_true", help="Open the generated HTML in a browser")
    p.set_defaults(func=cmd_render)

    p = sub.add_parser("share", help="Print a plain-text schedule")
    p.set_defaults(func=cmd_share)

    p = sub.add_parser("config", help="Show or change capacity and export name")
    p.add_argument("--max", action="append", metavar="REGION=N", help="Region capacity (repeatable)")
    p.add_argument("--csv-name", default=None)
    p.add_argument("--config-file", default=None, help="Load capacities from a JSON file")
    p.set_defaults(func=cmd_config)
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    func: Callable[[_Ctx], None] = args.func
    ctx = _Ctx(args)
    try:
        func(ctx)
    except PlannerError as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
