from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest.mock import patch

from gplanner.config import (
    default_state_path,
    fetch_timeout_s,
    load_capacity_config,
    normalize_max_per_region,
    parse_max_assignment,
)
from gplanner.model import DEFAULT_MAX_PER_REGION, PlannerState, Task
from gplanner.planner import import_csv_text
from gplanner.storage import load_state, save_state, state_to_dict
from gplanner.validate import StateValidationError, assert_valid_state, validate_task_dict

from _fixtures import make_task


class TestStorageContract(unittest.TestCase):
    def test_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = str(Path(td) / "nested" / "state.json")
            tasks = (make_task("a", 3, project="P", color="#abcdef"), make_task("b", 40, finished_at="2024-01-02T00:00:00Z"))
            st = PlannerState(tasks=tasks, max_per_region={1: 10, 2: 10, 3: 4, 4: 2}, csv_name="mine")
            self.assertTrue(save_state(st, path))
            back = load_state(path)
            self.assertEqual(back, st)
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(raw["maxPerRegion"]["4"], 2)
            self.assertEqual(raw["tasks"][0]["remainingDays"], 3)
            self.assertNotIn("finishedAt", raw["tasks"][0])

    def test_imported_tasks_survive_reload(self) -> None:
        tasks = import_csv_text("id,deadline,task\na,2024-01-04,\nb,2024-01-05,ok\n", today="2024-01-01")
        self.assertEqual([t.id for t in tasks], ["b"])
        with tempfile.TemporaryDirectory() as td:
            path = str(Path(td) / "state.json")
            self.assertTrue(save_state(PlannerState(tasks=tuple(tasks)), path))
            back = load_state(path)
        self.assertEqual(back.tasks, tuple(tasks))

    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            st = load_state(str(Path(td) / "none.json"))
        self.assertEqual(st.tasks, ())
        self.assertEqual(st.max_per_region, DEFAULT_MAX_PER_REGION)
        self.assertEqual(st.csv_name, "planner_tasks")

    def test_corrupt_file_and_bad_slots_fall_back(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "state.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_state(str(p)), PlannerState())

            good = make_task("ok", 3).to_dict()
            p.write_text(
                json.dumps({"tasks": [good, {"id": "bad"}, 7], "maxPerRegion": {"4": 3, "9": 1, "2": -1}, "csvName": 5}),
                encoding="utf-8",
            )
            st = load_state(str(p))
        self.assertEqual([t.id for t in st.tasks], ["ok"])
        self.assertEqual(st.max_per_region, {1: 10, 2: 10, 3: 10, 4: 3})
        self.assertEqual(st.csv_name, "planner_tasks")

    def test_write_failure_is_swallowed_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            blocker = Path(td) / "file"
            blocker.write_text("x", encoding="utf-8")
            buf = io.StringIO()
            with redirect_stderr(buf):
                ok = save_state(PlannerState(), str(blocker / "state.json"))
        self.assertFalse(ok)
        self.assertIn("[gplanner.storage] WARN:", buf.getvalue())

    def test_default_path_honours_env(self) -> None:
        with patch.dict(os.environ, {"GPLANNER_HOME": "/tmp/gp-home"}):
            self.assertEqual(default_state_path(), os.path.join("/tmp/gp-home", "state.json"))

    def test_state_dict_validates(self) -> None:
        st = PlannerState(tasks=(make_task("a", 3),))
        assert_valid_state(state_to_dict(st))
        with self.assertRaises(StateValidationError):
            assert_valid_state({"tasks": [make_task("a", 3).to_dict(), make_task("a", 4).to_dict()]})


class TestValidateContract(unittest.TestCase):
    def test_task_dict_errors(self) -> None:
        self.assertEqual(validate_task_dict(make_task("a", 3).to_dict()), [])
        d = make_task("a", 3).to_dict()
        d["bucket"] = "weeks"
        self.assertTrue(any("does not belong" in e for e in validate_task_dict(d)))
        d = make_task("a", 3).to_dict()
        d["remainingDays"] = 0
        self.assertTrue(validate_task_dict(d))
        self.assertEqual(validate_task_dict("x"), ["task must be dict"])

    def test_from_dict_round_trip(self) -> None:
        t = make_task("a", 3, project="P", color="#010203")
        self.assertEqual(Task.from_dict(t.to_dict()), t)


class TestConfigContract(unittest.TestCase):
    def test_normalize_merges_over_defaults(self) -> None:
        out = normalize_max_per_region({"4": 2, 3: "5", "x": 1, "1": 0, "2": 2.5, "3.0": True})
        self.assertEqual(out, {1: 10, 2: 10, 3: 5, 4: 2})
        self.assertEqual(normalize_max_per_region(None), DEFAULT_MAX_PER_REGION)

    def test_parse_max_assignment(self) -> None:
        self.assertEqual(parse_max_assignment("4=3"), (4, 3))
        for bad in ("4", "5=1", "4=0", "a=b"):
            with self.assertRaises(ValueError):
                parse_max_assignment(bad)

    def test_load_capacity_config_formats(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            a = Path(td) / "a.json"
            a.write_text(json.dumps({"max_per_region": {"4": 3}}), encoding="utf-8")
            b = Path(td) / "b.json"
            b.write_text(json.dumps({"2": 7}), encoding="utf-8")
            c = Path(td) / "c.json"
            c.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(load_capacity_config(str(a))[4], 3)
            self.assertEqual(load_capacity_config(str(b))[2], 7)
            self.assertIsNone(load_capacity_config(str(c)))
            self.assertIsNone(load_capacity_config(str(Path(td) / "missing.json")))

    def test_fetch_timeout_env(self) -> None:
        with patch.dict(os.environ, {"GPLANNER_FETCH_TIMEOUT_S": "5"}):
            self.assertEqual(fetch_timeout_s(), 5.0)
        with patch.dict(os.environ, {"GPLANNER_FETCH_TIMEOUT_S": "soon"}):
            self.assertEqual(fetch_timeout_s(), 30.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
