from __future__ import annotations

import re
import unittest
from dataclasses import replace

from gplanner.bucketing import bucket_from_days, days_for_step
from gplanner.errors import CapacityExceededError, InvalidDeadlineError, InvalidTaskError, TaskNotFoundError
from gplanner.geometry import DiscGeometry, dot_position
from gplanner.palette import fallback_project_color
from gplanner.planner import (
    add_task,
    delete_task,
    drag_task,
    edit_task,
    mark_done,
    new_task_id,
    region_counts,
    renormalize,
    reopen_task,
)

from _fixtures import TODAY, make_task


class TestAddTaskContract(unittest.TestCase):
    def test_three_days_out(self) -> None:
        tasks, t = add_task([], today=TODAY, deadline="2024-01-04", description="Draft")
        self.assertEqual(len(tasks), 1)
        self.assertEqual((t.region, t.bucket, t.remaining_days), (4, "days", 3))
        self.assertEqual(t.date, TODAY)

    def test_thirty_one_days_out(self) -> None:
        _, t = add_task([], today=TODAY, deadline="2024-02-01", description="Report")
        self.assertEqual((t.region, t.bucket, t.remaining_days), (2, "months", 31))

    def test_accepts_mdy_deadline(self) -> None:
        _, t = add_task([], today=TODAY, deadline="1/4/2024", description="x")
        self.assertEqual(t.deadline, "2024-01-04")

    def test_rejects_deadlines_outside_range(self) -> None:
        for deadline in ("2024-01-01", "2023-12-31", "2034-01-01", "nope", ""):
            with self.assertRaises(InvalidDeadlineError, msg=deadline):
                add_task([], today=TODAY, deadline=deadline, description="x")

    def test_rejects_blank_text(self) -> None:
        with self.assertRaises(InvalidTaskError):
            add_task([], today=TODAY, deadline="2024-01-04", description="   ")

    def test_capacity_is_enforced(self) -> None:
        caps = {1: 10, 2: 10, 3: 10, 4: 2}
        tasks = [make_task("a", 2), make_task("b", 5)]
        with self.assertRaises(CapacityExceededError) as ctx:
            add_task(tasks, today=TODAY, deadline="2024-01-04", description="third", max_per_region=caps)
        self.assertEqual(len(tasks), 2)
        self.assertEqual((ctx.exception.region, ctx.exception.count, ctx.exception.limit), (4, 2, 2))
        self.assertIn("2/2", str(ctx.exception))
        # other regions are unaffected
        out, _ = add_task(tasks, today=TODAY, deadline="2024-01-20", description="weeks", max_per_region=caps)
        self.assertEqual(len(out), 3)

    def test_finished_tasks_free_capacity(self) -> None:
        caps = {4: 1}
        tasks = [make_task("a", 2, finished_at="2024-01-01T09:00:00Z")]
        out, _ = add_task(tasks, today=TODAY, deadline="2024-01-04", description="x", max_per_region=caps)
        self.assertEqual(len(out), 2)

    def test_project_tag_is_reused_when_omitted(self) -> None:
        tasks = [replace(make_task("a", 3, project="Beta"), project_tag="b")]
        _, t = add_task(tasks, today=TODAY, deadline="2024-01-05", description="x", project="beta")
        self.assertEqual(t.project_tag, "b")
        _, t = add_task(tasks, today=TODAY, deadline="2024-01-05", description="x", project="Beta", project_tag="")
        self.assertIsNone(t.project_tag)

    def test_color_is_resolved_and_deterministic(self) -> None:
        tasks, a = add_task([], today=TODAY, deadline="2024-01-04", description="a", project="Garden")
        _, b = add_task(tasks, today=TODAY, deadline="2024-01-05", description="b", project="garden")
        self.assertEqual(a.project_color, b.project_color)
        self.assertEqual(a.project_color, fallback_project_color("Garden"))
        _, c = add_task([], today=TODAY, deadline="2024-01-05", description="c", project="Garden", project_color="#123456")
        self.assertEqual(c.project_color, "#123456")

    def test_input_list_is_not_mutated(self) -> None:
        tasks = [make_task("a", 2)]
        out, _ = add_task(tasks, today=TODAY, deadline="2024-01-04", description="x")
        self.assertEqual(len(tasks), 1)
        self.assertIsNot(out, tasks)

    def test_new_task_id_shape(self) -> None:
        self.assertRegex(new_task_id(), re.compile(r"^task-\d+-[0-9a-z]+$"))
        self.assertNotEqual(new_task_id(), new_task_id())


class TestEditDeleteDoneContract(unittest.TestCase):
    def test_edit_text_keeps_placement(self) -> None:
        tasks = [make_task("a", 3)]
        out = edit_task(tasks, "a", today=TODAY, description="renamed")
        self.assertEqual(out[0].task, "renamed")
        self.assertEqual((out[0].region, out[0].remaining_days), (4, 3))

    def test_edit_deadline_moves_region_subject_to_capacity(self) -> None:
        tasks = [make_task("a", 3), make_task("w", 10)]
        caps = {1: 10, 2: 10, 3: 1, 4: 10}
        with self.assertRaises(CapacityExceededError):
            edit_task(tasks, "a", today=TODAY, deadline="2024-01-15", max_per_region=caps)
        # staying in its own full region is fine
        out = edit_task(tasks, "w", today=TODAY, deadline="2024-01-20", max_per_region=caps)
        self.assertEqual(out[1].remaining_days, 19)

    def test_edit_rejects_bad_deadline(self) -> None:
        with self.assertRaises(InvalidDeadlineError):
            edit_task([make_task("a", 3)], "a", today=TODAY, deadline="2099-01-01")

    def test_edit_of_finished_task_keeps_frozen_placement(self) -> None:
        done = mark_done([make_task("a", 19)], "a", finished_at="2024-01-02T00:00:00Z")
        for today in ("2024-01-15", "2024-02-01"):
            out = edit_task(done, "a", today=today, description="renamed")
            self.assertEqual(out[0].task, "renamed")
            self.assertEqual((out[0].region, out[0].remaining_days, out[0].deadline), (3, 19, "2024-01-20"))
            self.assertTrue(out[0].finished)
        with self.assertRaises(InvalidDeadlineError):
            edit_task(done, "a", today="2024-02-01", deadline="2024-01-20")

    def test_text_edit_of_overdue_task(self) -> None:
        out = edit_task([make_task("a", 3)], "a", today="2024-01-10", description="late")
        self.assertEqual((out[0].region, out[0].remaining_days, out[0].deadline), (4, 1, "2024-01-04"))

    def test_unknown_ids(self) -> None:
        for op in (
            lambda: delete_task([], "x"),
            lambda: mark_done([], "x"),
            lambda: edit_task([], "x", today=TODAY),
        ):
            with self.assertRaises(TaskNotFoundError):
                op()

    def test_delete(self) -> None:
        tasks = [make_task("a", 3), make_task("b", 4)]
        self.assertEqual([t.id for t in delete_task(tasks, "a")], ["b"])
        self.assertEqual(len(tasks), 2)

    def test_done_then_reopen(self) -> None:
        tasks = [make_task("a", 3)]
        done = mark_done(tasks, "a", finished_at="2024-01-02T10:00:00Z")
        self.assertTrue(done[0].finished)
        self.assertEqual(region_counts(done)[4], 0)
        back = reopen_task(done, "a", today="2024-01-02")
        self.assertFalse(back[0].finished)
        self.assertEqual(back[0].remaining_days, 2)

    def test_reopen_respects_capacity(self) -> None:
        tasks = [make_task("a", 3, finished_at="2024-01-01T00:00:00Z"), make_task("b", 4)]
        with self.assertRaises(CapacityExceededError):
            reopen_task(tasks, "a", today=TODAY, max_per_region={4: 1})


class TestRenormalizeContract(unittest.TestCase):
    def test_moving_today_replaces_tasks(self) -> None:
        tasks = [make_task("a", 19)]
        self.assertEqual(tasks[0].region, 3)
        out = renormalize(tasks, "2024-01-15")
        self.assertEqual((out[0].region, out[0].bucket, out[0].remaining_days), (4, "days", 5))

    def test_overdue_pins_to_one_day(self) -> None:
        out = renormalize([make_task("a", 3)], "2024-02-01")
        self.assertEqual((out[0].region, out[0].remaining_days), (4, 1))

    def test_finished_tasks_are_frozen(self) -> None:
        t = make_task("a", 19, finished_at="2024-01-02T00:00:00Z")
        out = renormalize([t], "2024-01-15")
        self.assertIs(out[0], t)

    def test_unreadable_deadline_falls_back(self) -> None:
        t = replace(make_task("a", 19), deadline="someday")
        out = renormalize([t], TODAY)
        self.assertEqual((out[0].region, out[0].bucket, out[0].remaining_days), (4, "days", 1))

    def test_unchanged_tasks_are_reused(self) -> None:
        t = make_task("a", 3)
        self.assertIs(renormalize([t], TODAY)[0], t)


class TestDragContract(unittest.TestCase):
    def setUp(self) -> None:
        self.g = DiscGeometry()

    def test_drag_to_step_position(self) -> None:
        tasks = [make_task("a", 100)]
        pos = dot_position(self.g, 4, 3, 0, 1)
        out = drag_task(tasks, "a", pos.x, pos.y, today=TODAY, geometry=self.g)
        t = out[0]
        self.assertEqual((t.region, t.remaining_days, t.deadline), (4, 3, "2024-01-04"))

    def test_drag_reclassifies_to_target_step(self) -> None:
        for region, step in ((3, 2), (2, 5), (1, 9)):
            pos = dot_position(self.g, region, step, 2, 10)
            out = drag_task([make_task("a", 3)], "a", pos.x, pos.y, today=TODAY, geometry=self.g)
            t = out[0]
            p = bucket_from_days(t.remaining_days)
            self.assertEqual((t.region, p.region, p.step), (region, region, step))
            self.assertEqual(t.remaining_days, days_for_step(region, step))

    def test_dead_zone_is_a_no_op(self) -> None:
        tasks = [make_task("a", 100)]
        out = drag_task(tasks, "a", self.g.cx + 1, self.g.cy - 1, today=TODAY, geometry=self.g)
        self.assertEqual(out, tasks)

    def test_finished_task_does_not_move(self) -> None:
        tasks = [make_task("a", 100, finished_at="2024-01-01T00:00:00Z")]
        pos = dot_position(self.g, 4, 1, 0, 1)
        self.assertEqual(drag_task(tasks, "a", pos.x, pos.y, today=TODAY, geometry=self.g), tasks)

    def test_drag_into_full_region(self) -> None:
        tasks = [make_task("a", 100), make_task("b", 2)]
        pos = dot_position(self.g, 4, 1, 0, 1)
        with self.assertRaises(CapacityExceededError):
            drag_task(tasks, "a", pos.x, pos.y, today=TODAY, geometry=self.g, max_per_region={4: 1})


if __name__ == "__main__":
    unittest.main(verbosity=2)
